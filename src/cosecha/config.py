"""Cosecha configuration system.

Configuration is YAML-based with minimal CLI overrides (--config, --output-dir).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.cosecha/config.yaml
3. ./cosecha.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

VALID_SETTLE_STRATEGIES = {"signal", "delay"}

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class FarmConfig:
    """Farm identity and entry defaults.

    Attributes:
        name: Farm name printed on every document
        default_price_per_kg: Price pre-filled in the entry form (COP)
        date_format: strftime format for entry dates
        currency: Currency code shown on documents
    """

    name: str = 'Finca "La Esperanza"'
    default_price_per_kg: float = 3000
    date_format: str = "%d/%m/%Y"
    currency: str = "COP"

    def __post_init__(self) -> None:
        """Validate farm configuration."""
        if not self.name.strip():
            raise ValueError("Farm name must not be empty")
        if self.default_price_per_kg < 0:
            raise ValueError(
                f"Default price per kg must be non-negative (got {self.default_price_per_kg})"
            )


@dataclass
class ExportConfig:
    """Document export configuration.

    Attributes:
        output_dir: Directory receiving exported PDF files
        container_width: Width of the off-screen render container in CSS pixels
        scale: Rasterization oversampling factor
        page_width_mm: Page width in millimeters (A4 portrait)
        settle: How to wait for layout/paint ("signal" or "delay")
        settle_delay_ms: Fixed wait used by the "delay" strategy
        timeout_ms: Upper bound for settle + capture (None disables it)
    """

    output_dir: str = "."
    container_width: int = 800
    scale: float = 2.0
    page_width_mm: float = 210.0
    settle: str = "signal"
    settle_delay_ms: int = 100
    timeout_ms: int | None = 30000

    def __post_init__(self) -> None:
        """Validate export configuration."""
        if self.settle not in VALID_SETTLE_STRATEGIES:
            raise ValueError(
                f"Invalid settle strategy: {self.settle}. Valid: {VALID_SETTLE_STRATEGIES}"
            )
        if self.container_width <= 0:
            raise ValueError(f"Container width must be positive (got {self.container_width})")
        if self.scale <= 0:
            raise ValueError(f"Scale must be positive (got {self.scale})")
        if self.page_width_mm <= 0:
            raise ValueError(f"Page width must be positive (got {self.page_width_mm})")
        if self.settle_delay_ms < 0:
            raise ValueError(f"Settle delay must be non-negative (got {self.settle_delay_ms})")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError(f"Timeout must be positive or null (got {self.timeout_ms})")

    @property
    def timeout_seconds(self) -> float | None:
        """Timeout in seconds, or None when disabled."""
        return None if self.timeout_ms is None else self.timeout_ms / 1000


@dataclass
class BrowserConfig:
    """Headless browser used as the off-screen render surface.

    Attributes:
        headless: Run Chromium without a window
        executable_path: Use this Chromium binary instead of Playwright's
    """

    headless: bool = True
    executable_path: str | None = None


@dataclass
class CosechaConfig:
    """Top-level Cosecha configuration.

    Attributes:
        farm: Farm identity and form defaults
        export: Export pipeline settings
        browser: Render surface settings
    """

    farm: FarmConfig = field(default_factory=FarmConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)

    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax. Example: ${COSECHA_OUTPUT} -> value of COSECHA_OUTPUT

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_RE.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.cosecha/config.yaml
    2. ./cosecha.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".cosecha" / "config.yaml",
        start_path / "cosecha.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def _parse_bool(value: Any, name: str) -> bool:
    """Read a boolean that may arrive as text after ${VAR} substitution."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def _optional_int(value: Any) -> int | None:
    if value is None or (isinstance(value, str) and value.strip().lower() in {"", "null", "none"}):
        return None
    return int(value)



def load_config_from_dict(data: dict[str, Any]) -> CosechaConfig:
    """Load configuration from a dictionary.

    Unknown keys are ignored; missing keys keep their defaults.

    Args:
        data: Configuration dictionary

    Returns:
        CosechaConfig instance

    Raises:
        ValueError: If a value is invalid or an env var is missing
    """
    data = substitute_env_vars(data)

    config = CosechaConfig()

    if "farm" in data:
        farm_data = data["farm"] or {}
        config.farm = FarmConfig(
            name=farm_data.get("name", config.farm.name),
            default_price_per_kg=float(
                farm_data.get("default_price_per_kg", config.farm.default_price_per_kg)
            ),
            date_format=farm_data.get("date_format", config.farm.date_format),
            currency=farm_data.get("currency", config.farm.currency),
        )

    if "export" in data:
        export_data = data["export"] or {}
        defaults = config.export
        config.export = ExportConfig(
            output_dir=str(export_data.get("output_dir", defaults.output_dir)),
            container_width=int(export_data.get("container_width", defaults.container_width)),
            scale=float(export_data.get("scale", defaults.scale)),
            page_width_mm=float(export_data.get("page_width_mm", defaults.page_width_mm)),
            settle=export_data.get("settle", defaults.settle),
            settle_delay_ms=int(export_data.get("settle_delay_ms", defaults.settle_delay_ms)),
            timeout_ms=_optional_int(export_data.get("timeout_ms", defaults.timeout_ms)),
        )

    if "browser" in data:
        browser_data = data["browser"] or {}
        config.browser = BrowserConfig(
            headless=_parse_bool(browser_data.get("headless", True), "browser.headless"),
            executable_path=browser_data.get("executable_path"),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> CosechaConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        CosechaConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = CosechaConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# Cosecha Configuration

# Farm identity and form defaults
farm:
  name: 'Finca "La Esperanza"'
  default_price_per_kg: 3000   # COP
  date_format: "%d/%m/%Y"
  currency: "COP"

# Document export
export:
  output_dir: "."
  container_width: 800   # CSS pixels
  scale: 2               # rasterization oversampling
  page_width_mm: 210     # A4 portrait width
  settle: "signal"       # signal (paint-complete) or delay (fixed wait)
  settle_delay_ms: 100   # used by the delay strategy
  timeout_ms: 30000      # null disables the timeout

# Headless Chromium render surface
browser:
  headless: true
  # executable_path: "/usr/bin/chromium"
'''
