"""Shared pytest fixtures for Cosecha tests.

Fixtures are organized by category:
- Configuration fixtures: Test configs writing into tmp_path
- Clock fixtures: Deterministic time for entry ids and dates
- Session fixtures: Stores and sessions with sample entries
- Export fixtures: Browser-free backend and pipeline
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from cosecha.config import CosechaConfig, ExportConfig
from cosecha.export import ExportPipeline
from cosecha.session import HarvestSession
from cosecha.state import LedgerStore
from tests.fixtures import FakeBackend

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Directory receiving exported PDFs."""
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def config(output_dir: Path) -> CosechaConfig:
    """Default configuration delivering into ``output_dir``."""
    return CosechaConfig(export=ExportConfig(output_dir=str(output_dir)))


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete Cosecha configuration with all options."""
    return {
        "farm": {
            "name": "Finca El Roble",
            "default_price_per_kg": 3500,
            "date_format": "%d/%m/%Y",
            "currency": "COP",
        },
        "export": {
            "output_dir": "recibos",
            "container_width": 800,
            "scale": 2,
            "page_width_mm": 210,
            "settle": "delay",
            "settle_delay_ms": 100,
            "timeout_ms": 5000,
        },
        "browser": {
            "headless": True,
            "executable_path": "/usr/bin/chromium",
        },
    }


# =============================================================================
# Clock Fixtures
# =============================================================================


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Clock fixed at 15/03/2024 09:00, advancing one second per call."""
    state = {"now": datetime(2024, 3, 15, 9, 0, 0)}

    def tick() -> datetime:
        current = state["now"]
        state["now"] = current + timedelta(seconds=1)
        return current

    return tick


# =============================================================================
# Session Fixtures
# =============================================================================


@pytest.fixture
def store(clock: Callable[[], datetime]) -> LedgerStore:
    """Empty store using the fixed clock."""
    return LedgerStore(clock=clock)


@pytest.fixture
def harvest_session(config: CosechaConfig, clock: Callable[[], datetime]) -> HarvestSession:
    """Empty session using the fixed clock."""
    return HarvestSession(config, clock=clock)


# =============================================================================
# Export Fixtures
# =============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    """Browser-free render backend."""
    return FakeBackend()


@pytest.fixture
def pipeline(backend: FakeBackend, config: CosechaConfig) -> ExportPipeline:
    """Pipeline over the fake backend."""
    return ExportPipeline(backend, config)
