"""Preflight validation for document export.

Exports need Playwright with a Chromium build, ReportLab and Pillow. All of
them are checked up front so a missing piece is reported before anyone tries
to print a receipt, not halfway through an export.
"""

from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Any


@dataclass
class ToolCheck:
    """Result of checking a single dependency.

    Attributes:
        name: Dependency name
        available: Whether it is usable
        version: Version if available
        required: Whether exports need it
        path: Path to the executable, for binaries
        message: Status message (human-readable context)
    """

    name: str
    available: bool
    version: str | None = None
    required: bool = True
    path: str | None = None
    message: str = ""


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether all required dependencies are available
        checks: Individual check results
        errors: Error messages for missing required dependencies
        warnings: Warning messages for missing optional dependencies
    """

    success: bool = True
    checks: list[ToolCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: ToolCheck) -> None:
        """Add a check result."""
        self.checks.append(check)

        if not check.available:
            if check.required:
                self.success = False
                self.errors.append(f"Required dependency not found: {check.name}")
            else:
                self.warnings.append(f"Optional dependency not found: {check.name}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [
                {
                    "name": c.name,
                    "available": c.available,
                    "version": c.version,
                    "required": c.required,
                    "path": c.path,
                    "message": c.message,
                }
                for c in self.checks
            ],
            "errors": self.errors,
            "warnings": self.warnings,
        }


class PreflightChecker:
    """Validates export dependencies.

    Usage:
        result = PreflightChecker().check_all()
        if not result.success:
            sys.exit(1)
    """

    def __init__(self, executable_path: str | None = None) -> None:
        """Initialize preflight checker.

        Args:
            executable_path: Configured Chromium binary, if not Playwright's own
        """
        self.executable_path = executable_path

    def check_package(self, distribution: str, message: str, required: bool = True) -> ToolCheck:
        """Check that a Python distribution is installed.

        Args:
            distribution: Name on the package index (e.g., "reportlab")
            message: What the package is used for
            required: Whether exports need it
        """
        try:
            version = metadata.version(distribution)
        except metadata.PackageNotFoundError:
            return ToolCheck(
                name=distribution,
                available=False,
                required=required,
                message=f"Install with: pip install {distribution}",
            )
        return ToolCheck(
            name=distribution,
            available=True,
            version=version,
            required=required,
            message=message,
        )

    def check_chromium(self, required: bool = True) -> ToolCheck:
        """Check that a Chromium binary is present for Playwright."""
        path = self.executable_path
        if path is None:
            try:
                from playwright.sync_api import sync_playwright

                with sync_playwright() as p:
                    path = p.chromium.executable_path
            except Exception as e:
                return ToolCheck(
                    name="chromium",
                    available=False,
                    required=required,
                    message=f"Playwright driver unavailable: {e}",
                )

        if not path or not Path(path).exists():
            return ToolCheck(
                name="chromium",
                available=False,
                required=required,
                path=path,
                message="Install with: playwright install chromium",
            )

        return ToolCheck(
            name="chromium",
            available=True,
            required=required,
            path=path,
            message="Off-screen render surface",
        )

    def check_all(self) -> PreflightResult:
        """Run every export check.

        Returns:
            PreflightResult with all check results
        """
        result = PreflightResult()

        playwright_check = self.check_package("playwright", "Headless browser automation")
        result.add_check(playwright_check)
        if playwright_check.available:
            result.add_check(self.check_chromium())

        result.add_check(self.check_package("reportlab", "PDF writer"))
        result.add_check(self.check_package("pillow", "PNG encoding"))

        return result
