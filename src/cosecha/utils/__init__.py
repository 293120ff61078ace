"""Cosecha utility modules.

- logging: Standardized logging with human/verbose/JSON modes
- preflight: Export dependency checks (Playwright, Chromium, ReportLab, Pillow)
"""

from cosecha.utils.logging import get_logger, setup_logging
from cosecha.utils.preflight import PreflightChecker, PreflightResult

__all__ = [
    "get_logger",
    "setup_logging",
    "PreflightChecker",
    "PreflightResult",
]
