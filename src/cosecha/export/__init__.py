"""Cosecha document export.

Renders receipts and reports off-screen, rasterizes them, and delivers them as
single-page PDF files.
"""

from collections.abc import Iterable
from pathlib import Path

from cosecha.config import CosechaConfig
from cosecha.export.base import (
    BackendNotAvailableError,
    ExportError,
    ExportStage,
    RenderBackend,
    RenderSurface,
)
from cosecha.export.dto import ExportResult
from cosecha.export.pipeline import ExportPipeline
from cosecha.export.playwright_backend import PlaywrightBackend
from cosecha.models import RenderRequest


def create_backend(config: CosechaConfig) -> RenderBackend:
    """Create the render backend described by ``config`` (not yet started)."""
    return PlaywrightBackend(config.browser)


async def run_exports(
    requests: Iterable[RenderRequest],
    config: CosechaConfig,
    output_dir: Path | None = None,
) -> list[ExportResult]:
    """Start a backend, export each request in order, and stop the backend.

    Raises:
        BackendNotAvailableError: If the backend cannot start
        ExportError: On the first failed export
    """
    async with create_backend(config) as backend:
        pipeline = ExportPipeline(backend, config)
        return [await pipeline.export(request, output_dir) for request in requests]


__all__ = [
    "BackendNotAvailableError",
    "ExportError",
    "ExportPipeline",
    "ExportResult",
    "ExportStage",
    "PlaywrightBackend",
    "RenderBackend",
    "RenderSurface",
    "create_backend",
    "run_exports",
]
