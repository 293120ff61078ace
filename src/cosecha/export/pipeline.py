"""Document export pipeline.

Turns a RenderRequest into a delivered PDF file:

1. Render the document variant to HTML
2. Mount it on a fresh off-screen surface (800px wide, white)
3. Settle: wait for layout/paint to complete
4. Rasterize the document root at 2x
5. Re-encode the capture as a lossless PNG
6. Paginate: one page 210 mm wide, height following the capture's aspect ratio
7. Place the image at the page origin, finalize, and write the file
8. Close the surface (on every exit path)

Any failure surfaces as a single ExportError naming the failed step.
"""

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

from cosecha.config import CosechaConfig
from cosecha.export.base import ExportError, ExportStage, RenderBackend, RenderSurface
from cosecha.export.dto import ExportResult
from cosecha.export.pdf import build_image_pdf, encode_png, page_size_mm
from cosecha.models import RenderRequest
from cosecha.templates import ROOT_SELECTOR, DocumentRenderer
from cosecha.utils.logging import get_logger

logger = get_logger(__name__)


class ExportPipeline:
    """Runs exports against a render backend, one at a time.

    Exports on the same pipeline are serialized: a second export starts only
    after the previous one has closed its surface. Each export still mounts
    its own surface.

    Usage:
        async with PlaywrightBackend(config.browser) as backend:
            pipeline = ExportPipeline(backend, config)
            result = await pipeline.export(request)
    """

    def __init__(
        self,
        backend: RenderBackend,
        config: CosechaConfig | None = None,
        renderer: DocumentRenderer | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the pipeline.

        Args:
            backend: Started render backend
            config: Cosecha configuration (export settings)
            renderer: HTML renderer (defaults to one built from ``config``)
            sleep: Coroutine used for the fixed settle delay
        """
        self.backend = backend
        self.config = config or CosechaConfig()
        self.renderer = renderer or DocumentRenderer(self.config)
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def export(
        self,
        request: RenderRequest,
        output_dir: Path | None = None,
    ) -> ExportResult:
        """Export a document and deliver it under ``request.filename``.

        Args:
            request: Document and target filename
            output_dir: Delivery directory (defaults to export.output_dir)

        Returns:
            ExportResult describing the delivered file

        Raises:
            ExportError: If any step fails; no file is left behind
        """
        async with self._lock:
            return await self._run(request, output_dir or Path(self.config.export.output_dir))

    async def _run(self, request: RenderRequest, output_dir: Path) -> ExportResult:
        options = self.config.export
        filename = request.filename
        stage = ExportStage.RENDER

        logger.debug("Exporting %s document to %s", request.kind.value, filename)

        try:
            html = self.renderer.render(request.document)

            stage = ExportStage.MOUNT
            async with self.backend.mount(
                html,
                width=options.container_width,
                scale=options.scale,
            ) as surface:
                async with asyncio.timeout(options.timeout_seconds):
                    stage = ExportStage.SETTLE
                    await self._settle(surface)

                    stage = ExportStage.RASTERIZE
                    raw = await surface.capture(ROOT_SELECTOR)

                stage = ExportStage.ENCODE
                image = encode_png(raw)
                logger.debug("Captured %dx%d pixels", image.width, image.height)

                stage = ExportStage.PAGINATE
                page_width, page_height = page_size_mm(image.width, image.height, options.page_width_mm)
                pdf_bytes = build_image_pdf(
                    image,
                    page_width_mm=options.page_width_mm,
                    title=filename,
                )

                stage = ExportStage.DELIVER
                path = await asyncio.to_thread(_deliver, pdf_bytes, output_dir / filename)

                stage = ExportStage.CLEANUP

        except TimeoutError as e:
            logger.error("Export of %s timed out during %s", filename, stage.value)
            raise ExportError(
                filename, stage, f"timed out after {options.timeout_ms} ms"
            ) from e
        except Exception as e:
            logger.error("Export of %s failed during %s: %s", filename, stage.value, e)
            raise ExportError(filename, stage, str(e) or type(e).__name__) from e

        logger.structured(
            logging.INFO,
            f"Exported {path} ({page_width:.1f} x {page_height:.1f} mm, {len(pdf_bytes)} bytes)",
            filename=filename,
            path=str(path),
            page_width_mm=page_width,
            page_height_mm=page_height,
            size_bytes=len(pdf_bytes),
        )

        return ExportResult(
            pdf_bytes=pdf_bytes,
            filename=filename,
            path=path,
            page_width_mm=page_width,
            page_height_mm=page_height,
            capture_width=image.width,
            capture_height=image.height,
        )

    async def _settle(self, surface: RenderSurface) -> None:
        if self.config.export.settle == "delay":
            await self._sleep(self.config.export.settle_delay_ms / 1000)
        else:
            await surface.wait_until_painted()


def _deliver(pdf_bytes: bytes, path: Path) -> Path:
    """Write the PDF via a temporary sibling so a failed write leaves no file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    partial = path.with_name(path.name + ".part")
    try:
        partial.write_bytes(pdf_bytes)
        os.replace(partial, path)
    finally:
        partial.unlink(missing_ok=True)
    return path.resolve()
