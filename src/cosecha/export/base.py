"""Render backend interfaces and export errors.

A RenderBackend mounts HTML on an off-screen RenderSurface. Each surface is
owned by exactly one export: it is mounted through ``RenderBackend.mount``,
an async context manager that closes it on every exit path.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum
from types import TracebackType

logger = logging.getLogger(__name__)


class ExportStage(Enum):
    """Pipeline step in which an export failed."""

    RENDER = "render"
    MOUNT = "mount"
    SETTLE = "settle"
    RASTERIZE = "rasterize"
    ENCODE = "encode"
    PAGINATE = "paginate"
    DELIVER = "deliver"
    CLEANUP = "cleanup"


class ExportError(Exception):
    """Raised when an export fails at any stage.

    Attributes:
        filename: File the export was going to deliver
        stage: Step that failed
    """

    def __init__(self, filename: str, stage: ExportStage, message: str) -> None:
        self.filename = filename
        self.stage = stage
        super().__init__(f"Export failed: {filename} [{stage.value}] - {message}")


class BackendNotAvailableError(Exception):
    """Raised when the render backend cannot be started."""

    def __init__(self, backend_name: str, message: str | None = None) -> None:
        self.backend_name = backend_name
        self.message = message or f"Render backend not available: {backend_name}"
        super().__init__(self.message)


class RenderSurface(ABC):
    """An off-screen rendering of one HTML document."""

    @abstractmethod
    async def wait_until_painted(self) -> None:
        """Return once layout and paint of the mounted document are complete."""

    @abstractmethod
    async def capture(self, selector: str) -> bytes:
        """Rasterize the element matching ``selector``.

        Returns:
            PNG-encoded bitmap at the surface's device scale
        """

    @abstractmethod
    async def close(self) -> None:
        """Discard the rendering and release its resources."""


class RenderBackend(ABC):
    """Abstract source of off-screen render surfaces.

    Backends are async context managers: ``async with backend:`` starts and
    stops whatever engine they drive. Surfaces handed out by ``mount`` are
    tracked until closed so callers can verify nothing is left behind.

    Attributes:
        name: Backend identifier (e.g., "playwright")
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._live: set[RenderSurface] = set()

    @property
    def live_surfaces(self) -> int:
        """Number of mounted surfaces not yet closed."""
        return len(self._live)

    async def start(self) -> None:
        """Start the rendering engine."""

    async def stop(self) -> None:
        """Stop the rendering engine."""

    async def __aenter__(self) -> "RenderBackend":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    @abstractmethod
    async def open_surface(self, html: str, *, width: int, scale: float) -> RenderSurface:
        """Create a new, independent surface with ``html`` mounted on it.

        Args:
            html: Document to mount
            width: Container width in CSS pixels
            scale: Device pixel ratio used when capturing
        """

    @asynccontextmanager
    async def mount(self, html: str, *, width: int, scale: float) -> AsyncIterator[RenderSurface]:
        """Mount ``html`` for the duration of the ``async with`` block.

        The surface is closed when the block exits, whether it completes or
        raises. A surface whose close fails stays counted in ``live_surfaces``;
        if the block was already raising, the close failure is logged and the
        original exception propagates.
        """
        surface = await self.open_surface(html, width=width, scale=scale)
        self._live.add(surface)
        logger.debug("Mounted surface on %s (%d live)", self.name, len(self._live))
        try:
            yield surface
        except BaseException:
            await self._release(surface, suppress_errors=True)
            raise
        await self._release(surface, suppress_errors=False)

    async def _release(self, surface: RenderSurface, suppress_errors: bool) -> None:
        try:
            await surface.close()
        except Exception:
            if not suppress_errors:
                raise
            logger.warning("Failed to close surface on %s", self.name, exc_info=True)
            return
        self._live.discard(surface)
        logger.debug("Closed surface on %s (%d live)", self.name, len(self._live))
