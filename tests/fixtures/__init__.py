"""Test fixtures for Cosecha.

Provides an in-memory render backend so export tests run without a browser:
- FakeBackend: hands out FakeSurface instances and records every mount
- FakeSurface: "captures" a white Pillow image whose height grows with the
  number of table rows in the mounted HTML
"""

import asyncio
from io import BytesIO

from PIL import Image

from cosecha.export import RenderBackend, RenderSurface

BASE_HEIGHT = 300
ROW_HEIGHT = 40


class FakeSurface(RenderSurface):
    """Surface that records its lifecycle and returns a synthetic capture."""

    def __init__(
        self,
        html: str,
        width: int,
        scale: float,
        fail_on: str | None = None,
        hang_on: str | None = None,
        close_fails: bool = False,
    ) -> None:
        self.html = html
        self.width = width
        self.scale = scale
        self.fail_on = fail_on
        self.hang_on = hang_on
        self.close_fails = close_fails
        self.painted = False
        self.captured_selector: str | None = None
        self.closed = False

    async def wait_until_painted(self) -> None:
        if self.hang_on == "settle":
            await asyncio.sleep(3600)
        if self.fail_on == "settle":
            raise RuntimeError("page crashed before paint")
        self.painted = True

    async def capture(self, selector: str) -> bytes:
        if self.hang_on == "capture":
            await asyncio.sleep(3600)
        if self.fail_on == "capture":
            raise RuntimeError("cross-origin image blocked")
        self.captured_selector = selector
        if self.fail_on == "corrupt":
            return b"not an image"

        rows = self.html.count("<tr")
        size = (int(self.width * self.scale), int((BASE_HEIGHT + ROW_HEIGHT * rows) * self.scale))
        buffer = BytesIO()
        Image.new("RGBA", size, (255, 255, 255, 255)).save(buffer, format="PNG")
        return buffer.getvalue()

    async def close(self) -> None:
        if self.close_fails:
            raise RuntimeError("target page already detached")
        self.closed = True


class FakeBackend(RenderBackend):
    """Render backend that never touches a browser.

    Attributes:
        surfaces: Every surface handed out, in mount order
        started: Whether ``start`` ran
        starts: How many times ``start`` ran
        stopped: Whether ``stop`` ran
    """

    def __init__(
        self,
        fail_on: str | None = None,
        hang_on: str | None = None,
        close_fails: bool = False,
    ) -> None:
        super().__init__("fake")
        self.fail_on = fail_on
        self.hang_on = hang_on
        self.close_fails = close_fails
        self.starts = 0
        self.surfaces: list[FakeSurface] = []
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True
        self.starts += 1

    async def stop(self) -> None:
        self.stopped = True

    async def open_surface(self, html: str, *, width: int, scale: float) -> RenderSurface:
        if self.fail_on == "mount":
            raise RuntimeError("could not create page")
        surface = FakeSurface(
            html,
            width,
            scale,
            fail_on=self.fail_on,
            hang_on=self.hang_on,
            close_fails=self.close_fails,
        )
        self.surfaces.append(surface)
        return surface
