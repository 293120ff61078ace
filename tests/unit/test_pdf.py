"""Unit tests for raster encoding and PDF assembly."""

import re
from io import BytesIO

import pytest
from PIL import Image

from cosecha.export.pdf import EncodedImage, build_image_pdf, encode_png, page_size_mm

MEDIA_BOX_RE = re.compile(rb"/MediaBox\s*\[\s*0\s+0\s+([\d.]+)\s+([\d.]+)\s*\]")
POINTS_PER_MM = 72 / 25.4


def png_bytes(size: tuple[int, int], mode: str = "RGB", color: tuple[int, ...] = (255, 255, 255)) -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestPageSize:
    """Tests for page size derivation."""

    def test_a4_width_height_follows_aspect(self) -> None:
        """Test the height formula H * 210 / W."""
        width, height = page_size_mm(1600, 1200)

        assert width == 210
        assert height == pytest.approx(157.5)

    def test_tall_capture(self) -> None:
        """Test that long reports produce tall pages instead of extra pages."""
        _, height = page_size_mm(1600, 8000)

        assert height == pytest.approx(1050)

    @pytest.mark.parametrize(("width", "height"), [(0, 100), (100, 0), (-1, 10)])
    def test_non_positive_dimensions_raise(self, width: int, height: int) -> None:
        """Test that empty captures cannot be paginated."""
        with pytest.raises(ValueError, match="must be positive"):
            page_size_mm(width, height)


class TestEncodePng:
    """Tests for PNG re-encoding."""

    def test_dimensions_preserved(self) -> None:
        """Test that the encoded image keeps the capture size."""
        image = encode_png(png_bytes((1600, 900)))

        assert (image.width, image.height) == (1600, 900)
        assert image.data.startswith(b"\x89PNG")

    def test_transparency_composited_on_white(self) -> None:
        """Test that transparent pixels become white."""
        image = encode_png(png_bytes((4, 4), mode="RGBA", color=(0, 0, 0, 0)))

        with Image.open(BytesIO(image.data)) as decoded:
            assert decoded.mode == "RGB"
            assert decoded.getpixel((0, 0)) == (255, 255, 255)

    def test_empty_capture_raises(self) -> None:
        """Test that an empty capture is rejected."""
        with pytest.raises(ValueError, match="empty"):
            encode_png(b"")

    def test_garbage_raises(self) -> None:
        """Test that undecodable bytes are rejected."""
        with pytest.raises(ValueError):
            encode_png(b"not an image")


class TestBuildImagePdf:
    """Tests for single-page PDF assembly."""

    def test_single_page_with_derived_height(self) -> None:
        """Test the page box of the generated PDF."""
        image = encode_png(png_bytes((1600, 1200)))

        pdf_bytes = build_image_pdf(image, title="recibo-ana-15-03-2024.pdf")

        assert pdf_bytes.startswith(b"%PDF")
        boxes = MEDIA_BOX_RE.findall(pdf_bytes)
        assert len(boxes) == 1
        width_pt, height_pt = (float(value) for value in boxes[0])
        assert width_pt == pytest.approx(210 * POINTS_PER_MM, abs=0.01)
        assert height_pt == pytest.approx(157.5 * POINTS_PER_MM, abs=0.01)

    def test_custom_page_width(self) -> None:
        """Test that the page width is configurable."""
        image = EncodedImage(data=png_bytes((100, 100)), width=100, height=100)

        pdf_bytes = build_image_pdf(image, page_width_mm=100)

        width_pt, height_pt = (float(value) for value in MEDIA_BOX_RE.findall(pdf_bytes)[0])
        assert width_pt == pytest.approx(100 * POINTS_PER_MM, abs=0.01)
        assert height_pt == pytest.approx(width_pt, abs=0.01)
