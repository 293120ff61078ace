"""Raster encoding and single-page PDF assembly.

A capture becomes one PDF page whose width is fixed (A4, 210 mm) and whose
height follows the capture's aspect ratio, so the whole image fits on one
continuously scaled page without cropping.
"""

from dataclasses import dataclass
from io import BytesIO

from PIL import Image
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

A4_WIDTH_MM = 210.0


@dataclass(frozen=True)
class EncodedImage:
    """Lossless image ready to embed.

    Attributes:
        data: PNG bytes
        width: Width in pixels
        height: Height in pixels
    """

    data: bytes
    width: int
    height: int


def encode_png(raw: bytes) -> EncodedImage:
    """Decode a capture and re-encode it as an opaque PNG.

    Transparent pixels are composited onto white.

    Raises:
        ValueError: If the capture is empty or not a decodable image
    """
    if not raw:
        raise ValueError("Capture is empty")

    try:
        image = Image.open(BytesIO(raw))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Capture is not a decodable image: {e}") from e

    with image:
        width, height = image.size
        if width <= 0 or height <= 0:
            raise ValueError(f"Capture has no area ({width}x{height})")

        if image.mode in ("RGBA", "LA") or "transparency" in image.info:
            rgba = image.convert("RGBA")
            opaque = Image.new("RGB", rgba.size, (255, 255, 255))
            opaque.paste(rgba, mask=rgba.getchannel("A"))
        else:
            opaque = image.convert("RGB")

    buffer = BytesIO()
    opaque.save(buffer, format="PNG")
    return EncodedImage(data=buffer.getvalue(), width=width, height=height)


def page_size_mm(width_px: int, height_px: int, page_width_mm: float = A4_WIDTH_MM) -> tuple[float, float]:
    """Page size that holds a ``width_px`` x ``height_px`` image at full width.

    Returns:
        ``(page_width_mm, height_px * page_width_mm / width_px)``

    Raises:
        ValueError: If any dimension is not positive
    """
    if width_px <= 0 or height_px <= 0:
        raise ValueError(f"Image dimensions must be positive (got {width_px}x{height_px})")
    if page_width_mm <= 0:
        raise ValueError(f"Page width must be positive (got {page_width_mm})")
    return page_width_mm, height_px * page_width_mm / width_px


def build_image_pdf(
    image: EncodedImage,
    *,
    page_width_mm: float = A4_WIDTH_MM,
    title: str | None = None,
) -> bytes:
    """Create a one-page portrait PDF with ``image`` spanning the page.

    Args:
        image: Encoded capture
        page_width_mm: Page width; the height is derived from the image
        title: Optional document title metadata

    Returns:
        PDF content as bytes
    """
    width_mm, height_mm = page_size_mm(image.width, image.height, page_width_mm)
    page_width = width_mm * mm
    page_height = height_mm * mm

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height), pageCompression=1)
    pdf.setCreator("Cosecha")
    if title:
        pdf.setTitle(title)

    pdf.drawImage(
        ImageReader(BytesIO(image.data)),
        0,
        0,
        width=page_width,
        height=page_height,
    )
    pdf.showPage()
    pdf.save()

    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes
