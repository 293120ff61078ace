"""Data Transfer Objects for the export pipeline."""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class ExportResult:
    """Result of a completed export.

    Contains the PDF bytes, where they were delivered, and the geometry of
    the capture and the page it was placed on.
    """

    pdf_bytes: bytes
    filename: str
    path: Path
    page_width_mm: float
    page_height_mm: float
    capture_width: int
    capture_height: int
    content_type: str = "application/pdf"

    def __len__(self) -> int:
        """Return the size of the PDF in bytes"""
        return len(self.pdf_bytes)

    @property
    def page_size_mm(self) -> tuple[float, float]:
        """Page ``(width, height)`` in millimeters."""
        return self.page_width_mm, self.page_height_mm
