"""Formatting helpers shared by templates and the CLI."""

from cosecha.renderers.filters import (
    format_cop,
    format_kg,
    format_long_date,
    receipt_filename,
    slugify,
    summary_filename,
)

__all__ = [
    "format_cop",
    "format_kg",
    "format_long_date",
    "receipt_filename",
    "slugify",
    "summary_filename",
]
