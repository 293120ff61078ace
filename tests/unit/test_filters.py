"""Unit tests for document formatting helpers."""

from datetime import date

import pytest

from cosecha.models import HarvestEntry, ReceiptDocument, RenderRequest
from cosecha.renderers.filters import (
    date_slug,
    format_cop,
    format_kg,
    format_long_date,
    receipt_filename,
    slugify,
    summary_filename,
)


class TestFormatCop:
    """Tests for the currency filter."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, "$ 0"),
            (999, "$ 999"),
            (3000, "$ 3.000"),
            (150000, "$ 150.000"),
            (1234567, "$ 1.234.567"),
            (2999.5, "$ 3.000"),
            (-1500, "-$ 1.500"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        """Test thousands grouping and rounding."""
        assert format_cop(value) == expected


class TestFormatKg:
    """Tests for the kilogram filter."""

    def test_two_decimals(self) -> None:
        """Test that kilograms always show two decimals."""
        assert format_kg(50) == "50.00"
        assert format_kg(12.5) == "12.50"


class TestFormatLongDate:
    """Tests for long-form dates."""

    def test_spanish_month(self) -> None:
        """Test month names."""
        assert format_long_date(date(2024, 3, 15)) == "15 de marzo de 2024"
        assert format_long_date(date(2024, 12, 1)) == "1 de diciembre de 2024"


class TestFilenames:
    """Tests for export filenames."""

    def test_slugify_keeps_accents(self) -> None:
        """Test that whitespace runs become single hyphens."""
        assert slugify("Ana  Lucía") == "ana-lucía"
        assert slugify(" Juan Pérez ") == "juan-pérez"

    def test_slugify_replaces_path_separators(self) -> None:
        """Test that slashes and backslashes cannot reach the filename."""
        assert slugify("Juan/Pedro") == "juan-pedro"
        assert slugify("Juan \\ Pedro") == "juan-pedro"

    def test_receipt_filename_with_slash_is_valid_request(self) -> None:
        """Test that a name with a slash still yields a deliverable request."""
        entry = HarvestEntry.create(
            entry_id=1, name="Juan/Pedro", kg=10, price_per_kg=3000, date="15/03/2024"
        )

        request = RenderRequest(ReceiptDocument(entry), receipt_filename(entry))

        assert request.filename == "recibo-juan-pedro-15-03-2024.pdf"

    def test_date_slug(self) -> None:
        """Test that slashes become hyphens."""
        assert date_slug("15/03/2024") == "15-03-2024"

    def test_receipt_filename(self) -> None:
        """Test receipt filename for an accented, two-word name."""
        entry = HarvestEntry.create(
            entry_id=1, name="Ana Lucía", kg=12.5, price_per_kg=3000, date="15/03/2024"
        )

        assert receipt_filename(entry) == "recibo-ana-lucía-15-03-2024.pdf"

    def test_summary_filename(self) -> None:
        """Test report filename."""
        assert summary_filename("15/03/2024") == "reporte-recoleccion-15-03-2024.pdf"
