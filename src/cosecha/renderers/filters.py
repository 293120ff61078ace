"""Jinja2 filters and naming helpers for documents.

Formatting follows Colombian conventions: "." groups thousands, "," marks
decimals, amounts in COP carry no decimals.
"""

import re
from datetime import date

from cosecha.models import HarvestEntry, round_half_up

SPANISH_MONTHS: list[str] = [
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
]

_SEPARATOR_RE = re.compile(r"[\s/\\]+")


def _group_thousands(value: int) -> str:
    return f"{value:,}".replace(",", ".")


def format_cop(value: float) -> str:
    """Format an amount as Colombian pesos.

    Examples:
        >>> format_cop(150000)
        '$ 150.000'
        >>> format_cop(2999.5)
        '$ 3.000'
    """
    amount = round_half_up(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}$ {_group_thousands(abs(amount))}"


def format_kg(value: float) -> str:
    """Format kilograms with two decimals (``50`` -> ``"50.00"``)."""
    return f"{value:.2f}"


def format_long_date(day: date) -> str:
    """Format a date the way report headers print it.

    Examples:
        >>> format_long_date(date(2024, 3, 15))
        '15 de marzo de 2024'
    """
    return f"{day.day} de {SPANISH_MONTHS[day.month - 1]} de {day.year}"


def slugify(text: str) -> str:
    """Lowercase and replace runs of whitespace and path separators with hyphens.

    Accented characters are kept (``"Ana Lucía"`` -> ``"ana-lucía"``,
    ``"Juan/Pedro"`` -> ``"juan-pedro"``).
    """
    return _SEPARATOR_RE.sub("-", text.strip().lower())


def date_slug(date_text: str) -> str:
    """Replace date separators with hyphens (``"15/03/2024"`` -> ``"15-03-2024"``)."""
    return re.sub(r"[/\\]", "-", date_text)


def receipt_filename(entry: HarvestEntry, extension: str = "pdf") -> str:
    """File name for a single-entry receipt.

    Examples:
        ``recibo-ana-lucía-15-03-2024.pdf``
    """
    return f"recibo-{slugify(entry.name)}-{date_slug(entry.date)}.{extension}"


def summary_filename(date_text: str, extension: str = "pdf") -> str:
    """File name for the aggregate payment report.

    Examples:
        ``reporte-recoleccion-15-03-2024.pdf``
    """
    return f"reporte-recoleccion-{date_slug(date_text)}.{extension}"
