"""Cosecha data models.

This module exports the core entities used throughout the application:
- HarvestEntry: One recorded harvest delivery
- LedgerTotals: Aggregate kilograms and payment
- ReceiptDocument / SummaryDocument: Document variants
- RenderRequest: Export pipeline input
"""

from cosecha.models.documents import (
    Document,
    ReceiptDocument,
    RenderRequest,
    SummaryDocument,
    TemplateKind,
)
from cosecha.models.harvest import HarvestEntry, LedgerTotals, round_half_up

__all__ = [
    "HarvestEntry",
    "LedgerTotals",
    "round_half_up",
    "Document",
    "ReceiptDocument",
    "SummaryDocument",
    "RenderRequest",
    "TemplateKind",
]
