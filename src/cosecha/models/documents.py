"""Document variants and export requests.

A document is one of two tagged variants:
- ReceiptDocument: a single entry's payment receipt
- SummaryDocument: all entries of the session plus their totals

A RenderRequest pairs a document with the filename it is delivered under.
"""

from dataclasses import dataclass, field
from enum import Enum

from cosecha.models.harvest import HarvestEntry, LedgerTotals


class TemplateKind(Enum):
    """Which document layout to render."""

    RECEIPT = "receipt"
    SUMMARY = "summary"


@dataclass(frozen=True)
class ReceiptDocument:
    """Payment receipt for one harvest entry."""

    entry: HarvestEntry

    @property
    def kind(self) -> TemplateKind:
        return TemplateKind.RECEIPT


@dataclass(frozen=True)
class SummaryDocument:
    """Payment report over a list of entries.

    Attributes:
        entries: Entries in display order (most recent first)
        totals: Aggregate totals over ``entries``
        report_date: Long-form date printed in the report header
    """

    entries: tuple[HarvestEntry, ...] = ()
    totals: LedgerTotals = field(default_factory=LedgerTotals)
    report_date: str = ""

    @property
    def kind(self) -> TemplateKind:
        return TemplateKind.SUMMARY


Document = ReceiptDocument | SummaryDocument


@dataclass(frozen=True)
class RenderRequest:
    """Input of the export pipeline.

    Attributes:
        document: What to render
        filename: File name the PDF is delivered under (e.g. "recibo-ana-15-03-2024.pdf")
    """

    document: Document
    filename: str

    def __post_init__(self) -> None:
        """Validate the request."""
        if not self.filename or "/" in self.filename or "\\" in self.filename:
            raise ValueError(f"Invalid export filename: {self.filename!r}")

    @property
    def kind(self) -> TemplateKind:
        """Template tag of the requested document."""
        return self.document.kind
