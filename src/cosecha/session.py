"""Harvest session: entry log plus the two document actions.

The two user actions map to export requests:
- print a single entry -> ``recibo-<name>-<date>.pdf``
- print the summary    -> ``reporte-recoleccion-<today>.pdf``
"""

import logging
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from cosecha.config import CosechaConfig
from cosecha.export import ExportPipeline, ExportResult
from cosecha.models import (
    HarvestEntry,
    LedgerTotals,
    ReceiptDocument,
    RenderRequest,
    SummaryDocument,
)
from cosecha.renderers.filters import format_long_date, receipt_filename, summary_filename
from cosecha.state import LedgerStore

logger = logging.getLogger(__name__)


def receipt_request(entry: HarvestEntry) -> RenderRequest:
    """Build the export request for one entry's receipt."""
    return RenderRequest(document=ReceiptDocument(entry), filename=receipt_filename(entry))


def summary_request(
    entries: tuple[HarvestEntry, ...],
    today: date,
    date_format: str = "%d/%m/%Y",
) -> RenderRequest:
    """Build the export request for the payment report over ``entries``.

    Totals are computed from ``entries`` at call time.
    """
    document = SummaryDocument(
        entries=tuple(entries),
        totals=LedgerTotals.from_entries(entries),
        report_date=format_long_date(today),
    )
    return RenderRequest(document=document, filename=summary_filename(today.strftime(date_format)))


class HarvestSession:
    """One in-memory session of the record-keeping tool.

    Usage:
        session = HarvestSession(config)
        entry = session.store.add_entry("Ana Lucía", 12.5)
        result = await session.print_receipt(pipeline, entry.id)
    """

    def __init__(
        self,
        config: CosechaConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize an empty session.

        Args:
            config: Cosecha configuration (form defaults, date format)
            clock: Source of the current time
        """
        self.config = config or CosechaConfig()
        self._clock = clock
        self.store = LedgerStore(
            default_price_per_kg=self.config.farm.default_price_per_kg,
            date_format=self.config.farm.date_format,
            clock=clock,
        )

    def receipt_request(self, entry_id: int) -> RenderRequest:
        """Export request for the receipt of entry ``entry_id``.

        Raises:
            KeyError: If the entry does not exist
        """
        return receipt_request(self.store.get_entry(entry_id))

    def summary_request(self) -> RenderRequest:
        """Export request for the report over all current entries."""
        return summary_request(
            self.store.entries,
            self._clock().date(),
            self.config.farm.date_format,
        )

    async def print_receipt(
        self,
        pipeline: ExportPipeline,
        entry_id: int,
        output_dir: Path | None = None,
    ) -> ExportResult:
        """Export the receipt of one entry."""
        request = self.receipt_request(entry_id)
        logger.info("Printing receipt %s", request.filename)
        return await pipeline.export(request, output_dir)

    async def print_summary(
        self,
        pipeline: ExportPipeline,
        output_dir: Path | None = None,
    ) -> ExportResult:
        """Export the payment report for the session."""
        request = self.summary_request()
        logger.info("Printing summary %s (%d entries)", request.filename, len(self.store.entries))
        return await pipeline.export(request, output_dir)
