"""Integration tests for a harvest session printing its documents."""

import asyncio
from pathlib import Path

from cosecha.export import ExportPipeline
from cosecha.session import HarvestSession
from tests.fixtures import BASE_HEIGHT, ROW_HEIGHT, FakeBackend


class TestHarvestSession:
    """Session entries flowing through the export pipeline."""

    def test_print_receipt(
        self,
        harvest_session: HarvestSession,
        pipeline: ExportPipeline,
        backend: FakeBackend,
        output_dir: Path,
    ) -> None:
        """Test printing the receipt of one entry."""
        entry = harvest_session.store.add_entry("Ana Lucía", 12.5)

        result = asyncio.run(harvest_session.print_receipt(pipeline, entry.id))

        assert result.filename == "recibo-ana-lucía-15-03-2024.pdf"
        assert (output_dir / result.filename).exists()
        assert "Ana Lucía" in backend.surfaces[0].html
        assert "$ 37.500" in backend.surfaces[0].html

    def test_print_summary(
        self,
        harvest_session: HarvestSession,
        pipeline: ExportPipeline,
        backend: FakeBackend,
        output_dir: Path,
    ) -> None:
        """Test printing the report over all entries, most recent first."""
        harvest_session.store.add_entry("Ana", 10, 3000)
        harvest_session.store.add_entry("Eva", 20, 4000)

        result = asyncio.run(harvest_session.print_summary(pipeline))

        html = backend.surfaces[0].html
        assert result.filename == "reporte-recoleccion-15-03-2024.pdf"
        assert (output_dir / result.filename).exists()
        assert html.index("Eva") < html.index("Ana")
        assert "30.00 kg" in html
        assert "$ 110.000" in html
        assert "15 de marzo de 2024" in html
        assert result.capture_height == (BASE_HEIGHT + ROW_HEIGHT * 3) * 2

    def test_summary_reflects_entries_at_print_time(
        self,
        harvest_session: HarvestSession,
        pipeline: ExportPipeline,
        backend: FakeBackend,
    ) -> None:
        """Test that each report uses the entries present when it is requested."""
        harvest_session.store.add_entry("Ana", 10)
        asyncio.run(harvest_session.print_summary(pipeline))
        harvest_session.store.add_entry("Eva", 20)
        asyncio.run(harvest_session.print_summary(pipeline))

        assert backend.surfaces[0].html.count("data-entry-id=") == 1
        assert backend.surfaces[1].html.count("data-entry-id=") == 2
        assert backend.live_surfaces == 0

    def test_config_defaults_apply(self, harvest_session: HarvestSession) -> None:
        """Test the store picks up the farm's default price and date format."""
        entry = harvest_session.store.add_entry("Ana", 2)

        assert entry.price_per_kg == 3000
        assert entry.date == "15/03/2024"
