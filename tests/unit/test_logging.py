"""Unit tests for logging setup."""

import io
import json
import logging

import pytest

from cosecha.utils.logging import (
    HumanFormatter,
    JSONFormatter,
    LogMode,
    configure_from_cli,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_cosecha_logger():
    """Leave the cosecha logger without handlers after each test."""
    yield
    logger = logging.getLogger("cosecha")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def make_record(msg: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("cosecha.export", level, __file__, 1, msg, (), None)


class TestFormatters:
    """Tests for the output formatters."""

    def test_human_format(self) -> None:
        """Test the plain human format."""
        formatter = HumanFormatter(use_colors=False)

        assert formatter.format(make_record("Exported recibo.pdf")) == "[INFO] Exported recibo.pdf"

    def test_json_format(self) -> None:
        """Test the JSON lines format."""
        line = JSONFormatter().format(make_record("Exported reporte.pdf", logging.WARNING))

        data = json.loads(line)
        assert data["level"] == "WARNING"
        assert data["logger"] == "cosecha.export"
        assert data["msg"] == "Exported reporte.pdf"
        assert "ts" in data


class TestSetupLogging:
    """Tests for configuring the logger hierarchy."""

    def test_child_loggers_use_handler(self) -> None:
        """Test module loggers write through the cosecha handler."""
        stream = io.StringIO()
        setup_logging(mode=LogMode.HUMAN, stream=stream)

        logging.getLogger("cosecha.export.pipeline").info("Exported %s", "recibo.pdf")

        assert stream.getvalue() == "[INFO] Exported recibo.pdf\n"

    def test_structured_extra_data_in_json(self) -> None:
        """Test structured fields are merged into JSON output."""
        stream = io.StringIO()
        setup_logging(mode=LogMode.JSON, stream=stream)

        get_logger("cosecha.cli").structured(logging.INFO, "Exported", filename="recibo.pdf", pages=1)

        data = json.loads(stream.getvalue())
        assert data["msg"] == "Exported"
        assert data["filename"] == "recibo.pdf"
        assert data["pages"] == 1

    def test_quiet_sets_warning_level(self) -> None:
        """Test --quiet suppresses info messages."""
        configure_from_cli(quiet=True)

        assert logging.getLogger("cosecha").level == logging.WARNING

    def test_verbose_sets_debug_level(self) -> None:
        """Test --verbose enables debug messages."""
        configure_from_cli(verbose=True)

        assert logging.getLogger("cosecha").level == logging.DEBUG
