"""Cosecha CLI interface.

Commands:
- session: Interactive harvest session (register entries, print documents)
- receipt: Print a single payment receipt
- summary: Print a payment report for a list of entries
- check: Validate export dependencies (Playwright, Chromium, ReportLab, Pillow)
- init: Initialize Cosecha configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from pathlib import Path
from typing import Annotated

import typer

import cosecha.export
from cosecha import __version__
from cosecha.config import CosechaConfig, create_default_config, load_config
from cosecha.export import (
    BackendNotAvailableError,
    ExportError,
    ExportPipeline,
    ExportResult,
    RenderBackend,
    run_exports,
)
from cosecha.models import HarvestEntry, LedgerTotals, RenderRequest
from cosecha.renderers.filters import format_cop, format_kg
from cosecha.session import HarvestSession
from cosecha.state import EntryValidationError
from cosecha.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="cosecha",
    help="Coffee harvest payment records and PDF receipts",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: CosechaConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"cosecha {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Cosecha - Coffee harvest payment records.

    Register harvest entries and download payment receipts and reports as PDF.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _get_config() -> CosechaConfig:
    return _config or CosechaConfig()


def _export(requests: list[RenderRequest], output_dir: Path | None) -> list[Path]:
    """Run exports and return the delivered paths.

    Raises:
        BackendNotAvailableError: If Chromium cannot be started
        ExportError: If an export fails
    """
    results = asyncio.run(run_exports(requests, _get_config(), output_dir))
    return [result.path for result in results]


def _export_or_exit(requests: list[RenderRequest], output_dir: Path | None) -> None:
    try:
        paths = _export(requests, output_dir)
    except BackendNotAvailableError as e:
        _logger.error(e.message)
        raise typer.Exit(1)
    except ExportError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    for path in paths:
        typer.echo(f"📄 {path}")


def _parse_entry_option(value: str) -> tuple[str, str, str | None]:
    """Split ``"name:kg[:price]"`` into its parts.

    Colons separate the fields so kilograms and prices may use a decimal
    comma (``"Ana:12,5"``).
    """
    parts = [part.strip() for part in value.split(":")]
    if len(parts) == 2:
        return parts[0], parts[1], None
    if len(parts) == 3:
        return parts[0], parts[1], parts[2]
    raise typer.BadParameter(f"Expected 'name:kg[:price]', got {value!r}", param_hint="--entry")


def _echo_validation_error(error: EntryValidationError) -> None:
    typer.echo("❌ Entry not registered:")
    for name, problem in error.errors.items():
        typer.echo(f"   • {name}: {problem}")


def _echo_entries(entries: tuple[HarvestEntry, ...], totals: LedgerTotals) -> None:
    if not entries:
        typer.echo("\n  No entries yet\n")
        return

    typer.echo()
    typer.echo(f"  {'#':>3}  {'Fecha':<10}  {'Nombre':<24}  {'Kg':>9}  {'Precio/Kg':>12}  {'Total':>14}")
    for number, entry in enumerate(entries, start=1):
        typer.echo(
            f"  {number:>3}  {entry.date:<10}  {entry.name[:24]:<24}  "
            f"{format_kg(entry.kg):>9}  {format_cop(entry.price_per_kg):>12}  {format_cop(entry.total):>14}"
        )
    typer.echo(f"\n  Total Kg: {format_kg(totals.total_kg)}   Total a Pagar: {format_cop(totals.total_payment)}\n")


# =============================================================================
# receipt command
# =============================================================================


@app.command()
def receipt(
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Picker name"),
    ],
    kg: Annotated[
        str,
        typer.Option("--kg", "-k", help="Kilograms collected"),
    ],
    price: Annotated[
        str | None,
        typer.Option("--price", "-p", help="Price per kg in COP (defaults to config)"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory for the PDF (overrides config)", file_okay=False),
    ] = None,
) -> None:
    """Register one entry and print its payment receipt.

    Exit codes:
        0: Receipt written
        1: Invalid entry or export failure
    """
    session = HarvestSession(_get_config())

    try:
        entry = session.store.add_entry(name, kg, price)
    except EntryValidationError as e:
        _echo_validation_error(e)
        raise typer.Exit(1)

    _logger.info(f"Entry for {entry.name}: {format_cop(entry.total)}")
    _export_or_exit([session.receipt_request(entry.id)], output_dir)


# =============================================================================
# summary command
# =============================================================================


@app.command()
def summary(
    entry: Annotated[
        list[str] | None,
        typer.Option(
            "--entry",
            "-e",
            help="Entry as 'name:kg[:price]' (repeatable, oldest first; decimal comma allowed)",
        ),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory for the PDF (overrides config)", file_okay=False),
    ] = None,
) -> None:
    """Print a payment report for the given entries.

    With no entries the report is still written, with zero rows and totals.

    Exit codes:
        0: Report written
        1: Invalid entry or export failure
    """
    session = HarvestSession(_get_config())

    for value in entry or []:
        entry_name, entry_kg, entry_price = _parse_entry_option(value)
        try:
            session.store.add_entry(entry_name, entry_kg, entry_price)
        except EntryValidationError as e:
            _echo_validation_error(e)
            raise typer.Exit(1)

    totals = session.store.totals
    _logger.info(
        f"Report over {len(session.store.entries)} entries: "
        f"{format_kg(totals.total_kg)} kg, {format_cop(totals.total_payment)}"
    )
    _export_or_exit([session.summary_request()], output_dir)


# =============================================================================
# session command
# =============================================================================


class _SessionPrinter:
    """Keeps one render backend running for a whole interactive session.

    The backend is started on the first print and stopped by ``close``.
    """

    def __init__(self, config: CosechaConfig) -> None:
        self.config = config
        self._runner = asyncio.Runner()
        self._backend: RenderBackend | None = None
        self._pipeline: ExportPipeline | None = None

    def run(self, action: Callable[[ExportPipeline], Awaitable[ExportResult]]) -> ExportResult:
        """Run ``action`` against the session's pipeline.

        Raises:
            BackendNotAvailableError: If Chromium cannot be started
            ExportError: If the export fails
        """
        return self._runner.run(self._export(action))

    async def _export(self, action: Callable[[ExportPipeline], Awaitable[ExportResult]]) -> ExportResult:
        if self._pipeline is None:
            backend = cosecha.export.create_backend(self.config)
            await backend.start()
            self._backend = backend
            self._pipeline = ExportPipeline(backend, self.config)
        return await action(self._pipeline)

    def close(self) -> None:
        """Stop the backend, if one was started."""
        try:
            if self._backend is not None:
                self._runner.run(self._backend.stop())
                self._backend = None
                self._pipeline = None
        finally:
            self._runner.close()


@app.command()
def session(
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory for PDFs (overrides config)", file_okay=False),
    ] = None,
) -> None:
    """Run an interactive harvest session.

    Entries live only for the duration of the session. Chromium is started on
    the first print and kept until the session ends.
    """
    config = _get_config()
    harvest = HarvestSession(config)
    store = harvest.store
    printer = _SessionPrinter(config)

    typer.echo(f"\n☕ {config.farm.name} - Sistema de Pago, Recolección de Café\n")

    try:
        while True:
            choice = typer.prompt(
                "[a]dd  [l]ist  [r]eceipt  [s]ummary  [q]uit",
                default="l",
                show_default=False,
            ).strip().lower()

            if choice in {"q", "quit"}:
                typer.echo("Session closed, entries discarded.")
                break

            if choice in {"a", "add"}:
                store.set_field("name", typer.prompt("Nombre del recolector"))
                store.set_field("kg", typer.prompt("Kilogramos recolectados"))
                store.set_field(
                    "price_per_kg",
                    typer.prompt("Precio por kg (COP)", default=store.state.form.price_per_kg),
                )
                try:
                    entry = store.submit()
                except EntryValidationError as e:
                    _echo_validation_error(e)
                    continue
                typer.echo(f"✅ {entry.name}: {format_kg(entry.kg)} kg → {format_cop(entry.total)}")
                continue

            if choice in {"l", "list"}:
                _echo_entries(store.entries, store.totals)
                continue

            if choice in {"r", "receipt"}:
                entries = store.entries
                if not entries:
                    typer.echo("No entries yet")
                    continue
                number = typer.prompt("Entry number (1 = most recent)", type=int, default=1)
                if not 1 <= number <= len(entries):
                    typer.echo(f"❌ No entry #{number}")
                    continue
                action = partial(harvest.print_receipt, entry_id=entries[number - 1].id, output_dir=output_dir)
            elif choice in {"s", "summary"}:
                if not store.entries:
                    typer.echo("No entries yet")
                    continue
                action = partial(harvest.print_summary, output_dir=output_dir)
            else:
                typer.echo(f"Unknown command: {choice}")
                continue

            try:
                result = printer.run(action)
            except BackendNotAvailableError as e:
                typer.echo(f"❌ {e.message}")
                continue
            except ExportError as e:
                _logger.error(str(e))
                typer.echo("❌ The PDF could not be generated, please try again.")
                continue

            typer.echo(f"📄 {result.path}")
    finally:
        printer.close()


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
) -> None:
    """Validate export dependencies.

    Exit codes:
        0: All required dependencies available
        1: One or more required dependencies missing
    """
    import json as json_module

    from cosecha.utils.preflight import PreflightChecker

    checker = PreflightChecker(executable_path=_get_config().browser.executable_path)
    result = checker.check_all()

    if json_output:
        typer.echo(json_module.dumps(result.to_dict(), indent=2))
        raise typer.Exit(0 if result.success else 1)

    typer.echo("\n🔍 Preflight Check Results\n")

    for check_result in result.checks:
        status = "✅" if check_result.available else "❌"
        version_str = f" ({check_result.version})" if check_result.version else ""
        required_str = " [required]" if check_result.required else " [optional]"

        typer.echo(f"  {status} {check_result.name}{version_str}{required_str}")
        if check_result.available and check_result.path:
            typer.echo(f"     └─ {check_result.path}")
        elif not check_result.available:
            typer.echo(f"     └─ {check_result.message}")

    typer.echo()

    if result.errors:
        typer.echo("❌ Preflight check FAILED")
        for error in result.errors:
            typer.echo(f"   • {error}")
        raise typer.Exit(1)

    typer.echo("✅ All preflight checks passed")
    raise typer.Exit(0)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize Cosecha configuration in ./.cosecha/config.yaml."""
    config_dir = Path(".cosecha")
    config_dir.mkdir(exist_ok=True)
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")

    typer.echo("\n✅ Cosecha configuration initialized")
    typer.echo(f"   Config: {config_file}")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
