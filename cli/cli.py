"""kaiord command line interface.

Converts workouts between TCX and KRD, validates TCX files and prints
workout statistics.
"""

import asyncio
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from kaiord.config.settings import settings
from kaiord.core.logger import setup_logger_from_settings
from kaiord.errors import ConfigurationError, KaiordError, TcxValidationError
from kaiord.krd.document import KRD, load_krd
from kaiord.tcx.reader import TcxReader
from kaiord.tcx.validators import get_validator
from kaiord.tcx.writer import TcxWriter
from kaiord.workouts.migration import migrate_krd
from kaiord.workouts.stats import calculate_workout_stats

console = Console()

app = typer.Typer(
    name="kaiord",
    help="kaiord - convert structured workouts between TCX and KRD",
    add_completion=False,
)

FORMAT_BY_SUFFIX = {
    ".tcx": "tcx",
    ".krd": "krd",
    ".json": "krd",
}


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    setup_logger_from_settings(settings, debug=debug)


def _detect_format(path: Path, override: str | None) -> str:
    if override:
        value = override.lower()
        if value not in {"tcx", "krd"}:
            raise typer.BadParameter(f"Unsupported format '{override}', expected tcx or krd")
        return value
    detected = FORMAT_BY_SUFFIX.get(path.suffix.lower())
    if detected is None:
        raise typer.BadParameter(f"Cannot detect format of {path.name}; use --from/--to")
    return detected


def _read_bytes(path: Path) -> bytes:
    if not path.is_file():
        console.print(f"[red]Error:[/red] file not found: {path}", style="bold red")
        raise typer.Exit(1)
    return path.read_bytes()


def _load_document(path: Path, fmt: str) -> KRD:
    # TCX stays bytes so lxml honors the declared encoding
    data = _read_bytes(path)
    if fmt == "tcx":
        return TcxReader().read(data)
    return migrate_krd(load_krd(data.decode("utf-8")))


def _print_error(title: str, error: KaiordError) -> None:
    details = str(error)
    if isinstance(error, TcxValidationError):
        details = "\n".join(f"  ✗ {violation.field}: {violation.message}" for violation in error.errors)
    console.print(Panel(Text(title, style="bold red"), subtitle=details, border_style="red"))


@app.command()
def convert(
    input_path: Path = typer.Argument(..., help="File to convert (.tcx, .krd or .json)"),
    output_path: Path = typer.Argument(..., help="Destination file (.tcx, .krd or .json)"),
    input_format: str | None = typer.Option(None, "--from", help="Input format override: tcx or krd"),
    output_format: str | None = typer.Option(None, "--to", help="Output format override: tcx or krd"),
) -> None:
    """Convert a workout between TCX and KRD."""
    source = _detect_format(input_path, input_format)
    target = _detect_format(output_path, output_format)
    if source == target:
        raise typer.BadParameter(f"Input and output are both {source}; nothing to convert")

    logger.info(f"Converting {input_path} ({source}) -> {output_path} ({target})")
    try:
        krd = _load_document(input_path, source)
        output = asyncio.run(TcxWriter().write(krd)) if target == "tcx" else krd.to_json() + "\n"
    except KaiordError as e:
        logger.error(f"Conversion failed: {e}")
        _print_error("Conversion failed", e)
        raise typer.Exit(1) from e

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output, encoding="utf-8")
    console.print(f"[green]✓ Wrote {output_path}[/green]")


@app.command()
def validate(
    input_path: Path = typer.Argument(..., help="TCX file to validate"),
) -> None:
    """Validate a TCX file with the configured validator and check it decodes."""
    data = _read_bytes(input_path)

    try:
        validator = get_validator(settings)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}", style="bold red")
        raise typer.Exit(1) from e

    result = asyncio.run(validator(data))
    if not result.valid:
        table = Table(title=f"Validation errors in {input_path.name}")
        table.add_column("Path", style="cyan")
        table.add_column("Message", style="red")
        for issue in result.errors:
            table.add_row(issue.path, issue.message)
        console.print(table)
        raise typer.Exit(1)

    try:
        krd = TcxReader().read(data)
    except KaiordError as e:
        _print_error("TCX file is valid XML but cannot be decoded", e)
        raise typer.Exit(1) from e

    workout = krd.extensions.workout
    step_count = len(workout.steps) if workout else 0
    console.print(
        Panel(
            Text("TCX file is valid", style="bold green"),
            subtitle=f"validator: {settings.tcx_validator} | sport: {krd.metadata.sport} | entries: {step_count}",
            border_style="green",
        )
    )


@app.command()
def stats(
    input_path: Path = typer.Argument(..., help="Workout file (.tcx, .krd or .json)"),
    input_format: str | None = typer.Option(None, "--from", help="Input format override: tcx or krd"),
) -> None:
    """Print duration, distance and step totals for a workout."""
    try:
        krd = _load_document(input_path, _detect_format(input_path, input_format))
    except KaiordError as e:
        _print_error("Cannot read workout", e)
        raise typer.Exit(1) from e

    result = calculate_workout_stats(krd.extensions.workout)
    workout = krd.extensions.workout

    table = Table(title=workout.name if workout and workout.name else input_path.name)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Sport", str(workout.sport if workout else "-"))
    table.add_row(
        "Total duration",
        f"{result.total_duration_seconds:g} s" if result.total_duration_seconds is not None else "n/a",
    )
    table.add_row(
        "Total distance",
        f"{result.total_distance_meters:g} m" if result.total_distance_meters is not None else "n/a",
    )
    table.add_row("Steps (expanded)", str(result.step_count))
    table.add_row("Repetition blocks", str(result.repetition_count))
    table.add_row("Open-ended steps", "yes" if result.has_open_steps else "no")
    console.print(table)


if __name__ == "__main__":
    app()
