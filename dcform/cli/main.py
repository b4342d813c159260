"""Main CLI entry point and application setup."""

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
import msgspec
import yaml
from click.exceptions import Exit
from rich.console import Console
from rich.table import Table

from dcform import __version__
from dcform.config import ValidationSettings, load_settings
from dcform.core.contributors import infer_contributor_type, normalise_roles
from dcform.core.dates import (
    build_date_time,
    has_valid_date_value,
    parse_date_entry,
    parse_date_time,
    serialize_date_entry,
)
from dcform.core.models import DatasetRecord, DateRangeEntry, Severity
from dcform.exceptions import DcformError
from dcform.quality.engine import check_record


@dataclass
class Context:
    """CLI context that holds shared resources."""

    console: Console
    settings: ValidationSettings
    debug: bool = False


SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
}


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def load_record(path: Path) -> DatasetRecord:
    """Read a metadata record from a YAML or JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise click.ClickException(f"{path} does not contain a metadata record")

    try:
        return DatasetRecord.from_dict(data)
    except (msgspec.ValidationError, TypeError) as e:
        raise click.ClickException(f"Malformed record in {path}: {e}") from e


class DcformGroup(click.Group):
    """Custom group that reports library errors without tracebacks."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            click.echo("Interrupted", err=True)
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except DcformError as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


pass_context = click.make_pass_decorator(Context)


@click.group(cls=DcformGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(
    version=__version__, prog_name="dcform", message="dcform version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """DataCite metadata validation tool.

    Checks metadata records against DataCite field constraints and converts
    DataCite composite dates.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    try:
        settings = load_settings(config)
    except DcformError as e:
        if debug:
            raise
        click.echo(f"Error loading config file: {e}", err=True)
        ctx.exit(1)

    ctx.obj = Context(
        console=create_console(no_color=no_color),
        settings=settings,
        debug=debug,
    )


@cli.command()
@click.argument("record", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@pass_context
def check(ctx: Context, record: Path, output_format: str) -> None:
    """Check a metadata record (YAML or JSON)."""
    report = check_record(load_record(record), ctx.settings)

    if output_format == "json":
        payload = {
            "record": str(record),
            "valid": not report.has_errors,
            "outcomes": report.outcomes,
        }
        click.echo(msgspec.json.format(msgspec.json.encode(payload), indent=2))
    elif not report.outcomes:
        ctx.console.print(f"[green]✓[/green] {record.name}: no issues found")
    else:
        table = Table(title=f"Validation results for {record.name}")
        table.add_column("Field", style="cyan")
        table.add_column("Severity")
        table.add_column("Message")
        for field_id, outcome in report.outcomes.items():
            style = SEVERITY_STYLES[outcome.severity]
            table.add_row(
                field_id, f"[{style}]{outcome.severity.value}[/{style}]", outcome.message
            )
        ctx.console.print(table)
        ctx.console.print(
            f"Errors: {len(report.errors)}  Warnings: {len(report.warnings)}"
        )

    if report.has_errors:
        sys.exit(1)


@cli.group()
def date() -> None:
    """Convert DataCite dates."""


@date.command("parse")
@click.argument("value")
@pass_context
def date_parse(ctx: Context, value: str) -> None:
    """Split a date or date range into its components."""
    if "/" in value:
        entry = parse_date_entry(value)
        parts = {"start": entry.start_date, "end": entry.end_date}
    else:
        parts = {"value": value}

    table = Table(show_header=True)
    table.add_column("Part", style="cyan")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Timezone")
    for label, token in parts.items():
        if token is None:
            continue
        components = parse_date_time(token)
        table.add_row(
            label, components.date, components.time or "", components.timezone or ""
        )
    ctx.console.print(table)


@date.command("build")
@click.argument("date_value", metavar="DATE")
@click.option("--time", "time_value", help="Time part, e.g. 10:30:00")
@click.option("--timezone", "-z", help="Z or ±HH:MM offset")
def date_build(date_value: str, time_value: str | None, timezone: str | None) -> None:
    """Compose a DataCite datetime from its parts."""
    click.echo(build_date_time(date_value, time_value, timezone))


@date.command("serialize")
@click.option("--start", help="Start date")
@click.option("--end", help="End date")
@click.option("--type", "date_type", default="", help="DataCite dateType")
def date_serialize(start: str | None, end: str | None, date_type: str) -> None:
    """Reduce a start/end pair to the DataCite range grammar."""
    entry = DateRangeEntry(date_type=date_type, start_date=start, end_date=end)
    if not has_valid_date_value(entry):
        raise click.UsageError("Provide --start, --end or both")
    click.echo(serialize_date_entry(entry))


@cli.command()
@click.argument("roles", nargs=-1, required=True)
@click.option("--type", "explicit_type", help="Declared contributor type")
@pass_context
def roles(ctx: Context, roles: tuple[str, ...], explicit_type: str | None) -> None:
    """Normalize contributor roles and infer the contributor type."""
    labels = normalise_roles(list(roles))
    kind = infer_contributor_type(explicit_type, labels)

    for label in labels:
        ctx.console.print(f"  • {label}")
    ctx.console.print(f"Contributor type: [bold]{kind.value}[/bold]")


def main() -> None:
    """Entry point for the console script."""
    cli()


if __name__ == "__main__":
    main()
