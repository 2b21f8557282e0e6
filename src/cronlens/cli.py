"""Command-line interface for CronLens."""

from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from cronlens.infrastructure.config import (
    ConfigError,
    SearchSettings,
    load_config,
)
from cronlens.infrastructure.logging import configure_logging
from cronlens.report import EvaluationReport
from cronlens.scheduling import (
    CronEvaluator,
    PatternError,
    format_occurrence,
    generate_schedule,
    list_presets,
    get_preset,
    validate_expression,
)

app = typer.Typer(
    name="cronlens",
    help="Validate six-field cron expressions and preview their next executions",
    add_completion=False,
)

OUTPUT_FORMATS = ("console", "json")


def _load_settings(config: Optional[Path]) -> SearchSettings:
    """Load configuration, set up logging and return engine settings."""
    try:
        profile = load_config(config_path=config)
        settings = SearchSettings.from_profile(profile)
        configure_logging(
            profile.get_str("logging.level", "WARNING"),
            format=profile.get_str("logging.format", "text"),
        )
    except (ConfigError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    return settings


def _parse_timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        typer.echo(f"Error: Invalid timestamp: {value}", err=True)
        raise typer.Exit(1)


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Configuration file (YAML, JSON or TOML)"),
]


@app.command(name="evaluate")
def evaluate_cmd(
    expression: Annotated[str, typer.Argument(help="Six-field cron expression")],
    count: Annotated[
        Optional[int],
        typer.Option("--count", "-n", min=1, help="Number of executions to list"),
    ] = None,
    max_iterations: Annotated[
        Optional[int],
        typer.Option("--max-iterations", min=1, help="Search iteration budget"),
    ] = None,
    start: Annotated[
        Optional[str],
        typer.Option("--from", help="Start time (ISO 8601, local); default now"),
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (console, json)"),
    ] = "console",
    config: ConfigOption = None,
) -> None:
    """Show the field breakdown and next executions of an expression."""
    if format not in OUTPUT_FORMATS:
        typer.echo(f"Error: Unknown format: {format}", err=True)
        raise typer.Exit(1)

    settings = _load_settings(config)
    after = _parse_timestamp(start) if start else None

    evaluator = CronEvaluator(
        count=count or settings.count,
        max_iterations=max_iterations or settings.max_iterations,
    )
    evaluation = evaluator.evaluate(expression, after=after)
    report = EvaluationReport(
        evaluation,
        timestamp_format=settings.timestamp_format,
        requested=evaluator.count,
    )

    if format == "json":
        typer.echo(report.to_json())
    else:
        report.print()

    if evaluation.error is not None:
        raise typer.Exit(1)


@app.command(name="validate")
def validate_cmd(
    expression: Annotated[str, typer.Argument(help="Six-field cron expression")],
) -> None:
    """Check that an expression is valid."""
    result = validate_expression(expression)
    if not result.is_valid:
        typer.echo(f"Error: {result.message}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Valid: {result.spec}")


@app.command(name="match")
def match_cmd(
    expression: Annotated[str, typer.Argument(help="Six-field cron expression")],
    timestamp: Annotated[str, typer.Argument(help="Timestamp to test (ISO 8601)")],
) -> None:
    """Test whether a timestamp matches an expression (exit 1 if not)."""
    result = validate_expression(expression)
    if not result.is_valid:
        typer.echo(f"Error: {result.message}", err=True)
        raise typer.Exit(2)

    dt = _parse_timestamp(timestamp)
    if result.spec.matches(dt):
        typer.echo(f"{format_occurrence(dt)} matches {result.spec}")
        return
    typer.echo(f"{format_occurrence(dt)} does not match {result.spec}")
    raise typer.Exit(1)


@app.command(name="presets")
def presets_cmd() -> None:
    """List preset expressions."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Preset", style="cyan")
    table.add_column("Expression")

    for name in list_presets():
        table.add_row(name, get_preset(name).expression)

    Console().print(table)


@app.command(name="generate")
def generate_cmd(
    pattern: Annotated[
        str,
        typer.Option("--pattern", "-p", help="Recurrence (daily, weekly, monthly)"),
    ] = "daily",
    time: Annotated[
        str,
        typer.Option("--time", "-t", help="Time of day as HH:MM"),
    ] = "12:00",
    day: Annotated[
        Optional[list[str]],
        typer.Option("--day", "-d", help="Weekday for weekly patterns (repeatable)"),
    ] = None,
    date: Annotated[
        int,
        typer.Option("--date", help="Day of month for monthly patterns"),
    ] = 1,
) -> None:
    """Generate a cron expression from a recurrence pattern."""
    try:
        schedule = generate_schedule(pattern, time, weekdays=day or (), day_of_month=date)
    except PatternError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(schedule.description)
    if schedule.expression:
        typer.echo(schedule.expression)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
