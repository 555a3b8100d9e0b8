"""Next command for Cronkit CLI."""

from datetime import datetime, timedelta
from typing import Any

import typer
from rich.markup import escape
from rich.table import Table

from cronkit.check.overlap import utc_now
from cronkit.check.validator import add_years
from cronkit.cli import app, console, setup_logging
from cronkit.config import ConfigError, load_settings
from cronkit.cronx import ScheduleParser
from cronkit.errors import ExpressionParseError

# Projection stops here so impossible dates (e.g. Feb 30) end quickly
NEXT_RUNS_HORIZON_YEARS = 5


def format_relative(now: datetime, then: datetime) -> str:
    """Describe how far ahead ``then`` is, e.g. ``in 3 hours``."""
    delta = then - now
    if delta < timedelta(minutes=1):
        return "in less than a minute"
    if delta < timedelta(hours=1):
        minutes = int(delta.total_seconds() // 60)
        return "in 1 minute" if minutes == 1 else f"in {minutes} minutes"
    if delta < timedelta(days=1):
        hours = int(delta.total_seconds() // 3600)
        return "in 1 hour" if hours == 1 else f"in {hours} hours"
    days = delta.days
    return "in 1 day" if days == 1 else f"in {days} days"


@app.command("next")
def next_runs(
    expression: str = typer.Argument(..., help="Cron expression or @alias"),
    count: int = typer.Option(
        10,
        "--count",
        "-c",
        min=1,
        max=100,
        help="Number of runs to show (1-100)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
) -> None:
    """Show the next scheduled runs of an expression (UTC)."""
    setup_logging()

    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    parser = ScheduleParser.for_locale(settings.locale)
    try:
        parser.parse(expression)
    except ExpressionParseError as e:
        console.print(f"[red]✗[/] Invalid cron expression: {escape(str(e))}")
        raise typer.Exit(1)

    now = utc_now()
    horizon = add_years(now, NEXT_RUNS_HORIZON_YEARS)
    times = parser.oracle.next(expression, now, count, until=horizon)

    if json_output:
        runs: list[dict[str, Any]] = [
            {
                "number": number,
                "timestamp": fire_time.isoformat(),
                "relative": format_relative(now, fire_time),
            }
            for number, fire_time in enumerate(times, 1)
        ]
        console.print_json(
            data={"expression": expression, "timezone": "UTC", "next_runs": runs}
        )
        return

    if not times:
        console.print(f"[yellow]No runs found for[/] [cyan]{escape(expression)}[/]")
        return

    run_word = "run" if len(times) == 1 else "runs"
    table = Table(title=f"Next {len(times)} {run_word} for {escape(expression)}")
    table.add_column("#", justify="right")
    table.add_column("Time (UTC)", style="cyan")
    table.add_column("Relative", style="dim")

    for number, fire_time in enumerate(times, 1):
        table.add_row(
            str(number),
            fire_time.strftime("%Y-%m-%d %H:%M:%S"),
            format_relative(now, fire_time),
        )

    console.print(table)
