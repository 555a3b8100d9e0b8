"""Stats command for Cronkit CLI."""

import sys
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from cronkit.check import CrontabStats, JobFrequency, StatsCalculator
from cronkit.cli import app, console, setup_logging
from cronkit.config import ConfigError, load_settings
from cronkit.crontab import CrontabReader, EntryType
from cronkit.cronx import ScheduleParser
from cronkit.errors import SourceReadError

HISTOGRAM_WIDTH = 40


def frequency_table(title: str, frequencies: list[JobFrequency]) -> Table:
    """Build a table of jobs with their run counts."""
    table = Table(title=title)
    table.add_column("Job", style="cyan")
    table.add_column("Expression")
    table.add_column("Runs/day", justify="right")
    table.add_column("Runs/hour", justify="right")

    for freq in frequencies:
        table.add_row(
            escape(freq.job_id),
            escape(freq.expression),
            str(freq.runs_per_day),
            str(freq.runs_per_hour),
        )
    return table


def print_stats(stats: CrontabStats, top: int, verbose: bool) -> None:
    """Print a summary and ranked tables."""
    console.print("[bold]Crontab statistics[/]")
    console.print(f"  Total jobs: {stats.total_jobs}")
    console.print(f"  Total runs per day: {stats.total_runs_per_day}")
    console.print(f"  Total runs per hour: {stats.total_runs_per_hour}")
    console.print(f"  Max concurrent: {stats.max_concurrent}")
    console.print(f"  Collision frequency: {stats.collision_frequency:.2f}%")
    console.print()

    console.print(frequency_table("Most frequent jobs", stats.most_frequent(top)))
    console.print(frequency_table("Least frequent jobs", stats.least_frequent(top)))

    busiest = stats.busiest_hours(top)
    if busiest:
        table = Table(title="Busiest hours (UTC)")
        table.add_column("Hour", style="cyan")
        table.add_column("Runs", justify="right")
        table.add_column("Jobs", justify="right")
        for hour in busiest:
            table.add_row(f"{hour.hour:02d}:00", str(hour.run_count), str(hour.job_count))
        console.print(table)

    if verbose:
        peak = max(stats.hour_histogram)
        table = Table(title="Runs by hour (UTC)")
        table.add_column("Hour", style="cyan")
        table.add_column("Runs", justify="right")
        table.add_column("")
        for hour, runs in enumerate(stats.hour_histogram):
            bar = "█" * (runs * HISTOGRAM_WIDTH // peak) if peak else ""
            table.add_row(f"{hour:02d}:00", str(runs), f"[green]{bar}[/]")
        console.print(table)


@app.command()
def stats(
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        help="Crontab file to analyze",
    ),
    stdin: bool = typer.Option(
        False,
        "--stdin",
        help="Read crontab content from standard input",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show the hourly histogram and debug logs",
    ),
    top: int = typer.Option(
        5,
        "--top",
        min=1,
        help="Number of jobs and hours in each ranking",
    ),
) -> None:
    """Show run frequency statistics for a crontab.

    Counts are taken over 2025-01-01 (UTC) so results are reproducible.

    Sources, in priority order:
    - --file crontab
    - --stdin crontab
    - the current user's crontab
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    parser = ScheduleParser.for_locale(settings.locale)
    reader = CrontabReader(parser)

    try:
        if file is not None:
            jobs = reader.read_file(file)
        elif stdin:
            jobs = [
                entry.job
                for entry in reader.parse_stream(sys.stdin)
                if entry.type == EntryType.JOB and entry.job is not None
            ]
        else:
            jobs = reader.read_user()
    except SourceReadError as e:
        console.print(f"[red]Error:[/] failed to read crontab: {escape(str(e))}")
        raise typer.Exit(1)

    result = StatsCalculator(parser.oracle).calculate(jobs)

    if json_output:
        console.print_json(data=result.to_dict(top))
        return

    if not result.job_frequencies:
        console.print(f"[yellow]No valid jobs found[/] ({len(jobs)} job(s) read)")
        return

    print_stats(result, top, verbose)
