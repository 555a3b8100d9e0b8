"""Check command for Cronkit CLI."""

import re
import sys
from pathlib import Path

import typer
from rich.markup import escape

from cronkit.check import Issue, Severity, ValidationResult, Validator, parse_fail_on_level
from cronkit.cli import app, console, setup_logging
from cronkit.config import ConfigError, load_settings
from cronkit.crontab import CrontabReader
from cronkit.errors import SourceReadError

DURATION_PATTERN = re.compile(r"^(?:(?P<hours>\d+)h)?(?:(?P<minutes>\d+)m)?(?:(?P<seconds>\d+)s)?$")

SEVERITY_STYLES = {
    Severity.ERROR: ("red", "✗"),
    Severity.WARN: ("yellow", "⚠"),
    Severity.INFO: ("blue", "ℹ"),
}


def parse_window_minutes(text: str) -> int:
    """Convert an overlap window such as ``24h``, ``1h30m`` or ``90`` to minutes.

    A bare number is taken as minutes. Seconds are accepted but the result is
    truncated to whole minutes.

    Raises:
        ValueError: If the text is not a duration of at least one minute.
    """
    text = text.strip()
    if text.isdigit():
        minutes = int(text)
    else:
        match = DURATION_PATTERN.match(text)
        if not text or match is None:
            raise ValueError(f"invalid duration: {text!r} (use e.g. 24h, 30m or 1h30m)")
        hours, mins, seconds = (
            int(match.group(name) or 0) for name in ("hours", "minutes", "seconds")
        )
        minutes = hours * 60 + mins + seconds // 60

    if minutes < 1:
        raise ValueError(f"duration must be at least one minute: {text!r}")
    return minutes


def print_issue(issue: Issue) -> None:
    """Print one issue with its location and hint."""
    style, symbol = SEVERITY_STYLES[issue.severity]
    location = f"Line {issue.line_number}: " if issue.line_number else ""
    console.print(f"  [{style}]{symbol}[/] [dim]{issue.code}[/] {location}{escape(issue.message)}")
    if issue.expression:
        console.print(f"      [dim]Expression:[/] [cyan]{escape(issue.expression)}[/]")
    if issue.hint:
        console.print(f"      [dim]Hint:[/] {escape(issue.hint)}")


def print_compact(issue: Issue) -> None:
    style, symbol = SEVERITY_STYLES[issue.severity]
    location = f"Line {issue.line_number}: " if issue.line_number else ""
    console.print(f"  [{style}]{symbol}[/] [dim]{issue.code}[/] {location}{escape(issue.message)}")


def print_result(result: ValidationResult, verbose: bool) -> None:
    """Print a human readable summary followed by the shown issues."""
    shown = result.shown_issues(verbose)
    errors = [issue for issue in shown if issue.severity.is_error]
    warnings = [issue for issue in shown if issue.severity.is_warning]
    infos = [issue for issue in shown if issue.severity.is_info]

    if not shown:
        console.print("[green]✓[/] All valid")
        if result.total_jobs > 0:
            console.print(f"  {result.total_jobs} job(s) validated")
        return

    if errors:
        console.print(f"[red]✗[/] Found {len(errors)} error(s)")
    if warnings:
        console.print(f"[yellow]⚠[/] Found {len(warnings)} warning(s)")
    if infos:
        console.print(f"[blue]ℹ[/] Found {len(infos)} info message(s)")

    if result.total_jobs > 0:
        console.print(f"  Total jobs: {result.total_jobs}")
        console.print(f"  Valid: {result.valid_jobs}")
        console.print(f"  Invalid: {result.invalid_jobs}")

    console.print()
    for issue in errors:
        print_issue(issue)
    for issue in warnings:
        if verbose:
            print_issue(issue)
        else:
            print_compact(issue)
    for issue in infos:
        print_issue(issue)


@app.command()
def check(
    expression: str | None = typer.Argument(None, help="Cron expression to check"),
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        help="Crontab file to check",
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
        help="Show info-level issues, full warning details and debug logs",
    ),
    fail_on: str = typer.Option(
        "error",
        "--fail-on",
        help="Severity level to fail on: error, warn or info",
    ),
    max_runs_per_day: int | None = typer.Option(
        None,
        "--max-runs-per-day",
        min=1,
        help="Threshold for the excessive runs warning (default: 1000)",
    ),
    no_frequency_checks: bool = typer.Option(
        False,
        "--no-frequency-checks",
        help="Disable redundant pattern and excessive runs checks",
    ),
    hygiene_checks: bool = typer.Option(
        False,
        "--hygiene-checks",
        help="Enable command hygiene checks (absolute paths, redirection, %, quoting)",
    ),
    warn_on_overlap: bool = typer.Option(
        False,
        "--warn-on-overlap",
        help="Warn when several jobs run in the same minute",
    ),
    overlap_window: str | None = typer.Option(
        None,
        "--overlap-window",
        help="Overlap analysis window, e.g. 24h, 30m, 1h30m or plain minutes (default: 24h)",
    ),
    locale: str | None = typer.Option(
        None,
        "--locale",
        help="Locale for day and month names",
    ),
) -> None:
    """Check a cron expression or crontab for problems.

    Sources, in priority order:
    - EXPRESSION argument
    - --file crontab
    - --stdin crontab
    - the current user's crontab
    """
    setup_logging(verbose)

    try:
        fail_on_level = parse_fail_on_level(fail_on)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--fail-on") from e

    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    overrides: dict[str, object] = {}
    if locale is not None:
        overrides["locale"] = locale
    if max_runs_per_day is not None:
        overrides["max_runs_per_day"] = max_runs_per_day
    if no_frequency_checks:
        overrides["enable_frequency"] = False
    if hygiene_checks:
        overrides["enable_hygiene"] = True
    if warn_on_overlap:
        overrides["warn_on_overlap"] = True
    if overlap_window is not None:
        try:
            overrides["overlap_window_minutes"] = parse_window_minutes(overlap_window)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--overlap-window") from e
    settings = settings.model_copy(update=overrides)

    validator = Validator.from_settings(settings)
    reader = CrontabReader(validator.parser)

    if expression is not None:
        result = validator.validate_expression(expression)
    elif file is not None:
        result = validator.validate_crontab(reader, file)
    elif stdin:
        try:
            entries = reader.parse_stream(sys.stdin)
        except SourceReadError as e:
            console.print(f"[red]Error:[/] failed to read crontab from stdin: {escape(str(e))}")
            raise typer.Exit(1)
        result = validator.validate_entries(entries)
    else:
        result = validator.validate_user_crontab(reader)

    if json_output:
        data = result.to_dict(verbose)
        data["locale"] = validator.parser.locale
        if validator.parser.locale_fallback:
            data["requestedLocale"] = settings.locale
        console.print_json(data=data)
    else:
        print_result(result, verbose)

    exit_code = result.exit_code(fail_on_level, verbose)
    if exit_code:
        raise typer.Exit(exit_code)
