"""Cronkit CLI interface."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

# CLI App
app = typer.Typer(
    name="cronkit",
    help="Lint cron expressions and crontab files.",
    no_args_is_help=True,
)

# Console for rich output
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route log records to stderr through rich.

    Args:
        verbose: Enable debug logging.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Import commands to register them
from cronkit.cli.commands import check, next_cmd  # noqa: E402, F401


@app.command()
def version() -> None:
    """Show Cronkit version."""
    from cronkit import __version__

    console.print(f"Cronkit v{__version__}")


if __name__ == "__main__":
    app()
