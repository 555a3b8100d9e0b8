"""CLI commands for Cronkit."""

# Import command modules to register them with the app
# These imports have side effects (register commands via @app.command())
from cronkit.cli.commands import check, next_cmd, stats

__all__ = ["check", "next_cmd", "stats"]
