"""CLI entry point for infrareport.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from infrareport import __version__
from infrareport.cli.cache import cache_app
from infrareport.cli.config import config_app
from infrareport.cli.generate import generate_command

# Main application
app = typer.Typer(
    name="infrareport",
    help="infrareport: AI-powered infrastructure completion reports",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")
app.add_typer(cache_app, name="cache")

# Add individual commands
app.command("generate")(generate_command)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"infrareport {__version__}")
        raise typer.Exit()


@app.callback()
def main_command(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Generate repair plans, cost estimates and timelines from infrastructure photos."""


__all__ = [
    "app",
    "cache_app",
    "config_app",
    "generate_command",
    "main_command",
]
