"""CLI commands for inspecting and maintaining the analysis cache."""

from datetime import datetime
from typing import Optional

import typer

from infrareport.config import load_settings
from infrareport.exceptions import ConfigurationError
from infrareport.cli.utils import open_cache

# Subcommand group for cache management
cache_app = typer.Typer(
    name="cache",
    help="Inspect and maintain the analysis cache",
    add_completion=False,
)


def _settings():
    try:
        return load_settings()
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)


def _format_time(timestamp: Optional[float]) -> str:
    if timestamp is None:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


@cache_app.command("stats")
def cache_stats() -> None:
    """Show cache location and usage."""
    with open_cache(_settings()) as cache:
        stats = cache.stats()

    typer.echo(f"Cache file: {stats.path}")
    typer.echo(f"  Entries: {stats.entries}/{stats.max_entries}")
    typer.echo(f"  Expired: {stats.expired}")
    typer.echo(f"  Max age: {stats.max_age_seconds:g} seconds")
    typer.echo(f"  Oldest:  {_format_time(stats.oldest_created_at)}")
    typer.echo(f"  Newest:  {_format_time(stats.newest_created_at)}")


@cache_app.command("clear")
def cache_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every cached analysis."""
    if not yes and not typer.confirm("Remove all cached analyses?", default=False):
        raise typer.Exit(0)

    with open_cache(_settings()) as cache:
        count = len(cache)
        cache.clear()

    typer.echo(f"✓ Removed {count} cached entries")


@cache_app.command("purge")
def cache_purge() -> None:
    """Remove expired cached analyses."""
    with open_cache(_settings()) as cache:
        removed = cache.purge_expired()

    typer.echo(f"✓ Purged {removed} expired entries")
