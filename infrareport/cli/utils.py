"""Shared utility functions for CLI commands."""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import typer

from infrareport.cache import CACHE_FILE_NAME, ResultCache, get_cache_file
from infrareport.config import Settings
from infrareport.orchestrator import EventKind, RunEvent

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL_ENV_VAR = "INFRAREPORT_LOG_LEVEL"


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for a CLI invocation.

    Args:
        verbose: Log at DEBUG. Otherwise the level comes from
            INFRAREPORT_LOG_LEVEL, defaulting to WARNING.
    """
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.getenv(LOG_LEVEL_ENV_VAR, "WARNING").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def mask_secret(value: str) -> str:
    """Mask an API key for display."""
    return value[:8] + "..." + value[-4:] if len(value) > 12 else "***"


@contextmanager
def open_cache(settings: Settings, disabled: bool = False) -> Iterator[ResultCache]:
    """Open the result cache described by settings.

    Args:
        settings: Effective settings.
        disabled: Use a throwaway cache in a temporary directory instead of
            the persistent one.

    Yields:
        The ResultCache.
    """
    if disabled:
        with tempfile.TemporaryDirectory(prefix="infrareport-") as tmp:
            yield ResultCache(
                Path(tmp) / CACHE_FILE_NAME,
                max_entries=settings.cache_max_entries,
                max_age=settings.cache_max_age,
            )
        return

    yield ResultCache(
        settings.cache_path or get_cache_file(),
        max_entries=settings.cache_max_entries,
        max_age=settings.cache_max_age,
    )


def echo_event(event: RunEvent) -> None:
    """Print an orchestrator event to stderr."""
    if event.kind == EventKind.READY or not event.message:
        return

    if event.kind == EventKind.PROGRESS:
        typer.echo(f"→ {event.message}", err=True)
    elif event.kind in (EventKind.WARNING, EventKind.RATE_LIMIT):
        typer.echo(f"⚠ {event.message}", err=True)
    elif event.kind == EventKind.ERROR:
        typer.echo(event.message, err=True)
    else:
        typer.echo(f"  {event.message}", err=True)
