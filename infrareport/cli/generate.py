"""CLI command for generating an infrastructure completion report."""

import asyncio
from pathlib import Path

import typer

from infrareport.config import load_settings
from infrareport.exceptions import ConfigurationError, RunInProgressError, ValidationError
from infrareport.imaging import load_image
from infrareport.llm import get_provider
from infrareport.orchestrator import ReportOrchestrator
from infrareport.ratelimit import RateLimiter
from infrareport.report import render_report, report_to_json
from infrareport.report.pdf import export_pdf
from infrareport.cli.utils import configure_logging, echo_event, open_cache


def generate_command(
    image: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Photo of the incomplete or damaged infrastructure",
    ),
    description: str = typer.Option(
        ...,
        "--description",
        "-d",
        help="What the structure is and what needs to be completed",
    ),
    pdf: bool = typer.Option(
        False,
        "--pdf",
        help="Also export the report as a PDF",
    ),
    output_dir: Path = typer.Option(
        Path("."),
        "--output-dir",
        "-o",
        file_okay=False,
        help="Directory for the exported PDF",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the report as JSON instead of formatted text",
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Ignore previously cached analyses for this run",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Analyze an image and produce a completion report with costs and timeline."""
    configure_logging(verbose)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    try:
        handle = load_image(image)
    except ValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except OSError as e:
        typer.echo(f"Error reading image: {e}", err=True)
        raise typer.Exit(1)

    provider = get_provider(settings=settings)
    rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window=settings.rate_limit_window,
    )

    with open_cache(settings, disabled=no_cache) as cache:
        orchestrator = ReportOrchestrator(provider, cache, rate_limiter, settings.retry)
        orchestrator.subscribe(echo_event)
        try:
            outcome = asyncio.run(orchestrator.generate(handle, description))
        except RunInProgressError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    if not outcome.ok:
        raise typer.Exit(1)

    report = outcome.report
    if outcome.used_fallback:
        typer.echo("⚠ The analysis could not be structured; showing the raw response.", err=True)

    if as_json:
        typer.echo(report_to_json(report))
    else:
        typer.echo(render_report(report, original_source=str(image)))

    if pdf:
        try:
            path = export_pdf(report, output_dir, original=handle)
        except OSError as e:
            typer.echo(f"Error writing PDF: {e}", err=True)
            raise typer.Exit(1)
        typer.echo(f"✓ PDF saved to {path}", err=True)
