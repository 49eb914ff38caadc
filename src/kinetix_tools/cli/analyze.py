"""analyze command: run the rules and report diagnostics."""

from pathlib import Path
from typing import Optional

import click
import typer

from ..core import AnalysisPipeline
from ..exceptions import KinetixToolsError
from ..formatters import FORMATTERS, get_formatter
from ..logging_config import setup_logging
from ..rules.models import Diagnostic, Severity
from . import app
from ._common import err_console, open_solution, resolve_config


def _visible(diagnostics: list[Diagnostic], min_severity: Severity, show_hidden: bool) -> list[Diagnostic]:
    if show_hidden:
        return diagnostics
    floor = max(min_severity.rank, Severity.INFO.rank)
    return [d for d in diagnostics if d.severity.rank >= floor]


def _should_fail(diagnostics: list[Diagnostic], fail_on: Optional[str]) -> bool:
    if fail_on is None:
        return False
    threshold = Severity.parse(fail_on)
    return any(d.severity.rank >= threshold.rank for d in diagnostics)


@app.command()
def analyze(
    solution: Path = typer.Argument(..., help="Visual Studio solution (.sln) to analyze"),
    output_format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format",
        click_type=click.Choice(list(FORMATTERS), case_sensitive=False),
    ),
    show_hidden: bool = typer.Option(
        False,
        "--show-hidden",
        help="Also report hidden diagnostics (KTA1300)",
    ),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Exit 1 if a diagnostic meets this severity: info | warning | error",
        click_type=click.Choice(["info", "warning", "error"], case_sensitive=False),
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect)",
        min=1,
        max=32,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Run the architecture rules over every business-assembly document.

    [bold cyan]Examples:[/bold cyan]

      kinetix-tools analyze Chaine.sln

      kinetix-tools analyze Chaine.sln --format github --fail-on warning
    """
    logger = setup_logging(verbose=verbose, quiet=output_format != "rich")

    try:
        settings = resolve_config(config=config, workers=workers, verbose=verbose)
        pipeline = AnalysisPipeline(settings, open_solution(solution))
        result = pipeline.analyze()

        diagnostics = _visible(result.diagnostics, Severity.parse(settings.min_severity), show_hidden)
        get_formatter(output_format.lower()).render(diagnostics)

        if result.failed:
            logger.warning(f"{len(result.failed)} document(s) could not be analyzed")

        if _should_fail(diagnostics, fail_on):
            raise typer.Exit(1)

    except typer.Exit:
        raise

    except KinetixToolsError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        err_console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error")
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            err_console.print_exception()
        raise typer.Exit(1)
