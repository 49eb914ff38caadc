"""generate-tests command: write missing DAL tests into the paired test projects."""

from pathlib import Path
from typing import Optional

import click
import typer
from rich.table import Table

from ..core import AnalysisPipeline, DocumentState, PipelineResult
from ..exceptions import KinetixToolsError
from ..generation import TestStrategy
from ..logging_config import setup_logging
from . import app
from ._common import console, err_console, open_solution, resolve_config


def _print_summary(result: PipelineResult, dry_run: bool) -> None:
    table = Table(title="Test generation", show_header=True, header_style="bold")
    table.add_column("Documents", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Would generate" if dry_run else "Generated", justify="right")
    table.add_row(
        str(len(result.outcomes)),
        str(result.count(DocumentState.SKIPPED)),
        str(result.count(DocumentState.FAILED)),
        str(len(result.artifacts) if dry_run else len(result.written)),
    )
    console.print(table)


@app.command("generate-tests")
def generate_tests(
    solution: Path = typer.Argument(..., help="Visual Studio solution (.sln)"),
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Test content strategy (default: from configuration, semantic)",
        click_type=click.Choice(["semantic", "syntax"], case_sensitive=False),
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be generated without writing files",
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
    Generate unit tests for public DAL methods calling GetSqlCommand or GetBroker.

    Tests land in the [bold]<Project>.Test[/bold] project under DAL/<Class>/.
    Existing files are never overwritten.

    [bold cyan]Examples:[/bold cyan]

      kinetix-tools generate-tests Chaine.sln

      kinetix-tools generate-tests Chaine.sln --strategy syntax --dry-run
    """
    logger = setup_logging(verbose=verbose)

    try:
        settings = resolve_config(config=config, workers=workers, verbose=verbose, strategy=strategy)
        pipeline = AnalysisPipeline(settings, open_solution(solution))
        result = pipeline.generate(TestStrategy.parse(settings.strategy), dry_run=dry_run)

        if dry_run:
            for artifact in result.artifacts:
                console.print(f"[dim]would generate[/dim] {artifact.folder}/{artifact.file_name}")
        else:
            for artifact in result.generated:
                console.print(f"[green]{artifact.folder}/{artifact.file_name}[/green] generated")

        _print_summary(result, dry_run)

        if result.failed:
            logger.warning(f"{len(result.failed)} document(s) could not be processed")

    except typer.Exit:
        raise

    except KinetixToolsError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Generation interrupted by user")
        err_console.print("\n[yellow]Generation interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error")
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            err_console.print_exception()
        raise typer.Exit(1)
