"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config
from ..workspace import Solution, load_solution

console = Console()
# stdout carries the report; messages go to stderr
err_console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    **overrides,
) -> AnalysisConfig:
    """Build the configuration from CLI options."""
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    return load_config(config_file=config, **overrides)


def open_solution(path: Path) -> Solution:
    """Load the solution; a missing file raises InvalidPathError before any work starts."""
    solution = load_solution(path)
    if not solution.projects:
        err_console.print(f"[yellow]No C# projects found in {path}[/yellow]")
    return solution
