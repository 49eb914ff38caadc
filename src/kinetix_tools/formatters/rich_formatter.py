"""Rich terminal formatter for Kinetix Tools."""

from typing import List, Optional

from rich.console import Console
from rich.table import Table

from ..rules.models import Diagnostic, Severity
from .base import BaseFormatter

console = Console()

_SEVERITY_STYLES = {
    Severity.ERROR: "red bold",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
    Severity.HIDDEN: "dim",
}


def _severity_label(severity: Severity) -> str:
    style = _SEVERITY_STYLES[severity]
    return f"[{style}]{severity.value}[/{style}]"


class RichFormatter(BaseFormatter):
    """Diagnostics table grouped by location, plus a one-line summary."""

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console

    def render(self, diagnostics: List[Diagnostic]) -> None:
        if not diagnostics:
            self.console.print("[green]No diagnostics.[/green]")
            return

        table = Table(show_header=True, header_style="bold", expand=False)
        table.add_column("Location", style="cyan", no_wrap=True)
        table.add_column("Severity")
        table.add_column("Id", style="bold")
        table.add_column("Message")

        for d in diagnostics:
            table.add_row(f"{d.path}:{d.line}:{d.column}", _severity_label(d.severity), d.id, d.message)

        self.console.print(table)
        self.console.print(self._summary(diagnostics))

    def format(self, diagnostics: List[Diagnostic]) -> str:
        # Rich output goes directly to console; return empty string
        self.render(diagnostics)
        return ""

    @staticmethod
    def _summary(diagnostics: List[Diagnostic]) -> str:
        counts: dict[Severity, int] = {}
        for d in diagnostics:
            counts[d.severity] = counts.get(d.severity, 0) + 1
        parts = [
            f"{counts[s]} {s.value}"
            for s in sorted(counts, key=lambda s: s.rank, reverse=True)
        ]
        return f"[bold]{len(diagnostics)} diagnostics[/bold] ({', '.join(parts)})"
