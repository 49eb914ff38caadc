"""Quiet formatter: one line per diagnostic."""

from typing import List

from ..rules.models import Diagnostic
from .base import BaseFormatter


class QuietFormatter(BaseFormatter):
    """Render ``path:line:col id`` lines only."""

    def render(self, diagnostics: List[Diagnostic]) -> None:
        output = self.format(diagnostics)
        if output:
            print(output)

    def format(self, diagnostics: List[Diagnostic]) -> str:
        return "\n".join(f"{d.path}:{d.line}:{d.column} {d.id}" for d in diagnostics)
