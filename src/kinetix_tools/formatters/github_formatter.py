"""GitHub Actions formatter: workflow annotations."""

from typing import List

from ..rules.models import Diagnostic, Severity
from .base import BaseFormatter

_LEVELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "notice",
    Severity.HIDDEN: "notice",
}


def _escape(value: str) -> str:
    """Escape annotation data as the workflow command parser expects."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GithubFormatter(BaseFormatter):
    """Output ``::warning file=..,line=..,col=..::`` annotations."""

    def render(self, diagnostics: List[Diagnostic]) -> None:
        output = self.format(diagnostics)
        if output:
            print(output)

    def format(self, diagnostics: List[Diagnostic]) -> str:
        lines: list[str] = []
        for d in diagnostics:
            level = _LEVELS[d.severity]
            file = _escape(d.path).replace(",", "%2C").replace(":", "%3A")
            lines.append(
                f"::{level} file={file},line={d.line},col={d.column}::{d.id} {_escape(d.message)}"
            )
        return "\n".join(lines)
