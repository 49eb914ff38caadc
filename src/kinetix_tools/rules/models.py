"""Diagnostic data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..scanning.syntax import Location


class Severity(Enum):
    """Diagnostic severity, lowest first."""

    HIDDEN = "hidden"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: str) -> Severity:
        return cls(value.lower())


_SEVERITY_RANK = {
    Severity.HIDDEN: 0,
    Severity.INFO: 1,
    Severity.WARNING: 2,
    Severity.ERROR: 3,
}


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Immutable rule metadata.

    Attributes:
        id: Stable diagnostic id (e.g. "KTA1103")
        title: One-line rule title
        message_format: ``str.format`` template for diagnostic messages
        category: Rule category ("Design", "Coverage")
        severity: Severity every diagnostic of this rule is reported with
        description: Longer explanation
        enabled: Whether the rule runs by default
    """

    id: str
    title: str
    message_format: str
    category: str
    severity: Severity = Severity.WARNING
    description: str = ""
    enabled: bool = True


def create_rule(
    id: str,
    title: str,
    message_format: str,
    category: str,
    description: str,
    severity: Severity = Severity.WARNING,
) -> DiagnosticDescriptor:
    """Build a descriptor that is enabled by default."""
    return DiagnosticDescriptor(
        id=id,
        title=title,
        message_format=message_format,
        category=category,
        severity=severity,
        description=description,
        enabled=True,
    )


@dataclass(frozen=True)
class Diagnostic:
    """A located finding of one rule."""

    descriptor: DiagnosticDescriptor
    location: Location
    message: str

    @classmethod
    def create(cls, descriptor: DiagnosticDescriptor, location: Location, **arguments: Any) -> Diagnostic:
        return cls(descriptor, location, descriptor.message_format.format(**arguments))

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def severity(self) -> Severity:
        return self.descriptor.severity

    @property
    def path(self) -> str:
        return self.location.path

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def sort_key(self) -> tuple[str, int, int, str]:
        return (self.path, self.line, self.column, self.id)

    def to_dict(self) -> dict[str, Any]:
        span = self.location.span
        return {
            "id": self.id,
            "severity": self.severity.value,
            "category": self.descriptor.category,
            "message": self.message,
            "path": self.path,
            "line": span.start_line,
            "column": span.start_column,
            "end_line": span.end_line,
            "end_column": span.end_column,
        }
