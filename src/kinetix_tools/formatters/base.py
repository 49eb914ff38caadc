"""Base formatter interface for Kinetix Tools diagnostic output."""

from abc import ABC, abstractmethod
from typing import List

from ..rules.models import Diagnostic


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, diagnostics: List[Diagnostic]) -> None:
        """Render diagnostics to stdout/stderr as appropriate."""

    @abstractmethod
    def format(self, diagnostics: List[Diagnostic]) -> str:
        """Return formatted string representation of diagnostics."""
