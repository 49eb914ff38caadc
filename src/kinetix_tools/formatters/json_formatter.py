"""JSON formatter for Kinetix Tools."""

import json
from typing import List

from ..rules.models import Diagnostic
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render diagnostics as a JSON list."""

    def render(self, diagnostics: List[Diagnostic]) -> None:
        print(self.format(diagnostics))

    def format(self, diagnostics: List[Diagnostic]) -> str:
        return json.dumps([d.to_dict() for d in diagnostics], indent=2)
