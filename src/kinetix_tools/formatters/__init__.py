"""Reporting sinks for diagnostics.

``FORMATTERS`` maps the ``--format`` names accepted by ``kinetix-tools
analyze`` to their formatter classes.
"""

from .base import BaseFormatter
from .github_formatter import GithubFormatter
from .json_formatter import JsonFormatter
from .quiet_formatter import QuietFormatter
from .rich_formatter import RichFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "rich": RichFormatter,
    "json": JsonFormatter,
    "github": GithubFormatter,
    "quiet": QuietFormatter,
}


def get_formatter(name: str) -> BaseFormatter:
    """Formatter registered under ``name``.

    Raises:
        ValueError: If name is not recognized
    """
    try:
        return FORMATTERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown formatter: {name!r}. Choose from: {', '.join(FORMATTERS)}"
        ) from None


__all__ = [
    "BaseFormatter",
    "FORMATTERS",
    "RichFormatter",
    "JsonFormatter",
    "GithubFormatter",
    "QuietFormatter",
    "get_formatter",
]
