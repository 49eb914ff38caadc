"""Root of the Kinetix Tools error hierarchy."""

from typing import Any, Dict, Optional


class KinetixToolsError(Exception):
    """An error the tool raises on purpose.

    The CLI prints these as a single red line; anything else is a bug and gets
    a traceback.

    Attributes:
        message: One-line summary
        details: Context appended to the summary as ``key=value`` pairs
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = {key: str(value) for key, value in (details or {}).items()}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
