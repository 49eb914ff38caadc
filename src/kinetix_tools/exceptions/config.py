"""Errors in what the user handed us: the solution path, settings, output locations."""

from pathlib import Path
from typing import Any, Optional

from .base import KinetixToolsError


class ConfigurationError(KinetixToolsError):
    """Base class for configuration-related errors."""


class InvalidPathError(ConfigurationError):
    """A solution or config path that does not exist or cannot be read."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """A setting outside its allowed values."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(f"Invalid configuration for {key}: {value!r}", details={"reason": reason})
        self.key = key
        self.value = value
        self.reason = reason


class SecurityError(ConfigurationError):
    """A read or write that would escape its allowed directory or size."""

    def __init__(self, reason: str, filepath: Optional[Path] = None):
        details = {"filepath": filepath} if filepath is not None else None
        super().__init__(f"Refused: {reason}", details=details)
        self.reason = reason
        self.filepath = filepath
