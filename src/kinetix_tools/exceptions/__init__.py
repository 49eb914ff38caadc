"""Exception hierarchy for Kinetix Tools.

    KinetixToolsError
    ├── ConfigurationError      fatal, reported before any document runs
    │   ├── InvalidPathError
    │   ├── InvalidConfigError
    │   └── SecurityError
    └── AnalysisError           per document unless noted
        ├── FileAccessError
        ├── ParsingError
        ├── DocumentLoadError
        └── UnsupportedLanguageError   (fatal: no grammar)
"""

from .analysis import (
    AnalysisError,
    DocumentLoadError,
    FileAccessError,
    ParsingError,
    UnsupportedLanguageError,
)
from .base import KinetixToolsError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError, SecurityError

__all__ = [
    "KinetixToolsError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "SecurityError",
    "AnalysisError",
    "FileAccessError",
    "ParsingError",
    "DocumentLoadError",
    "UnsupportedLanguageError",
]
