"""Errors raised while turning a document into a source model.

All of them are per-document: the pipeline records them on the document's
outcome and keeps going with the others.
"""

from pathlib import Path
from typing import Union

from .base import KinetixToolsError


class AnalysisError(KinetixToolsError):
    """Base class for analysis-related errors."""


class _DocumentError(AnalysisError):
    """An analysis error tied to one source file."""

    headline = "Cannot analyze"

    def __init__(self, filepath: Union[Path, str], reason: str, **context: str):
        super().__init__(
            f"{self.headline}: {filepath}",
            details={"filepath": filepath, **context, "reason": reason},
        )
        self.filepath = Path(filepath)
        self.reason = reason


class FileAccessError(_DocumentError):
    """A source file or artifact could not be read or written."""

    headline = "Cannot access file"


class ParsingError(_DocumentError):
    """The parser produced no usable tree for a source file."""

    def __init__(self, filepath: Union[Path, str], language: str, reason: str):
        self.headline = f"Failed to parse {language} file"
        super().__init__(filepath, reason, language=language)
        self.language = language


class DocumentLoadError(_DocumentError):
    """The source model of a document could not be built."""

    headline = "Cannot load document"

    def __init__(self, filepath: Union[Path, str], project: str, reason: str):
        super().__init__(filepath, reason, project=project)
        self.project = project


class UnsupportedLanguageError(AnalysisError):
    """The tree-sitter grammar for a language is not installed.

    Raised before any document is dispatched, so it aborts the run.
    """

    def __init__(self, language: str, package: str):
        super().__init__(
            f"No tree-sitter grammar for {language}",
            details={"install": f"pip install {package}"},
        )
        self.language = language
        self.package = package
