"""SourceModelProvider: parsed trees and semantic models per document.

One Compilation is built per project, lazily, the first time one of its
documents is requested. Referenced projects are compiled first so their types
are visible. Compilations are cached and never mutated afterwards; building is
serialized per project so concurrent document tasks share one instance.
"""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING

from ..exceptions import DocumentLoadError, KinetixToolsError, ParsingError, UnsupportedLanguageError
from ..file_ops import safe_read_file
from ..security import ResourceLimiter
from .normalizer import TreeSitterNormalizer
from .semantic import Compilation, SemanticModel
from .syntax import SyntaxTree

if TYPE_CHECKING:
    from ..workspace import Document, Project, Solution

logger = logging.getLogger(__name__)


class SourceModelProvider:
    """Builds and caches compilations for the projects of a solution.

    Args:
        solution: Loaded solution
        max_file_size: Largest source file parsed, in bytes
    """

    def __init__(self, solution: Solution, max_file_size: int) -> None:
        self.solution = solution
        self._limiter = ResourceLimiter(max_file_size=max_file_size)
        self._normalizer = TreeSitterNormalizer()
        self._parse_lock = Lock()  # tree-sitter parsers are not thread-safe
        self._locks_guard = Lock()
        self._project_locks: dict[str, Lock] = {}
        self._compilations: dict[str, Compilation] = {}
        self._trees: dict[Path, SyntaxTree] = {}
        self._failures: dict[Path, str] = {}

    @property
    def available(self) -> bool:
        """Whether the C# grammar is installed."""
        return self._normalizer.available

    def _lock_for(self, project_name: str) -> Lock:
        with self._locks_guard:
            return self._project_locks.setdefault(project_name, Lock())

    def parse_document(self, document: Document) -> SyntaxTree:
        """Parse one document.

        Raises:
            UnsupportedLanguageError: If the C# grammar is not installed
            DocumentLoadError: If the file cannot be read
            ParsingError: If the parser produced no tree
        """
        if not self._normalizer.available:
            raise UnsupportedLanguageError("csharp", "tree-sitter-c-sharp")

        try:
            content = safe_read_file(document.path, self._limiter)
        except KinetixToolsError as e:
            raise DocumentLoadError(document.path, document.project_name, e.message)

        with self._parse_lock:
            tree = self._normalizer.parse_tree(content, str(document.path))
        if tree is None:
            raise ParsingError(document.path, "csharp", "parser returned no tree")
        return tree

    def compilation(self, project: Project, _stack: tuple[str, ...] = ()) -> Compilation:
        """Compilation of a project, built on first use."""
        cached = self._compilations.get(project.name)
        if cached is not None:
            return cached

        with self._lock_for(project.name):
            cached = self._compilations.get(project.name)
            if cached is not None:
                return cached

            stack = (*_stack, project.name)
            references = [
                self.compilation(referenced, stack)
                for referenced in self.solution.referenced_projects(project)
                if referenced.name not in stack
            ]

            trees: list[SyntaxTree] = []
            for document in self.solution.documents(project):
                try:
                    tree = self.parse_document(document)
                except (DocumentLoadError, ParsingError) as e:
                    logger.warning(f"{document.path}: {e.reason}")
                    self._failures[document.path] = e.reason
                    continue
                self._trees[document.path] = tree
                trees.append(tree)

            compilation = Compilation(project.assembly_name, trees, references)
            self._compilations[project.name] = compilation
            logger.debug(
                f"Compiled {project.name}: {len(trees)} documents, {len(compilation.types)} types"
            )
            return compilation

    def semantic_model(self, document: Document) -> SemanticModel:
        """Semantic model of a document.

        Raises:
            DocumentLoadError: If the document's project is unknown or the document failed to load
        """
        project = self.solution.project_by_name(document.project_name)
        if project is None:
            raise DocumentLoadError(document.path, document.project_name, "unknown project")

        compilation = self.compilation(project)
        tree = self._trees.get(document.path)
        if tree is None:
            reason = self._failures.get(document.path, "document is not part of the compilation")
            raise DocumentLoadError(document.path, document.project_name, reason)
        return SemanticModel(compilation, tree)
