"""Tree-sitter parser wrapper for C# sources.

Handles a missing tree-sitter or C# grammar install gracefully: the
CSHARP_AVAILABLE flag is False and parse() returns None.

Usage:
    if CSHARP_AVAILABLE:
        parser = TreeSitterParser()
        tree = parser.parse(code_bytes)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)

TREE_SITTER_AVAILABLE = False
CSHARP_AVAILABLE = False
_tree_sitter_module: Any = None
_csharp_module: Any = None

try:
    import tree_sitter as _tree_sitter_module  # type: ignore[no-redef]

    TREE_SITTER_AVAILABLE = True

    try:
        import tree_sitter_c_sharp as _csharp_module  # type: ignore[no-redef]

        CSHARP_AVAILABLE = True
    except ImportError:
        pass

except ImportError:
    TREE_SITTER_AVAILABLE = False


if TYPE_CHECKING:

    class Node:
        type: str
        is_named: bool
        start_byte: int
        end_byte: int
        start_point: tuple[int, int]
        end_point: tuple[int, int]
        children: list[Node]
        named_children: list[Node]
        has_error: bool

        def child_by_field_name(self, name: str) -> Node | None: ...

    class Tree:
        root_node: Node


class TreeSitterParser:
    """Wrapper around the tree-sitter C# grammar."""

    language_name = "csharp"

    def __init__(self) -> None:
        self._parser: Any = None

        if not CSHARP_AVAILABLE:
            return

        try:
            # tree-sitter >= 0.23 grammars return a PyCapsule; wrap in Language()
            language = _tree_sitter_module.Language(_csharp_module.language())
            self._parser = _tree_sitter_module.Parser(language)
        except Exception as e:
            logger.warning(f"Could not initialize the C# grammar: {e}")
            self._parser = None

    @property
    def available(self) -> bool:
        return self._parser is not None

    def parse(self, code: bytes) -> Tree | None:
        """Parse C# source.

        Args:
            code: Source code as bytes

        Returns:
            Tree object, or None if the grammar is not available or parsing failed
        """
        if self._parser is None:
            return None

        try:
            result: Tree | None = self._parser.parse(code)
            return result
        except Exception as e:
            logger.debug(f"tree-sitter parse failed: {e}")
            return None
