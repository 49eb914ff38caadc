"""Protocol class for rule modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .models import Diagnostic, DiagnosticDescriptor

if TYPE_CHECKING:
    from ..scanning.symbols import Symbol, SymbolKind
    from ..scanning.syntax import SyntaxKind, SyntaxNode
    from .engine import TraversalContext


class Rule(Protocol):
    """Rules subscribe to node kinds and/or declared-symbol kinds.

    The engine calls ``analyze_node`` for every node of a subscribed kind and
    ``analyze_symbol`` for every declaration whose symbol is of a subscribed
    kind. Rules keep no state between calls.
    """

    descriptor: DiagnosticDescriptor
    node_kinds: frozenset[SyntaxKind]
    symbol_kinds: frozenset[SymbolKind]

    def analyze_node(self, node: SyntaxNode, context: TraversalContext) -> list[Diagnostic]: ...

    def analyze_symbol(
        self, symbol: Symbol, node: SyntaxNode, context: TraversalContext
    ) -> list[Diagnostic]: ...
