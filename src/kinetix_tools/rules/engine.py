"""RuleEngine: one depth-first pass per tree, dispatching to subscribed rules.

The traversal threads an immutable TraversalContext (enclosing type and
member) down the tree instead of keeping visitor state, so a run is a pure
function of (tree, semantic model) and runs for different trees can proceed
in parallel.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from ..logging_config import get_logger
from ..scanning.syntax import (
    MEMBER_DECLARATION_KINDS,
    TYPE_DECLARATION_KINDS,
    SyntaxNode,
    SyntaxTree,
)
from .models import Diagnostic

if TYPE_CHECKING:
    from ..scanning.semantic import SemanticModel
    from .protocols import Rule

logger = get_logger(__name__)


@dataclass(frozen=True)
class TraversalContext:
    """Where the traversal currently is.

    Attributes:
        tree: Tree being analyzed
        model: Semantic model of the tree
        enclosing_type: Innermost class/interface/struct declaration, if any
        enclosing_method: Innermost method/constructor/property declaration, if any
    """

    tree: SyntaxTree
    model: SemanticModel
    enclosing_type: Optional[SyntaxNode] = None
    enclosing_method: Optional[SyntaxNode] = None

    def entering(self, node: SyntaxNode) -> TraversalContext:
        """Context for ``node`` and its subtree."""
        if node.kind in TYPE_DECLARATION_KINDS:
            return replace(self, enclosing_type=node, enclosing_method=None)
        if node.kind in MEMBER_DECLARATION_KINDS:
            return replace(self, enclosing_method=node)
        return self


class RuleEngine:
    """Registry of rules plus the traversal that feeds them.

    Args:
        disabled: Diagnostic ids that are never evaluated
    """

    def __init__(self, disabled: Iterable[str] = ()) -> None:
        self._rules: list[Rule] = []
        self._disabled = frozenset(disabled)

    def register(self, rule: Rule) -> None:
        if any(r.descriptor.id == rule.descriptor.id for r in self._rules):
            raise ValueError(f"Rule {rule.descriptor.id} is already registered")
        self._rules.append(rule)

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def active_rules(self) -> list[Rule]:
        return [
            r for r in self._rules if r.descriptor.enabled and r.descriptor.id not in self._disabled
        ]

    def run(self, tree: SyntaxTree, model: SemanticModel) -> list[Diagnostic]:
        """Run every active rule over ``tree``.

        Returns:
            Diagnostics sorted by location, then id
        """
        active = self.active_rules()
        if not active:
            return []

        by_node: dict = {}
        by_symbol: dict = {}
        for rule in active:
            for kind in rule.node_kinds:
                by_node.setdefault(kind, []).append(rule)
            for kind in rule.symbol_kinds:
                by_symbol.setdefault(kind, []).append(rule)

        diagnostics: list[Diagnostic] = []
        root_context = TraversalContext(tree=tree, model=model)
        stack: list[tuple[SyntaxNode, TraversalContext]] = [(tree.root, root_context)]

        while stack:
            node, outer = stack.pop()
            context = outer.entering(node)

            for rule in by_node.get(node.kind, ()):
                self._invoke(rule, lambda r=rule: r.analyze_node(node, context), tree, diagnostics)

            if by_symbol:
                symbol = model.resolve_declared(node)
                if symbol is not None:
                    for rule in by_symbol.get(symbol.kind, ()):
                        self._invoke(
                            rule,
                            lambda r=rule, s=symbol: r.analyze_symbol(s, node, context),
                            tree,
                            diagnostics,
                        )

            for child in reversed(node.children):
                stack.append((child, context))

        diagnostics.sort(key=Diagnostic.sort_key)
        return diagnostics

    @staticmethod
    def _invoke(
        rule: Rule,
        call: Callable[[], list[Diagnostic]],
        tree: SyntaxTree,
        diagnostics: list[Diagnostic],
    ) -> None:
        # A rule failing on an unexpected shape must not fail the document.
        try:
            diagnostics.extend(call())
        except Exception as e:
            logger.warning(f"{rule.descriptor.id} failed on {tree.path}: {e}")
