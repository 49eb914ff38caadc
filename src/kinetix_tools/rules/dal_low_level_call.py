"""KTA1300: data-access method using a low-level persistence accessor.

Category: Coverage
Severity: hidden

Not shown to users by default. The test generator uses it as its eligibility
signal: every public DAL method that reaches for a low-level accessor gets a
generated test.

Detected when:
- The class is classified DATA_ACCESS_IMPLEMENTATION
- One of its methods invokes a deny-listed accessor (GetSqlCommand, GetBroker)

Only the first matching call of a method is reported; the rest of that
method's body is not examined. Nested types are not part of the walk, and
calls outside method bodies (constructors, properties, field initializers)
are ignored.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import TYPE_CHECKING, Optional

from ..config import DEFAULT_CONVENTIONS, ConventionConfig
from ..scanning.symbols import TypeSymbol
from ..scanning.syntax import TYPE_DECLARATION_KINDS, SyntaxKind, SyntaxNode
from ..semantics import Role, classify
from .models import Diagnostic, Severity, create_rule

if TYPE_CHECKING:
    from ..scanning.semantic import SemanticModel
    from .engine import TraversalContext

DAL_LOW_LEVEL_CALL = create_rule(
    id="KTA1300",
    title="Data-access method using a low-level accessor",
    message_format="Method '{method}' calls {accessor}",
    category="Coverage",
    description="Data-access method calling GetSqlCommand or GetBroker; it should have a unit test.",
    severity=Severity.HIDDEN,
)


def find_low_level_call(
    method: SyntaxNode, model: SemanticModel, accessors: Collection[str]
) -> Optional[SyntaxNode]:
    """First invocation in ``method`` whose resolved target is a deny-listed accessor.

    Pre-order walk; returns as soon as one matches. Calls that do not match
    are descended into, so ``Wrap(GetSqlCommand())`` is found.
    """
    for node in method.walk(prune=lambda n: n.kind in TYPE_DECLARATION_KINDS):
        if node.kind is not SyntaxKind.INVOCATION_EXPRESSION:
            continue
        symbol = model.resolve(node)
        if symbol is not None and symbol.name in accessors:
            return node
    return None


class DalLowLevelCallRule:
    """Reports DAL methods that call a low-level accessor."""

    descriptor = DAL_LOW_LEVEL_CALL
    node_kinds = frozenset({SyntaxKind.CLASS_DECLARATION})
    symbol_kinds: frozenset = frozenset()

    def __init__(self, conventions: ConventionConfig = DEFAULT_CONVENTIONS) -> None:
        self.conventions = conventions

    def analyze_node(self, node: SyntaxNode, context: TraversalContext) -> list[Diagnostic]:
        symbol = context.model.resolve_declared(node)
        if not isinstance(symbol, TypeSymbol):
            return []
        if Role.DATA_ACCESS_IMPLEMENTATION not in classify(symbol, context.model, self.conventions):
            return []

        diagnostics: list[Diagnostic] = []
        for method in node.child_nodes(SyntaxKind.METHOD_DECLARATION):
            call = find_low_level_call(method, context.model, self.conventions.low_level_accessors)
            if call is None:
                continue
            diagnostics.append(
                Diagnostic.create(
                    self.descriptor,
                    context.tree.location(method),
                    method=method.name,
                    accessor=call.name,
                )
            )
        return diagnostics

    def analyze_symbol(self, symbol, node, context) -> list[Diagnostic]:
        return []
