"""KTA1103: readonly field neither initialized nor injected.

Category: Design
Severity: warning

Detected when:
- A class field is readonly and its declarator has no initializer
- No constructor declared in the class assigns it (``_x = ...``,
  ``this._x = ...``) or passes it as an ``out`` argument

One assigning constructor is enough: the rule does not require every
constructor to assign the field. Constructors of other partial declarations
of the class are not looked at, nor are fields of structs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..scanning.symbols import FieldSymbol, Symbol, SymbolKind
from ..scanning.syntax import TYPE_DECLARATION_KINDS, SyntaxKind, SyntaxNode
from .models import Diagnostic, Severity, create_rule

if TYPE_CHECKING:
    from ..scanning.semantic import SemanticModel
    from .engine import TraversalContext

READONLY_FIELD_INJECTION = create_rule(
    id="KTA1103",
    title="Readonly fields should be initialized or injected in the constructor",
    message_format="Readonly field '{field}' is never initialized",
    category="Design",
    description="Readonly fields must be initialized or injected in the constructor.",
    severity=Severity.WARNING,
)


def assignment_sites(
    field: FieldSymbol, constructors: list[SyntaxNode], model: SemanticModel
) -> list[SyntaxNode]:
    """Assignments and out-arguments targeting ``field`` across ``constructors``."""
    sites: list[SyntaxNode] = []
    for constructor in constructors:
        for node in constructor.walk(prune=lambda n: n.kind in TYPE_DECLARATION_KINDS):
            if node.kind is SyntaxKind.ASSIGNMENT_EXPRESSION:
                target = node.left
            elif node.kind is SyntaxKind.ARGUMENT and node.ref_kind == "out":
                target = node.expression
            else:
                continue
            if target is not None and model.resolve(target) == field:
                sites.append(node)
    return sites


class ReadonlyFieldInjectionRule:
    """Reports readonly fields no constructor ever sets."""

    descriptor = READONLY_FIELD_INJECTION
    node_kinds: frozenset = frozenset()
    symbol_kinds = frozenset({SymbolKind.FIELD})

    def analyze_node(self, node, context) -> list[Diagnostic]:
        return []

    def analyze_symbol(
        self, symbol: Symbol, node: SyntaxNode, context: TraversalContext
    ) -> list[Diagnostic]:
        if not isinstance(symbol, FieldSymbol):
            return []
        if not symbol.is_readonly or symbol.has_initializer:
            return []

        owner = context.enclosing_type
        if owner is None or owner.kind is not SyntaxKind.CLASS_DECLARATION:
            return []

        constructors = owner.child_nodes(SyntaxKind.CONSTRUCTOR_DECLARATION)
        if assignment_sites(symbol, constructors, context.model):
            return []

        return [Diagnostic.create(self.descriptor, context.tree.location(node), field=symbol.name)]
