"""Syntax models for parsed source documents.

SyntaxTree/SyntaxNode are the language-agnostic program model the rules and
the generator work on. The tree-sitter normalizer produces them; nothing else
mutates them once a document is parsed.

Every node carries a kind tag, a 1-based source span and its ordered children.
Declarations additionally carry their name, the span of that name, modifiers,
marker attributes and declared type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum


class SyntaxKind(Enum):
    """Stable node kinds of the normalized tree."""

    COMPILATION_UNIT = "compilation_unit"
    NAMESPACE_DECLARATION = "namespace_declaration"
    FILE_SCOPED_NAMESPACE_DECLARATION = "file_scoped_namespace_declaration"
    CLASS_DECLARATION = "class_declaration"
    INTERFACE_DECLARATION = "interface_declaration"
    STRUCT_DECLARATION = "struct_declaration"
    METHOD_DECLARATION = "method_declaration"
    CONSTRUCTOR_DECLARATION = "constructor_declaration"
    PROPERTY_DECLARATION = "property_declaration"
    FIELD_DECLARATION = "field_declaration"
    VARIABLE_DECLARATOR = "variable_declarator"
    PARAMETER = "parameter"
    LOCAL_DECLARATION = "local_declaration"
    DECLARATION_EXPRESSION = "declaration_expression"
    INVOCATION_EXPRESSION = "invocation_expression"
    MEMBER_ACCESS_EXPRESSION = "member_access_expression"
    ASSIGNMENT_EXPRESSION = "assignment_expression"
    ARGUMENT = "argument"
    IDENTIFIER_NAME = "identifier_name"
    THIS_EXPRESSION = "this_expression"
    BASE_EXPRESSION = "base_expression"
    OTHER = "other"


TYPE_DECLARATION_KINDS = frozenset(
    {
        SyntaxKind.CLASS_DECLARATION,
        SyntaxKind.INTERFACE_DECLARATION,
        SyntaxKind.STRUCT_DECLARATION,
    }
)

MEMBER_DECLARATION_KINDS = frozenset(
    {
        SyntaxKind.METHOD_DECLARATION,
        SyntaxKind.CONSTRUCTOR_DECLARATION,
        SyntaxKind.PROPERTY_DECLARATION,
    }
)

NAMESPACE_KINDS = frozenset(
    {
        SyntaxKind.NAMESPACE_DECLARATION,
        SyntaxKind.FILE_SCOPED_NAMESPACE_DECLARATION,
    }
)


@dataclass(frozen=True)
class TextSpan:
    """Source range with 1-based lines and columns."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def from_points(cls, start: tuple[int, int], end: tuple[int, int]) -> TextSpan:
        """Build a span from tree-sitter's 0-based (row, column) points."""
        return cls(start[0] + 1, start[1] + 1, end[0] + 1, end[1] + 1)

    def __str__(self) -> str:
        return f"{self.start_line}:{self.start_column}"


@dataclass(frozen=True)
class Location:
    """A span inside a document."""

    path: str
    span: TextSpan

    @property
    def line(self) -> int:
        return self.span.start_line

    @property
    def column(self) -> int:
        return self.span.start_column

    def __str__(self) -> str:
        return f"{self.path}:{self.span.start_line}:{self.span.start_column}"


@dataclass(eq=False)
class SyntaxNode:
    """A node of the normalized syntax tree.

    Nodes compare by identity so they can key symbol tables.

    Attributes:
        kind: Normalized node kind
        span: Source span of the whole node
        raw_kind: Grammar node type the node was built from
        name: Declared name, referenced identifier, or invoked/accessed member name
        name_span: Span of the name token (diagnostics anchor here)
        modifiers: Declaration modifiers ("public", "readonly", "out" for parameters...)
        attributes: Normalized marker attribute names
        type_name: Declared type, or return type for methods
        base_types: Base list entries of a type declaration
        ref_kind: "out", "ref" or "in" for arguments
        has_initializer: True when a variable declarator has an initializer
        children: Ordered child nodes
        parent: Enclosing node (None for the root)
    """

    kind: SyntaxKind
    span: TextSpan
    raw_kind: str = ""
    name: str | None = None
    name_span: TextSpan | None = None
    modifiers: frozenset[str] = frozenset()
    attributes: tuple[str, ...] = ()
    type_name: str | None = None
    base_types: tuple[str, ...] = ()
    ref_kind: str | None = None
    has_initializer: bool = False
    children: list[SyntaxNode] = field(default_factory=list)
    parent: SyntaxNode | None = field(default=None, repr=False)

    def walk(self, prune: Callable[[SyntaxNode], bool] | None = None) -> Iterator[SyntaxNode]:
        """Depth-first pre-order traversal starting at this node.

        Args:
            prune: When it returns True for a node (other than self), that node
                and its subtree are not visited.
        """
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            if node is not self and prune is not None and prune(node):
                continue
            yield node
            stack.extend(reversed(node.children))

    def descendants(self, *kinds: SyntaxKind) -> Iterator[SyntaxNode]:
        """All nodes below this one, optionally restricted to ``kinds``."""
        for node in self.walk():
            if node is self:
                continue
            if not kinds or node.kind in kinds:
                yield node

    def child_nodes(self, *kinds: SyntaxKind) -> list[SyntaxNode]:
        """Direct children, optionally restricted to ``kinds``."""
        return [c for c in self.children if not kinds or c.kind in kinds]

    def ancestors(self) -> Iterator[SyntaxNode]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def first_ancestor(self, *kinds: SyntaxKind) -> SyntaxNode | None:
        for node in self.ancestors():
            if node.kind in kinds:
                return node
        return None

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def left(self) -> SyntaxNode | None:
        """Assignment target."""
        return self.children[0] if self.children else None

    @property
    def right(self) -> SyntaxNode | None:
        """Assigned value."""
        return self.children[1] if len(self.children) > 1 else None

    @property
    def expression(self) -> SyntaxNode | None:
        """Expression of an argument, or receiver of a member access."""
        if self.kind is SyntaxKind.ARGUMENT:
            return self.children[-1] if self.children else None
        return self.children[0] if self.children else None

    @property
    def callee(self) -> SyntaxNode | None:
        """Invoked expression of an invocation."""
        return self.children[0] if self.children else None

    @property
    def arguments(self) -> list[SyntaxNode]:
        return self.child_nodes(SyntaxKind.ARGUMENT)

    @property
    def parameters(self) -> list[SyntaxNode]:
        return self.child_nodes(SyntaxKind.PARAMETER)

    @property
    def declarators(self) -> list[SyntaxNode]:
        return self.child_nodes(SyntaxKind.VARIABLE_DECLARATOR)


@dataclass(eq=False)
class SyntaxTree:
    """Parsed document: its path, root node and source text."""

    path: str
    root: SyntaxNode
    text: str = ""
    has_errors: bool = False

    def type_declarations(self) -> list[SyntaxNode]:
        """Every class, interface and struct declaration, outermost first."""
        return list(self.root.descendants(*TYPE_DECLARATION_KINDS))

    def location(self, node: SyntaxNode) -> Location:
        """Location of a node's name when it has one, else of the whole node."""
        return Location(self.path, node.name_span or node.span)

    def namespace_of(self, node: SyntaxNode) -> str | None:
        """Full namespace name of a declaration (block or file-scoped namespaces)."""
        return namespace_of(node, self.root)


def namespace_of(node: SyntaxNode, root: SyntaxNode | None = None) -> str | None:
    """Full namespace name of a declaration.

    Block namespaces are read from the ancestors. A file-scoped namespace that
    the grammar puts beside, rather than around, the declarations is found
    among the root's children.
    """
    if root is None:
        root = node
        for ancestor in node.ancestors():
            root = ancestor
    parts = [
        ancestor.name
        for ancestor in node.ancestors()
        if ancestor.kind in NAMESPACE_KINDS and ancestor.name
    ]
    if parts:
        return ".".join(reversed(parts))
    for child in root.children:
        if child.kind is SyntaxKind.FILE_SCOPED_NAMESPACE_DECLARATION and child.name:
            return child.name
    return None
