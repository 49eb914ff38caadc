"""Compilation and semantic model over normalized syntax trees.

A Compilation binds every declaration of one assembly to a symbol once, at
construction. It is read-only afterwards, so SemanticModel instances for
different documents can be queried from several threads.

Resolution is name based:
    - parameters and locals shadow type members where they are visible: a
      local declared in a block or lambda only shadows inside it
    - ``this.x`` / ``base.x`` resolve along the containing type's base chain
    - invocations resolve to a declared method when one is found, otherwise to
      an external method symbol carrying only the invoked name
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator, Sequence

from .symbols import (
    AssemblySymbol,
    FieldSymbol,
    LocalSymbol,
    MethodKind,
    MethodSymbol,
    ParameterSymbol,
    PropertySymbol,
    Symbol,
    TypeKind,
    TypeRef,
    TypeSymbol,
)
from .syntax import (
    MEMBER_DECLARATION_KINDS,
    TYPE_DECLARATION_KINDS,
    SyntaxKind,
    SyntaxNode,
    SyntaxTree,
)

logger = logging.getLogger(__name__)

_TYPE_KINDS = {
    SyntaxKind.CLASS_DECLARATION: TypeKind.CLASS,
    SyntaxKind.INTERFACE_DECLARATION: TypeKind.INTERFACE,
    SyntaxKind.STRUCT_DECLARATION: TypeKind.STRUCT,
}


# Grammar nodes that bound the visibility of the locals declared inside them
_SCOPE_RAW_KINDS = frozenset(
    {
        "block",
        "lambda_expression",
        "anonymous_method_expression",
        "local_function_statement",
        "for_statement",
        "foreach_statement",
        "using_statement",
        "fixed_statement",
        "catch_clause",
        "switch_section",
    }
)


def _is_type_declaration(node: SyntaxNode) -> bool:
    return node.kind in TYPE_DECLARATION_KINDS


def _declaring_scope(node: SyntaxNode, member: SyntaxNode) -> SyntaxNode:
    for ancestor in node.ancestors():
        if ancestor is member or ancestor.raw_kind in _SCOPE_RAW_KINDS:
            return ancestor
    return member


class Compilation:
    """Symbols of one assembly plus the compilations it references.

    Args:
        assembly_name: Name of the assembly the trees belong to
        trees: Parsed documents of the assembly
        references: Compilations of referenced projects
    """

    def __init__(
        self,
        assembly_name: str,
        trees: Iterable[SyntaxTree],
        references: Sequence[Compilation] = (),
    ) -> None:
        self.assembly = AssemblySymbol(name=assembly_name)
        self.trees: tuple[SyntaxTree, ...] = tuple(trees)
        self.references: tuple[Compilation, ...] = tuple(references)

        self._types: dict[str, TypeSymbol] = {}
        self._types_by_name: dict[str, list[TypeSymbol]] = {}
        self._members: dict[str, dict[str, list[Symbol]]] = {}
        self._declared: dict[SyntaxNode, Symbol] = {}
        self._scopes: dict[SyntaxNode, dict[str, list[tuple[SyntaxNode, Symbol]]]] = {}

        self._bind_types()
        self._bind_members()

    @property
    def assembly_name(self) -> str:
        return self.assembly.name

    # ── binding ────────────────────────────────────────────────

    def _qualified_name(self, tree: SyntaxTree, node: SyntaxNode) -> str:
        parts = [node.name or ""]
        for ancestor in node.ancestors():
            if _is_type_declaration(ancestor):
                parts.append(ancestor.name or "")
        namespace = tree.namespace_of(node)
        if namespace:
            parts.append(namespace)
        return ".".join(reversed(parts))

    def _bind_types(self) -> None:
        grouped: dict[str, list[tuple[SyntaxTree, SyntaxNode]]] = {}
        for tree in self.trees:
            for node in tree.type_declarations():
                if not node.name:
                    continue
                grouped.setdefault(self._qualified_name(tree, node), []).append((tree, node))

        for qualified_name, declarations in grouped.items():
            first_tree, first_node = declarations[0]
            modifiers: set[str] = set()
            attributes: set[str] = set()
            bases: list[str] = []
            for _tree, node in declarations:
                modifiers.update(node.modifiers)
                attributes.update(node.attributes)
                bases.extend(b for b in node.base_types if b not in bases)

            symbol = TypeSymbol(
                name=first_node.name or "",
                location=first_tree.location(first_node),
                declaration=first_node,
                qualified_name=qualified_name,
                namespace=first_tree.namespace_of(first_node),
                type_kind=_TYPE_KINDS[first_node.kind],
                modifiers=frozenset(modifiers),
                attributes=frozenset(attributes),
                base_types=tuple(bases),
                assembly=self.assembly_name,
                declarations=tuple(node for _tree, node in declarations),
            )
            self._types[qualified_name] = symbol
            self._types_by_name.setdefault(symbol.name, []).append(symbol)
            for _tree, node in declarations:
                self._declared[node] = symbol

    def _bind_members(self) -> None:
        for tree in self.trees:
            for type_node in tree.type_declarations():
                type_symbol = self._declared.get(type_node)
                if not isinstance(type_symbol, TypeSymbol):
                    continue
                members = self._members.setdefault(type_symbol.qualified_name, {})
                for member in type_node.children:
                    for symbol in self._bind_member(tree, type_symbol, member):
                        members.setdefault(symbol.name, []).append(symbol)

    def _bind_member(
        self, tree: SyntaxTree, owner: TypeSymbol, node: SyntaxNode
    ) -> Iterator[Symbol]:
        if node.kind is SyntaxKind.FIELD_DECLARATION:
            for declarator in node.declarators:
                if not declarator.name:
                    continue
                field_symbol = FieldSymbol(
                    name=declarator.name,
                    location=tree.location(declarator),
                    declaration=declarator,
                    containing_type=owner.qualified_name,
                    type=TypeRef.parse(node.type_name),
                    modifiers=node.modifiers,
                    has_initializer=declarator.has_initializer,
                )
                self._declared[declarator] = field_symbol
                yield field_symbol

        elif node.kind is SyntaxKind.PROPERTY_DECLARATION and node.name:
            property_symbol = PropertySymbol(
                name=node.name,
                location=tree.location(node),
                declaration=node,
                containing_type=owner.qualified_name,
                type=TypeRef.parse(node.type_name),
                modifiers=node.modifiers,
            )
            self._declared[node] = property_symbol
            self._bind_scope(tree, node)
            yield property_symbol

        elif node.kind in (SyntaxKind.METHOD_DECLARATION, SyntaxKind.CONSTRUCTOR_DECLARATION):
            if not node.name:
                return
            parameters = tuple(self._bind_parameter(tree, p) for p in node.parameters)
            is_constructor = node.kind is SyntaxKind.CONSTRUCTOR_DECLARATION
            method_symbol = MethodSymbol(
                name=node.name,
                location=tree.location(node),
                declaration=node,
                containing_type=owner.qualified_name,
                method_kind=MethodKind.CONSTRUCTOR if is_constructor else MethodKind.ORDINARY,
                modifiers=node.modifiers,
                return_type=TypeRef("Void") if is_constructor else TypeRef.parse(node.type_name),
                parameters=parameters,
            )
            self._declared[node] = method_symbol
            self._bind_scope(tree, node)
            yield method_symbol

    def _bind_parameter(self, tree: SyntaxTree, node: SyntaxNode) -> ParameterSymbol:
        symbol = ParameterSymbol(
            name=node.name or "",
            location=tree.location(node),
            declaration=node,
            type=TypeRef.parse(node.type_name),
            ref_kind=node.ref_kind,
        )
        self._declared[node] = symbol
        return symbol

    def _bind_scope(self, tree: SyntaxTree, member: SyntaxNode) -> None:
        """Bind parameters and locals declared inside a member body.

        Each one is recorded with the node that bounds its visibility (the
        member, a block, a lambda, a loop or catch clause...).
        """
        scope: dict[str, list[tuple[SyntaxNode, Symbol]]] = {}
        for node in member.walk(prune=_is_type_declaration):
            if node is member:
                continue
            symbol: Symbol | None = None
            if node.kind is SyntaxKind.PARAMETER and node.name:
                symbol = self._declared.get(node) or self._bind_parameter(tree, node)
            elif node.kind is SyntaxKind.VARIABLE_DECLARATOR and node.name:
                declared_type = node.parent.type_name if node.parent is not None else None
                symbol = LocalSymbol(
                    name=node.name,
                    location=tree.location(node),
                    declaration=node,
                    type=TypeRef.parse(declared_type),
                )
            elif node.kind is SyntaxKind.DECLARATION_EXPRESSION and node.name:
                symbol = LocalSymbol(
                    name=node.name,
                    location=tree.location(node),
                    declaration=node,
                    type=TypeRef.parse(node.type_name),
                )
            if symbol is None:
                continue
            self._declared[node] = symbol
            scope.setdefault(symbol.name, []).append((_declaring_scope(node, member), symbol))
        self._scopes[member] = scope

    # ── lookup ─────────────────────────────────────────────────

    def _compilations(self) -> Iterator[Compilation]:
        """This compilation, then referenced ones transitively (each once)."""
        seen: set[int] = set()
        queue: deque[Compilation] = deque([self])
        while queue:
            compilation = queue.popleft()
            if id(compilation) in seen:
                continue
            seen.add(id(compilation))
            yield compilation
            queue.extend(compilation.references)

    @property
    def types(self) -> list[TypeSymbol]:
        """Types declared in this assembly."""
        return list(self._types.values())

    def declared_symbol(self, node: SyntaxNode) -> Symbol | None:
        return self._declared.get(node)

    def local_symbol(self, member: SyntaxNode, reference: SyntaxNode, name: str) -> Symbol | None:
        """Innermost parameter or local named ``name`` visible at ``reference``."""
        candidates = self._scopes.get(member, {}).get(name)
        if not candidates:
            return None
        for ancestor in reference.ancestors():
            for container, symbol in candidates:
                if container is ancestor:
                    return symbol
            if ancestor is member:
                break
        return None

    def find_type(self, name: str, namespace: str | None = None) -> TypeSymbol | None:
        """Find a type by simple or qualified name.

        Own types win over referenced ones; among same-named types the one in
        ``namespace`` (or an enclosing namespace) is preferred.
        """
        ref = TypeRef.parse(name)
        qualified = name.split("<", 1)[0].strip()
        if qualified.startswith("global::"):
            qualified = qualified[len("global::"):]

        for compilation in self._compilations():
            if qualified in compilation._types:
                return compilation._types[qualified]
            candidates = compilation._types_by_name.get(ref.name, [])
            if not candidates:
                continue
            if namespace:
                for candidate in candidates:
                    if candidate.namespace and (
                        namespace == candidate.namespace
                        or namespace.startswith(candidate.namespace + ".")
                    ):
                        return candidate
            return candidates[0]
        return None

    def members_of(self, type_symbol: TypeSymbol) -> dict[str, list[Symbol]]:
        for compilation in self._compilations():
            if type_symbol.qualified_name in compilation._members:
                return compilation._members[type_symbol.qualified_name]
        return {}

    def base_type(self, type_symbol: TypeSymbol) -> TypeSymbol | None:
        """Base class of a class (first base list entry resolving to a class)."""
        if not type_symbol.is_class:
            return None
        for base_name in type_symbol.base_types:
            base = self.find_type(base_name, type_symbol.namespace)
            if base is not None and base.is_class:
                return base
        return None

    def type_chain(self, type_symbol: TypeSymbol) -> Iterator[TypeSymbol]:
        """The type, its base class, that base's base class, and so on."""
        seen: set[str] = set()
        current: TypeSymbol | None = type_symbol
        while current is not None and current.qualified_name not in seen:
            seen.add(current.qualified_name)
            yield current
            current = self.base_type(current)

    def lookup_member(self, type_symbol: TypeSymbol, name: str) -> list[Symbol]:
        """Members named ``name`` on the nearest type of the chain declaring one."""
        for current in self.type_chain(type_symbol):
            found = self.members_of(current).get(name)
            if found:
                return found
        return []


class SemanticModel:
    """Per-document view of a compilation."""

    def __init__(self, compilation: Compilation, tree: SyntaxTree) -> None:
        self.compilation = compilation
        self.tree = tree

    def resolve_declared(self, node: SyntaxNode) -> Symbol | None:
        """Symbol declared by a declaration node, if any."""
        return self.compilation.declared_symbol(node)

    def resolve(self, node: SyntaxNode) -> Symbol | None:
        """Symbol referenced by an expression node.

        Returns None when the reference cannot be bound.
        """
        if node.kind is SyntaxKind.IDENTIFIER_NAME:
            return self._resolve_name(node, node.name)
        if node.kind is SyntaxKind.MEMBER_ACCESS_EXPRESSION:
            return self._resolve_member_access(node)
        if node.kind is SyntaxKind.INVOCATION_EXPRESSION:
            return self._resolve_invocation(node)
        return self.resolve_declared(node)

    def containing_type(self, node: SyntaxNode) -> TypeSymbol | None:
        declaration = node if _is_type_declaration(node) else node.first_ancestor(*TYPE_DECLARATION_KINDS)
        if declaration is None:
            return None
        symbol = self.compilation.declared_symbol(declaration)
        return symbol if isinstance(symbol, TypeSymbol) else None

    def attributes(self, symbol: Symbol) -> frozenset[str]:
        """Normalized marker names applied to a symbol."""
        if isinstance(symbol, TypeSymbol):
            return symbol.attributes
        if symbol.declaration is not None:
            return frozenset(symbol.declaration.attributes)
        return frozenset()

    def all_interfaces(self, type_symbol: TypeSymbol) -> frozenset[TypeSymbol]:
        """Interfaces implemented by a type, directly or through bases and other interfaces."""
        found: set[TypeSymbol] = set()
        visited: set[str] = {type_symbol.qualified_name}
        queue: deque[TypeSymbol] = deque([type_symbol])
        while queue:
            current = queue.popleft()
            for base_name in current.base_types:
                base = self.compilation.find_type(base_name, current.namespace)
                if base is None or base.qualified_name in visited:
                    continue
                visited.add(base.qualified_name)
                if base.is_interface:
                    found.add(base)
                queue.append(base)
        return frozenset(found)

    # ── resolution helpers ─────────────────────────────────────

    def _enclosing_member(self, node: SyntaxNode) -> SyntaxNode | None:
        for ancestor in node.ancestors():
            if ancestor.kind in MEMBER_DECLARATION_KINDS:
                return ancestor
            if _is_type_declaration(ancestor):
                return None
        return None

    def _local(self, node: SyntaxNode, name: str) -> Symbol | None:
        member = self._enclosing_member(node)
        if member is None:
            return None
        return self.compilation.local_symbol(member, node, name)

    def _resolve_name(self, node: SyntaxNode, name: str | None) -> Symbol | None:
        if not name:
            return None
        local = self._local(node, name)
        if local is not None:
            return local
        owner = self.containing_type(node)
        if owner is None:
            return None
        return _prefer_data_member(self.compilation.lookup_member(owner, name))

    def _receiver_type(self, receiver: SyntaxNode | None, node: SyntaxNode) -> TypeSymbol | None:
        """Type searched for ``this.``/``base.`` receivers; None for anything else."""
        if receiver is None:
            return None
        owner = self.containing_type(node)
        if owner is None:
            return None
        if receiver.kind is SyntaxKind.THIS_EXPRESSION:
            return owner
        if receiver.kind is SyntaxKind.BASE_EXPRESSION:
            return self.compilation.base_type(owner)
        return None

    def _resolve_member_access(self, node: SyntaxNode) -> Symbol | None:
        target = self._receiver_type(node.expression, node)
        if target is None or not node.name:
            return None
        return _prefer_data_member(self.compilation.lookup_member(target, node.name))

    def _resolve_invocation(self, node: SyntaxNode) -> Symbol | None:
        callee = node.callee
        if callee is None or not node.name:
            return None

        owner: TypeSymbol | None = None
        if callee.kind is SyntaxKind.IDENTIFIER_NAME:
            local = self._local(node, node.name)
            if local is not None:
                # delegate-typed local or parameter
                return MethodSymbol.external("Invoke")
            owner = self.containing_type(node)
        elif callee.kind is SyntaxKind.MEMBER_ACCESS_EXPRESSION:
            owner = self._receiver_type(callee.expression, node)

        if owner is not None:
            methods = [
                s for s in self.compilation.lookup_member(owner, node.name) if isinstance(s, MethodSymbol)
            ]
            if methods:
                arity = len(node.arguments)
                for method in methods:
                    if len(method.parameters) == arity:
                        return method
                return methods[0]

        return MethodSymbol.external(node.name)


def _prefer_data_member(symbols: list[Symbol]) -> Symbol | None:
    for symbol in symbols:
        if isinstance(symbol, (FieldSymbol, PropertySymbol)):
            return symbol
    return symbols[0] if symbols else None
