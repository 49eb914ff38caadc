"""Normalizer: converts tree-sitter C# parse trees to SyntaxTree.

Grammar node types are mapped onto the stable SyntaxKind set once, here, so
rules and the semantic model never look at raw grammar names. Anything the
analysis does not care about becomes an OTHER node that keeps its children.
"""

from __future__ import annotations

import logging
from typing import Any

from .syntax import SyntaxKind, SyntaxNode, SyntaxTree, TextSpan
from .treesitter_parser import CSHARP_AVAILABLE, TreeSitterParser

logger = logging.getLogger(__name__)

# Containers whose children are spliced into the enclosing node
_FLATTENED = frozenset(
    {
        "declaration_list",
        "parameter_list",
        "argument_list",
        "bracketed_argument_list",
        "equals_value_clause",
    }
)

# Consumed by declaration handlers, never emitted as nodes
_SKIPPED = frozenset({"comment", "modifier", "attribute_list", "parameter_modifier"})

_TYPE_DECLARATIONS = {
    "class_declaration": SyntaxKind.CLASS_DECLARATION,
    "record_declaration": SyntaxKind.CLASS_DECLARATION,
    "interface_declaration": SyntaxKind.INTERFACE_DECLARATION,
    "struct_declaration": SyntaxKind.STRUCT_DECLARATION,
    "record_struct_declaration": SyntaxKind.STRUCT_DECLARATION,
}

_PARAMETER_KEYWORDS = frozenset({"ref", "out", "in", "this", "params"})
_ARGUMENT_KEYWORDS = frozenset({"ref", "out", "in"})


def normalize_attribute_name(name: str) -> str:
    """Normalize an attribute name for marker comparison.

    ``[Kinetix.ComponentModel.RegisterImplAttribute]`` and ``[RegisterImpl]``
    both normalize to ``RegisterImpl``.
    """
    name = name.strip()
    if name.startswith("global::"):
        name = name[len("global::"):]
    name = name.split("<", 1)[0].split("(", 1)[0]
    name = name.rsplit(".", 1)[-1].strip()
    if name.endswith("Attribute") and len(name) > len("Attribute"):
        name = name[: -len("Attribute")]
    return name


def _span(ts_node: Any) -> TextSpan:
    return TextSpan.from_points(tuple(ts_node.start_point), tuple(ts_node.end_point))


def _same(a: Any, b: Any) -> bool:
    return (
        a is not None
        and b is not None
        and a.type == b.type
        and a.start_byte == b.start_byte
        and a.end_byte == b.end_byte
    )


class TreeSitterNormalizer:
    """Converts tree-sitter C# parse trees to SyntaxTree.

    Usage:
        normalizer = TreeSitterNormalizer()
        tree = normalizer.parse_tree(content, path)
        if tree is None:
            # grammar unavailable or source not parseable
    """

    def __init__(self) -> None:
        self._parser = TreeSitterParser() if CSHARP_AVAILABLE else None

    @property
    def available(self) -> bool:
        return self._parser is not None and self._parser.available

    def parse_tree(self, content: str, path: str) -> SyntaxTree | None:
        """Parse C# source and return the normalized tree.

        Args:
            content: File content as string
            path: File path recorded on the tree and its locations

        Returns:
            SyntaxTree, or None if parsing is not possible
        """
        if not self.available:
            return None

        try:
            code_bytes = content.encode("utf-8")
        except UnicodeEncodeError:
            logger.debug(f"Encoding error for {path}")
            return None

        tree = self._parser.parse(code_bytes)  # type: ignore[union-attr]
        if tree is None:
            return None

        root = _Converter(code_bytes).convert(tree.root_node)
        if root is None:
            return None

        has_errors = bool(tree.root_node.has_error)
        if has_errors:
            logger.debug(f"{path} contains syntax errors, analyzing recovered tree")

        return SyntaxTree(path=path, root=root, text=content, has_errors=has_errors)


class _Converter:
    """Recursive conversion of one parse tree."""

    def __init__(self, code_bytes: bytes) -> None:
        self._code = code_bytes
        self._handlers = {
            "namespace_declaration": self._namespace,
            "file_scoped_namespace_declaration": self._namespace,
            "method_declaration": self._method,
            "constructor_declaration": self._constructor,
            "property_declaration": self._property,
            "field_declaration": self._field,
            "event_field_declaration": self._opaque,
            "variable_declaration": self._local_declaration,
            "foreach_statement": self._foreach,
            "catch_declaration": self._catch_declaration,
            "declaration_expression": self._declaration_expression,
            "declaration_pattern": self._declaration_expression,
            "parameter": self._parameter,
            "lambda_expression": self._lambda,
            "invocation_expression": self._invocation,
            "argument": self._argument,
            "member_access_expression": self._member_access,
            "member_binding_expression": self._member_binding,
            "conditional_access_expression": self._conditional_access,
            "assignment_expression": self._assignment,
            "identifier": self._identifier,
            "generic_name": self._identifier,
            "this_expression": self._this,
            "this": self._this,
            "base_expression": self._base,
            "base": self._base,
        }

    def text(self, ts_node: Any) -> str:
        return self._code[ts_node.start_byte : ts_node.end_byte].decode("utf-8", errors="replace")

    def convert(self, ts_node: Any) -> SyntaxNode | None:
        if ts_node.type in _SKIPPED:
            return None
        if not ts_node.is_named and ts_node.type not in ("this", "base"):
            return None

        handler = self._handlers.get(ts_node.type)
        if handler is not None:
            return handler(ts_node)

        kind = _TYPE_DECLARATIONS.get(ts_node.type)
        if kind is not None:
            return self._type_declaration(ts_node, kind)

        if ts_node.type == "compilation_unit":
            return self._make(ts_node, SyntaxKind.COMPILATION_UNIT, self._convert_all(ts_node.named_children))

        return self._make(ts_node, SyntaxKind.OTHER, self._convert_all(ts_node.named_children))

    def _convert_all(self, ts_nodes: Any, exclude: tuple[Any, ...] = ()) -> list[SyntaxNode]:
        result: list[SyntaxNode] = []
        for ts_child in ts_nodes:
            if any(_same(ts_child, excluded) for excluded in exclude):
                continue
            if ts_child.type in _FLATTENED:
                result.extend(self._convert_all(ts_child.named_children))
                continue
            node = self.convert(ts_child)
            if node is not None:
                result.append(node)
        return result

    def _make(self, ts_node: Any, kind: SyntaxKind, children: list[SyntaxNode], **attrs: Any) -> SyntaxNode:
        node = SyntaxNode(kind=kind, span=_span(ts_node), raw_kind=ts_node.type, children=children, **attrs)
        for child in children:
            child.parent = node
        return node

    # ── shared extraction ──────────────────────────────────────

    def _modifiers(self, ts_node: Any) -> frozenset[str]:
        return frozenset(
            self.text(c) for c in ts_node.children if c.type in ("modifier", "parameter_modifier")
        )

    def _attributes(self, ts_node: Any) -> tuple[str, ...]:
        names: list[str] = []
        for attribute_list in ts_node.named_children:
            if attribute_list.type != "attribute_list":
                continue
            for attribute in attribute_list.named_children:
                if attribute.type != "attribute":
                    continue
                name_node = attribute.child_by_field_name("name") or _first_named(attribute)
                if name_node is not None:
                    names.append(normalize_attribute_name(self.text(name_node)))
        return tuple(names)

    def _simple_name(self, ts_node: Any) -> str:
        if ts_node.type == "generic_name":
            identifier = ts_node.child_by_field_name("name") or _first_of_type(ts_node, "identifier")
            if identifier is not None:
                return self.text(identifier)
        if ts_node.type in ("qualified_name", "alias_qualified_name"):
            name = ts_node.child_by_field_name("name")
            if name is not None:
                return self._simple_name(name)
        return self.text(ts_node)

    def _type_text(self, ts_node: Any) -> str | None:
        if ts_node is None:
            return None
        return " ".join(self.text(ts_node).split())

    def _name_attrs(self, name_node: Any) -> dict[str, Any]:
        if name_node is None:
            return {}
        return {"name": self._simple_name(name_node), "name_span": _span(name_node)}

    # ── declarations ───────────────────────────────────────────

    def _namespace(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        name = "".join(self.text(name_node).split()) if name_node is not None else None
        children = self._convert_all(ts_node.named_children, exclude=(name_node,))
        kind = (
            SyntaxKind.FILE_SCOPED_NAMESPACE_DECLARATION
            if ts_node.type == "file_scoped_namespace_declaration"
            else SyntaxKind.NAMESPACE_DECLARATION
        )
        return self._make(
            ts_node,
            kind,
            children,
            name=name,
            name_span=_span(name_node) if name_node is not None else None,
        )

    def _type_declaration(self, ts_node: Any, kind: SyntaxKind) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        bases: list[str] = []
        members: list[SyntaxNode] = []
        for child in ts_node.named_children:
            if child.type == "base_list":
                bases.extend(
                    self.text(b).split("(", 1)[0].strip()
                    for b in child.named_children
                    if b.type not in ("comment", "argument_list")
                )
            elif child.type == "declaration_list":
                members.extend(self._convert_all(child.named_children))
        return self._make(
            ts_node,
            kind,
            members,
            modifiers=self._modifiers(ts_node),
            attributes=self._attributes(ts_node),
            base_types=tuple(bases),
            **self._name_attrs(name_node),
        )

    def _method(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        type_node = ts_node.child_by_field_name("returns") or ts_node.child_by_field_name("type")
        children = self._convert_all(
            ts_node.named_children,
            exclude=(name_node, type_node, ts_node.child_by_field_name("type_parameters")),
        )
        return self._make(
            ts_node,
            SyntaxKind.METHOD_DECLARATION,
            children,
            modifiers=self._modifiers(ts_node),
            attributes=self._attributes(ts_node),
            type_name=self._type_text(type_node),
            **self._name_attrs(name_node),
        )

    def _constructor(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        children = self._convert_all(ts_node.named_children, exclude=(name_node,))
        return self._make(
            ts_node,
            SyntaxKind.CONSTRUCTOR_DECLARATION,
            children,
            modifiers=self._modifiers(ts_node),
            attributes=self._attributes(ts_node),
            **self._name_attrs(name_node),
        )

    def _property(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        type_node = ts_node.child_by_field_name("type")
        children = self._convert_all(ts_node.named_children, exclude=(name_node, type_node))
        return self._make(
            ts_node,
            SyntaxKind.PROPERTY_DECLARATION,
            children,
            modifiers=self._modifiers(ts_node),
            attributes=self._attributes(ts_node),
            type_name=self._type_text(type_node),
            **self._name_attrs(name_node),
        )

    def _field(self, ts_node: Any) -> SyntaxNode:
        declaration = _first_of_type(ts_node, "variable_declaration")
        type_node = declaration.child_by_field_name("type") if declaration is not None else None
        declarators = (
            [
                self._declarator(d)
                for d in declaration.named_children
                if d.type == "variable_declarator"
            ]
            if declaration is not None
            else []
        )
        return self._make(
            ts_node,
            SyntaxKind.FIELD_DECLARATION,
            declarators,
            modifiers=self._modifiers(ts_node),
            attributes=self._attributes(ts_node),
            type_name=self._type_text(type_node),
        )

    def _declarator(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name") or _first_of_type(ts_node, "identifier")
        has_initializer = any(
            c.type == "equals_value_clause" or (not c.is_named and c.type == "=")
            for c in ts_node.children
        )
        children = self._convert_all(ts_node.named_children, exclude=(name_node,))
        return self._make(
            ts_node,
            SyntaxKind.VARIABLE_DECLARATOR,
            children,
            has_initializer=has_initializer,
            **self._name_attrs(name_node),
        )

    def _local_declaration(self, ts_node: Any) -> SyntaxNode:
        type_node = ts_node.child_by_field_name("type")
        declarators = [
            self._declarator(d) for d in ts_node.named_children if d.type == "variable_declarator"
        ]
        return self._make(
            ts_node,
            SyntaxKind.LOCAL_DECLARATION,
            declarators,
            type_name=self._type_text(type_node),
        )

    def _synthetic_local(self, ts_node: Any, name_node: Any, type_node: Any) -> SyntaxNode:
        """A single-variable local declaration for foreach/catch variables."""
        declarator = self._make(
            name_node, SyntaxKind.VARIABLE_DECLARATOR, [], **self._name_attrs(name_node)
        )
        return self._make(
            ts_node, SyntaxKind.LOCAL_DECLARATION, [declarator], type_name=self._type_text(type_node)
        )

    def _foreach(self, ts_node: Any) -> SyntaxNode:
        left = ts_node.child_by_field_name("left")
        type_node = ts_node.child_by_field_name("type")
        children: list[SyntaxNode] = []
        if left is not None and left.type == "identifier":
            children.append(self._synthetic_local(left, left, type_node))
        children.extend(self._convert_all(ts_node.named_children, exclude=(left, type_node)))
        return self._make(ts_node, SyntaxKind.OTHER, children)

    def _catch_declaration(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        type_node = ts_node.child_by_field_name("type")
        if name_node is None:
            return self._make(ts_node, SyntaxKind.OTHER, [])
        return self._synthetic_local(ts_node, name_node, type_node)

    def _declaration_expression(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        type_node = ts_node.child_by_field_name("type")
        if name_node is None or name_node.type != "identifier":
            # discards and deconstruction patterns declare nothing addressable
            return self._make(ts_node, SyntaxKind.OTHER, [])
        return self._make(
            ts_node,
            SyntaxKind.DECLARATION_EXPRESSION,
            [],
            type_name=self._type_text(type_node),
            **self._name_attrs(name_node),
        )

    def _parameter(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        type_node = ts_node.child_by_field_name("type")
        modifiers = set(self._modifiers(ts_node))
        modifiers.update(
            c.type for c in ts_node.children if not c.is_named and c.type in _PARAMETER_KEYWORDS
        )
        ref_kind = next((m for m in ("out", "ref", "in") if m in modifiers), None)
        children = self._convert_all(ts_node.named_children, exclude=(name_node, type_node))
        return self._make(
            ts_node,
            SyntaxKind.PARAMETER,
            children,
            modifiers=frozenset(modifiers),
            attributes=self._attributes(ts_node),
            type_name=self._type_text(type_node),
            ref_kind=ref_kind,
            **self._name_attrs(name_node),
        )

    def _lambda(self, ts_node: Any) -> SyntaxNode:
        parameters = ts_node.child_by_field_name("parameters")
        children: list[SyntaxNode] = []
        if parameters is not None and parameters.type == "identifier":
            children.append(
                self._make(parameters, SyntaxKind.PARAMETER, [], **self._name_attrs(parameters))
            )
            children.extend(self._convert_all(ts_node.named_children, exclude=(parameters,)))
        else:
            children.extend(self._convert_all(ts_node.named_children))
        return self._make(ts_node, SyntaxKind.OTHER, children)

    def _opaque(self, ts_node: Any) -> SyntaxNode:
        return self._make(ts_node, SyntaxKind.OTHER, [])

    # ── expressions ────────────────────────────────────────────

    def _invocation(self, ts_node: Any) -> SyntaxNode:
        function = ts_node.child_by_field_name("function")
        arguments = ts_node.child_by_field_name("arguments")
        callee = self.convert(function) if function is not None else None

        children: list[SyntaxNode] = [callee] if callee is not None else []
        if arguments is not None:
            children.extend(self._convert_all(arguments.named_children))

        attrs: dict[str, Any] = {}
        if callee is not None and callee.name:
            attrs = {"name": callee.name, "name_span": callee.name_span}
        return self._make(ts_node, SyntaxKind.INVOCATION_EXPRESSION, children, **attrs)

    def _argument(self, ts_node: Any) -> SyntaxNode:
        ref_kind = None
        for child in ts_node.children:
            if not child.is_named and child.type in _ARGUMENT_KEYWORDS:
                ref_kind = child.type
            elif child.type == "modifier" and self.text(child) in _ARGUMENT_KEYWORDS:
                ref_kind = self.text(child)
        name_colon = _first_of_type(ts_node, "name_colon")
        children = self._convert_all(ts_node.named_children, exclude=(name_colon,))
        return self._make(ts_node, SyntaxKind.ARGUMENT, children, ref_kind=ref_kind)

    def _member_access(self, ts_node: Any) -> SyntaxNode:
        expression = ts_node.child_by_field_name("expression")
        name_node = ts_node.child_by_field_name("name")
        receiver = self.convert(expression) if expression is not None else None
        return self._make(
            ts_node,
            SyntaxKind.MEMBER_ACCESS_EXPRESSION,
            [receiver] if receiver is not None else [],
            **self._name_attrs(name_node),
        )

    def _member_binding(self, ts_node: Any) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name") or _first_named(ts_node)
        return self._make(
            ts_node, SyntaxKind.MEMBER_ACCESS_EXPRESSION, [], **self._name_attrs(name_node)
        )

    def _conditional_access(self, ts_node: Any) -> SyntaxNode:
        children = self._convert_all(ts_node.named_children)
        attrs: dict[str, Any] = {}
        if children and children[-1].kind is SyntaxKind.MEMBER_ACCESS_EXPRESSION:
            attrs = {"name": children[-1].name, "name_span": children[-1].name_span}
        return self._make(ts_node, SyntaxKind.OTHER, children, **attrs)

    def _assignment(self, ts_node: Any) -> SyntaxNode:
        left = ts_node.child_by_field_name("left")
        right = ts_node.child_by_field_name("right")
        children = [
            node
            for node in (
                self.convert(left) if left is not None else None,
                self.convert(right) if right is not None else None,
            )
            if node is not None
        ]
        return self._make(ts_node, SyntaxKind.ASSIGNMENT_EXPRESSION, children)

    def _identifier(self, ts_node: Any) -> SyntaxNode:
        return self._make(
            ts_node,
            SyntaxKind.IDENTIFIER_NAME,
            [],
            name=self._simple_name(ts_node),
            name_span=_span(ts_node),
        )

    def _this(self, ts_node: Any) -> SyntaxNode:
        return self._make(ts_node, SyntaxKind.THIS_EXPRESSION, [])

    def _base(self, ts_node: Any) -> SyntaxNode:
        return self._make(ts_node, SyntaxKind.BASE_EXPRESSION, [])


def _first_of_type(ts_node: Any, node_type: str) -> Any | None:
    for child in ts_node.named_children:
        if child.type == node_type:
            return child
    return None


def _first_named(ts_node: Any) -> Any | None:
    children = ts_node.named_children
    return children[0] if children else None
