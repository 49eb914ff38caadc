"""Symbol models resolved from the syntax trees of a compilation.

Symbols are immutable value objects. Analysis components look them up
through the semantic model and never own or modify them.

Method identity is structural: ``MethodSignature`` compares canonical
``TypeRef`` values (parsed type names with C# keyword aliases folded onto
their CLR names), so ``int`` and ``System.Int32`` are the same parameter type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .syntax import Location, SyntaxNode


class SymbolKind(Enum):
    ASSEMBLY = "assembly"
    TYPE = "type"
    METHOD = "method"
    FIELD = "field"
    PROPERTY = "property"
    PARAMETER = "parameter"
    LOCAL = "local"


class TypeKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"


class MethodKind(Enum):
    ORDINARY = "ordinary"
    CONSTRUCTOR = "constructor"


# C# keyword aliases and their System type names
_TYPE_ALIASES = {
    "bool": "Boolean",
    "byte": "Byte",
    "sbyte": "SByte",
    "char": "Char",
    "decimal": "Decimal",
    "double": "Double",
    "float": "Single",
    "int": "Int32",
    "uint": "UInt32",
    "long": "Int64",
    "ulong": "UInt64",
    "short": "Int16",
    "ushort": "UInt16",
    "object": "Object",
    "string": "String",
    "void": "Void",
    "nint": "IntPtr",
    "nuint": "UIntPtr",
}


@dataclass(frozen=True)
class TypeRef:
    """Canonical reference to a type as written in a declaration.

    Attributes:
        name: Simple type name, aliases folded (``int`` -> ``Int32``)
        arguments: Generic type arguments
        array_rank: Number of ``[]`` suffixes
        nullable: True for ``T?``
    """

    name: str
    arguments: tuple[TypeRef, ...] = ()
    array_rank: int = 0
    nullable: bool = False

    @classmethod
    def parse(cls, text: str | None) -> TypeRef:
        """Parse a C# type name (``Dictionary<string, List<int>>[]?``)."""
        if not text:
            return cls("?")
        ref, _ = _parse_type(_tokenize(text), 0)
        return ref

    @property
    def display_name(self) -> str:
        """Identifier-safe rendering used in generated file names."""
        parts = [self.name, *(arg.display_name for arg in self.arguments)]
        suffix = "Array" * self.array_rank + ("Nullable" if self.nullable else "")
        return "".join(parts) + suffix

    def __str__(self) -> str:
        text = self.name
        if self.arguments:
            text += "<" + ", ".join(str(a) for a in self.arguments) + ">"
        text += "[]" * self.array_rank
        if self.nullable:
            text += "?"
        return text


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    current = ""
    for char in text:
        if char in "<>,[]?()":
            if current.strip():
                tokens.append(current.strip())
            current = ""
            tokens.append(char)
        elif char.isspace():
            if current.strip():
                tokens.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        tokens.append(current.strip())
    return tokens


def _canonical_name(name: str) -> str:
    if name.startswith("global::"):
        name = name[len("global::"):]
    simple = name.rsplit(".", 1)[-1]
    return _TYPE_ALIASES.get(simple, simple)


def _parse_type(tokens: list[str], pos: int) -> tuple[TypeRef, int]:
    if pos >= len(tokens):
        return TypeRef("?"), pos

    if tokens[pos] == "(":
        # Tuple types are identified by their element types.
        elements: list[TypeRef] = []
        pos += 1
        while pos < len(tokens) and tokens[pos] != ")":
            element, pos = _parse_type(tokens, pos)
            elements.append(element)
            # Skip optional element names
            while pos < len(tokens) and tokens[pos] not in (",", ")"):
                pos += 1
            if pos < len(tokens) and tokens[pos] == ",":
                pos += 1
        name, arguments = "ValueTuple", tuple(elements)
        pos += 1
    else:
        name, arguments = _canonical_name(tokens[pos]), ()
        pos += 1
        if pos < len(tokens) and tokens[pos] == "<":
            args: list[TypeRef] = []
            pos += 1
            while pos < len(tokens) and tokens[pos] != ">":
                arg, pos = _parse_type(tokens, pos)
                args.append(arg)
                if pos < len(tokens) and tokens[pos] == ",":
                    pos += 1
            arguments = tuple(args)
            pos += 1

    array_rank = 0
    nullable = False
    while pos < len(tokens) and tokens[pos] in ("[", "?"):
        if tokens[pos] == "?":
            nullable = True
            pos += 1
            continue
        pos += 1
        while pos < len(tokens) and tokens[pos] != "]":
            pos += 1
        pos += 1
        array_rank += 1

    return TypeRef(name, arguments, array_rank, nullable), pos


@dataclass(frozen=True)
class MethodSignature:
    """Structural identity of a method: name, return type, parameter types."""

    name: str
    return_type: TypeRef
    parameter_types: tuple[TypeRef, ...]


@dataclass(frozen=True)
class Symbol:
    """Common symbol attributes.

    ``location`` is part of the identity so two same-named locals in
    different members stay distinct; the declaring node is not.
    """

    name: str
    location: Location | None = None
    declaration: SyntaxNode | None = field(default=None, compare=False, hash=False, repr=False)

    kind = SymbolKind.LOCAL


@dataclass(frozen=True)
class AssemblySymbol(Symbol):
    kind = SymbolKind.ASSEMBLY


@dataclass(frozen=True)
class TypeSymbol(Symbol):
    """A class, interface or struct (partial declarations merged)."""

    qualified_name: str = ""
    namespace: str | None = None
    type_kind: TypeKind = TypeKind.CLASS
    modifiers: frozenset[str] = frozenset()
    attributes: frozenset[str] = frozenset()
    base_types: tuple[str, ...] = ()
    assembly: str = ""
    declarations: tuple[SyntaxNode, ...] = field(default=(), compare=False, hash=False, repr=False)

    kind = SymbolKind.TYPE

    @property
    def is_class(self) -> bool:
        return self.type_kind is TypeKind.CLASS

    @property
    def is_interface(self) -> bool:
        return self.type_kind is TypeKind.INTERFACE


@dataclass(frozen=True)
class ParameterSymbol(Symbol):
    type: TypeRef = TypeRef("?")
    ref_kind: str | None = None

    kind = SymbolKind.PARAMETER


@dataclass(frozen=True)
class LocalSymbol(Symbol):
    type: TypeRef = TypeRef("?")

    kind = SymbolKind.LOCAL


@dataclass(frozen=True)
class FieldSymbol(Symbol):
    containing_type: str = ""
    type: TypeRef = TypeRef("?")
    modifiers: frozenset[str] = frozenset()
    has_initializer: bool = False

    kind = SymbolKind.FIELD

    @property
    def is_readonly(self) -> bool:
        return "readonly" in self.modifiers


@dataclass(frozen=True)
class PropertySymbol(Symbol):
    containing_type: str = ""
    type: TypeRef = TypeRef("?")
    modifiers: frozenset[str] = frozenset()

    kind = SymbolKind.PROPERTY


@dataclass(frozen=True)
class MethodSymbol(Symbol):
    """A method or constructor.

    External methods (declared outside the loaded sources) have no
    containing type and no location; only their name is known.
    """

    containing_type: str | None = None
    method_kind: MethodKind = MethodKind.ORDINARY
    modifiers: frozenset[str] = frozenset()
    return_type: TypeRef = TypeRef("Void")
    parameters: tuple[ParameterSymbol, ...] = ()

    kind = SymbolKind.METHOD

    @classmethod
    def external(cls, name: str) -> MethodSymbol:
        return cls(name=name, return_type=TypeRef("?"))

    @property
    def is_external(self) -> bool:
        return self.containing_type is None

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def signature(self) -> MethodSignature:
        return MethodSignature(
            self.name, self.return_type, tuple(p.type for p in self.parameters)
        )
