"""C# source model: tree-sitter parsing, normalized syntax, symbols and resolution."""

from .normalizer import TreeSitterNormalizer, normalize_attribute_name
from .provider import SourceModelProvider
from .semantic import Compilation, SemanticModel
from .symbols import (
    AssemblySymbol,
    FieldSymbol,
    LocalSymbol,
    MethodKind,
    MethodSignature,
    MethodSymbol,
    ParameterSymbol,
    PropertySymbol,
    Symbol,
    SymbolKind,
    TypeKind,
    TypeRef,
    TypeSymbol,
)
from .syntax import Location, SyntaxKind, SyntaxNode, SyntaxTree, TextSpan, namespace_of
from .treesitter_parser import CSHARP_AVAILABLE, TREE_SITTER_AVAILABLE, TreeSitterParser

__all__ = [
    # Parsing
    "CSHARP_AVAILABLE",
    "TREE_SITTER_AVAILABLE",
    "TreeSitterParser",
    "TreeSitterNormalizer",
    "normalize_attribute_name",
    # Syntax
    "SyntaxKind",
    "SyntaxNode",
    "SyntaxTree",
    "TextSpan",
    "Location",
    "namespace_of",
    # Symbols
    "Symbol",
    "SymbolKind",
    "AssemblySymbol",
    "TypeSymbol",
    "TypeKind",
    "MethodSymbol",
    "MethodKind",
    "MethodSignature",
    "FieldSymbol",
    "PropertySymbol",
    "ParameterSymbol",
    "LocalSymbol",
    "TypeRef",
    # Semantic model
    "Compilation",
    "SemanticModel",
    "SourceModelProvider",
]
