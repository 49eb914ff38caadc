"""Declaration classification.

Tags types with architectural roles from naming and marker conventions:

- DATA_ACCESS_IMPLEMENTATION: a class named exactly like the reserved DAL base
  class, or a class whose name starts with the DAL prefix and that carries the
  implementation marker
- SERVICE_CONTRACT: an interface carrying the contract marker
- SERVICE_IMPLEMENTATION: a class carrying the implementation marker that
  implements, directly or not, at least one service contract

Classification is a pure function of the declaration facts and never fails:
missing markers just yield no role.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Union

from ..config import DEFAULT_CONVENTIONS, ConventionConfig
from ..scanning.normalizer import normalize_attribute_name
from ..scanning.symbols import TypeKind, TypeSymbol
from .models import DeclarationFacts, Role

if TYPE_CHECKING:
    from ..scanning.semantic import SemanticModel


def normalize_marker(name: str) -> str:
    """Normalize a marker name the way attribute names are normalized."""
    return normalize_attribute_name(name)


def facts_for(symbol: TypeSymbol, model: SemanticModel) -> DeclarationFacts:
    """Collect the declaration facts of a type symbol."""
    interfaces = tuple(
        DeclarationFacts(
            name=interface.name,
            type_kind=interface.type_kind,
            markers=model.attributes(interface),
        )
        for interface in sorted(model.all_interfaces(symbol), key=lambda s: s.qualified_name)
    )
    return DeclarationFacts(
        name=symbol.name,
        type_kind=symbol.type_kind,
        markers=model.attributes(symbol),
        interfaces=interfaces,
    )


def _is_contract(facts: DeclarationFacts, conventions: ConventionConfig) -> bool:
    return (
        facts.type_kind is TypeKind.INTERFACE
        and normalize_marker(conventions.contract_marker) in facts.markers
    )


def classify_facts(
    facts: DeclarationFacts, conventions: ConventionConfig = DEFAULT_CONVENTIONS
) -> frozenset[Role]:
    """Roles of a declaration, from its facts alone."""
    roles: set[Role] = set()
    implementation_marker = normalize_marker(conventions.implementation_marker)
    has_implementation_marker = implementation_marker in facts.markers

    if facts.type_kind is TypeKind.CLASS:
        if facts.name == conventions.dal_base_name or (
            facts.name.startswith(conventions.dal_prefix) and has_implementation_marker
        ):
            roles.add(Role.DATA_ACCESS_IMPLEMENTATION)

        if has_implementation_marker and any(
            _is_contract(interface, conventions) for interface in facts.interfaces
        ):
            roles.add(Role.SERVICE_IMPLEMENTATION)

    if _is_contract(facts, conventions):
        roles.add(Role.SERVICE_CONTRACT)

    return frozenset(roles)


def classify(
    symbol: TypeSymbol,
    model: SemanticModel,
    conventions: ConventionConfig = DEFAULT_CONVENTIONS,
) -> frozenset[Role]:
    """Roles of a type symbol.

    Example:
        >>> classify(model.resolve_declared(class_node), model)
        frozenset({<Role.DATA_ACCESS_IMPLEMENTATION: 'data_access_implementation'>})
    """
    return classify_facts(facts_for(symbol, model), conventions)


def is_business_assembly(
    assembly_name: str, conventions: ConventionConfig = DEFAULT_CONVENTIONS
) -> bool:
    """Whether an assembly holds business implementations (name ends with the suffix)."""
    return assembly_name.endswith(conventions.business_assembly_suffix)


def application_name(assembly_name: str) -> str:
    """Application an assembly belongs to: ``Chaine.ReferentielImplementation`` -> ``Chaine``."""
    return assembly_name.split(".", 1)[0]


def is_dal_implementation_file(
    path: Union[str, Path], conventions: ConventionConfig = DEFAULT_CONVENTIONS
) -> bool:
    """Whether a document is a DAL implementation file.

    True for ``.../DAL.Implementation/Dal*.cs``. Windows separators are accepted.
    """
    parts = [p for p in str(path).replace("\\", "/").split("/") if p]
    if len(parts) < 2:
        return False
    directory, file_name = parts[-2], parts[-1]
    return (
        directory == conventions.dal_folder
        and file_name.startswith(conventions.dal_prefix)
        and file_name.endswith(".cs")
    )
