"""Classification data models.

DeclarationFacts is the normalized view of a type declaration the classifier
works on: its name, kind, marker set and the facts of every interface it
implements. Role sets are derived from it and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..scanning.symbols import TypeKind


class Role(Enum):
    """Architectural role of a type declaration.

    A type may carry several roles, or none.
    """

    DATA_ACCESS_IMPLEMENTATION = "data_access_implementation"
    SERVICE_CONTRACT = "service_contract"
    SERVICE_IMPLEMENTATION = "service_implementation"


@dataclass(frozen=True)
class DeclarationFacts:
    """Everything classification looks at for one type.

    Attributes:
        name: Simple type name
        type_kind: Class, interface or struct
        markers: Normalized marker attribute names
        interfaces: Facts of all transitively implemented interfaces
    """

    name: str
    type_kind: TypeKind
    markers: frozenset[str] = frozenset()
    interfaces: tuple[DeclarationFacts, ...] = ()
