"""Declaration classification against architectural conventions."""

from .models import DeclarationFacts, Role
from .roles import (
    application_name,
    classify,
    classify_facts,
    facts_for,
    is_business_assembly,
    is_dal_implementation_file,
    normalize_marker,
)

__all__ = [
    "Role",
    "DeclarationFacts",
    "classify",
    "classify_facts",
    "facts_for",
    "normalize_marker",
    "is_business_assembly",
    "application_name",
    "is_dal_implementation_file",
]
