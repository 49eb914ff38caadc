"""Rule engine and the built-in rule modules."""

from .dal_low_level_call import DAL_LOW_LEVEL_CALL, DalLowLevelCallRule, find_low_level_call
from .engine import RuleEngine, TraversalContext
from .models import Diagnostic, DiagnosticDescriptor, Severity, create_rule
from .protocols import Rule
from .readonly_field_injection import (
    READONLY_FIELD_INJECTION,
    ReadonlyFieldInjectionRule,
    assignment_sites,
)
from .registry import build_engine, get_default_rules

__all__ = [
    "Rule",
    "RuleEngine",
    "TraversalContext",
    "Diagnostic",
    "DiagnosticDescriptor",
    "Severity",
    "create_rule",
    "DAL_LOW_LEVEL_CALL",
    "DalLowLevelCallRule",
    "find_low_level_call",
    "READONLY_FIELD_INJECTION",
    "ReadonlyFieldInjectionRule",
    "assignment_sites",
    "build_engine",
    "get_default_rules",
]
