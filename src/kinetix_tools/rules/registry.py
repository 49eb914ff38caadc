"""Built-in rules and engine construction."""

from __future__ import annotations

from collections.abc import Iterable

from ..config import AnalysisConfig
from .dal_low_level_call import DalLowLevelCallRule
from .engine import RuleEngine
from .readonly_field_injection import ReadonlyFieldInjectionRule


def get_default_rules(config: AnalysisConfig) -> list:
    """Instances of every built-in rule."""
    return [
        DalLowLevelCallRule(config.conventions),
        ReadonlyFieldInjectionRule(),
    ]


def build_engine(config: AnalysisConfig, force: Iterable[str] = ()) -> RuleEngine:
    """Engine with all built-in rules registered.

    Args:
        config: Analysis configuration (disabled rules, conventions)
        force: Ids that run even when the configuration disables them
    """
    forced = set(force)
    engine = RuleEngine(disabled=[i for i in config.disabled_rules if i not in forced])
    for rule in get_default_rules(config):
        engine.register(rule)
    return engine
