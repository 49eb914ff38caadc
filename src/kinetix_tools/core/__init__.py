"""Orchestration of analysis and generation runs."""

from .pipeline import (
    TERMINAL_STATES,
    AnalysisPipeline,
    DocumentOutcome,
    DocumentState,
    PipelineResult,
)

__all__ = [
    "AnalysisPipeline",
    "DocumentOutcome",
    "DocumentState",
    "PipelineResult",
    "TERMINAL_STATES",
]
