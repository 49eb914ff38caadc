"""
Kinetix Tools - Architecture rules and test generation for C# solutions

Parses the business projects of a Visual Studio solution, classifies their
declarations by architectural role (data-access, service contract, service
implementation), reports rule violations and writes missing unit tests for
data-access methods into the paired test projects.
"""

__version__ = "0.1.0"
__author__ = "Kinetix"

from .config import AnalysisConfig, ConventionConfig, load_config
from .core import AnalysisPipeline, PipelineResult
from .rules import Diagnostic, Severity
from .workspace import load_solution

__all__ = [
    "AnalysisConfig",
    "ConventionConfig",
    "load_config",
    "AnalysisPipeline",
    "PipelineResult",
    "Diagnostic",
    "Severity",
    "load_solution",
]
