"""Test artifact generation for data-access methods."""

from .generator import GeneratedArtifact, TestGenerator
from .strategies import TestStrategy, render_test_body
from .usings import add_using

__all__ = [
    "GeneratedArtifact",
    "TestGenerator",
    "TestStrategy",
    "render_test_body",
    "add_using",
]
