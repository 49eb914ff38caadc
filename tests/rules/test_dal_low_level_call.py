"""Tests for rules/dal_low_level_call.py - KTA1300."""

import pytest

from kinetix_tools.config import AnalysisConfig, ConventionConfig
from kinetix_tools.rules import DAL_LOW_LEVEL_CALL, Severity, build_engine
from kinetix_tools.scanning import CSHARP_AVAILABLE, SyntaxKind

pytestmark = pytest.mark.skipif(not CSHARP_AVAILABLE, reason="tree-sitter-c-sharp not installed")


def _run(compile_csharp, source, config=None):
    tree, model = compile_csharp(source, path="DalOrder.cs")
    engine = build_engine(config or AnalysisConfig(), force=[DAL_LOW_LEVEL_CALL.id])
    return tree, [d for d in engine.run(tree, model) if d.id == "KTA1300"]


class TestDescriptor:
    def test_metadata(self):
        assert DAL_LOW_LEVEL_CALL.id == "KTA1300"
        assert DAL_LOW_LEVEL_CALL.category == "Coverage"
        assert DAL_LOW_LEVEL_CALL.severity is Severity.HIDDEN
        assert DAL_LOW_LEVEL_CALL.enabled


class TestDalLowLevelCall:
    def test_direct_call_reported_at_method_name(self, compile_csharp, node_named):
        tree, diagnostics = _run(
            compile_csharp,
            """
            [RegisterImpl]
            public class DalOrder
            {
                public void Load()
                {
                    GetSqlCommand("Load");
                }
            }
            """,
        )
        (diagnostic,) = diagnostics
        method = node_named(tree, SyntaxKind.METHOD_DECLARATION, "Load")
        assert diagnostic.location == tree.location(method)
        assert diagnostic.message == "Method 'Load' calls GetSqlCommand"

    def test_one_diagnostic_per_method(self, compile_csharp):
        _, diagnostics = _run(
            compile_csharp,
            """
            [RegisterImpl]
            public class DalOrder
            {
                public void Load()
                {
                    GetSqlCommand("a");
                    GetBroker<Order>().Load();
                }
            }
            """,
        )
        assert len(diagnostics) == 1
        assert diagnostics[0].message.endswith("GetSqlCommand")

    def test_nested_call_found(self, compile_csharp):
        _, diagnostics = _run(
            compile_csharp,
            """
            [RegisterImpl]
            class DalOrder : AbstractDal
            {
                int Count() { return Execute(this.GetBroker<Order>()); }
            }
            """,
        )
        assert [d.message for d in diagnostics] == ["Method 'Count' calls GetBroker"]

    def test_dal_base_class_itself(self, compile_csharp):
        _, diagnostics = _run(
            compile_csharp,
            "public class AbstractDal { protected void Run() { GetSqlCommand(\"x\"); } }",
        )
        assert len(diagnostics) == 1

    def test_non_dal_class_ignored(self, compile_csharp):
        _, diagnostics = _run(
            compile_csharp,
            "public class DalOrder { public void Load() { GetSqlCommand(\"x\"); } }",
        )
        assert diagnostics == []

    def test_locally_declared_method_named_like_accessor(self, compile_csharp):
        """A class's own GetSqlCommand still counts: resolution is by name."""
        _, diagnostics = _run(
            compile_csharp,
            """
            [RegisterImpl]
            class DalOrder
            {
                object GetSqlCommand(string s) { return null; }
                void Load() { GetSqlCommand("x"); }
            }
            """,
        )
        assert [d.message for d in diagnostics] == ["Method 'Load' calls GetSqlCommand"]

    def test_constructor_and_nested_types_ignored(self, compile_csharp):
        _, diagnostics = _run(
            compile_csharp,
            """
            [RegisterImpl]
            class DalOrder
            {
                DalOrder() { GetSqlCommand("x"); }
                class Inner { void Load() { GetSqlCommand("x"); } }
            }
            """,
        )
        assert diagnostics == []

    def test_custom_accessors(self, compile_csharp):
        config = AnalysisConfig(conventions=ConventionConfig(low_level_accessors=("OpenReader",)))
        _, diagnostics = _run(
            compile_csharp,
            """
            [RegisterImpl]
            class DalOrder
            {
                void A() { GetSqlCommand("x"); }
                void B() { OpenReader(); }
            }
            """,
            config,
        )
        assert [d.message for d in diagnostics] == ["Method 'B' calls OpenReader"]
