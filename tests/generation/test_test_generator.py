"""Tests for generation/generator.py and generation/strategies.py."""

from pathlib import PurePosixPath

import pytest

from kinetix_tools.config import AnalysisConfig, ConventionConfig
from kinetix_tools.generation import (
    GeneratedArtifact,
    TestGenerator,
    TestStrategy,
    render_test_body,
)
from kinetix_tools.rules import DAL_LOW_LEVEL_CALL, build_engine
from kinetix_tools.scanning import CSHARP_AVAILABLE, SyntaxKind

pytestmark = pytest.mark.skipif(not CSHARP_AVAILABLE, reason="tree-sitter-c-sharp not installed")

SOURCE = """
namespace Chaine.Referentiel.DAL
{
    [RegisterImpl]
    public class DalOrder : AbstractDal
    {
        public List<Order> Find(int id)
        {
            return GetSqlCommand("Find").Read<Order>();
        }

        public List<Order> Find(string code, int[] ids)
        {
            return GetSqlCommand("FindByCode").Read<Order>();
        }

        public void Update(ref Order order, out int count)
        {
            count = 0;
            GetBroker<Order>().Save(order);
        }

        public int Count()
        {
            return 0;
        }

        internal void Purge()
        {
            GetSqlCommand("Purge");
        }
    }

    public class Helper
    {
        public void Run() { GetSqlCommand("x"); }
    }
}
"""


@pytest.fixture
def dal(compile_csharp, node_named):
    tree, model = compile_csharp(SOURCE, path="DalOrder.cs", assembly_name="Chaine.ReferentielImplementation")
    class_node = node_named(tree, SyntaxKind.CLASS_DECLARATION, "DalOrder")
    class_symbol = model.resolve_declared(class_node)
    diagnostics = build_engine(AnalysisConfig(), force=[DAL_LOW_LEVEL_CALL.id]).run(tree, model)
    methods = [model.resolve_declared(m) for m in class_node.child_nodes(SyntaxKind.METHOD_DECLARATION)]
    return tree, model, class_node, class_symbol, diagnostics, methods


def _method(methods, name, index=0):
    return [m for m in methods if m.name == name][index]


class TestArtifactLocation:
    def test_simple_name(self, dal):
        _, _, class_node, _, _, methods = dal
        file_name, folder = TestGenerator().artifact_location(_method(methods, "Update"), class_node)
        assert file_name == "DalOrderUpdateTest"
        assert folder == "DAL/DalOrder"

    def test_overloads_get_parameter_types(self, dal):
        _, _, class_node, _, _, methods = dal
        generator = TestGenerator()
        first = generator.artifact_location(_method(methods, "Find", 0), class_node)[0]
        second = generator.artifact_location(_method(methods, "Find", 1), class_node)[0]
        assert first == "DalOrderFindInt32Test"
        assert second == "DalOrderFindStringInt32ArrayTest"

    def test_custom_test_folder(self, dal):
        _, _, class_node, _, _, methods = dal
        generator = TestGenerator(ConventionConfig(test_folder="Tests/Dal"))
        assert generator.artifact_location(_method(methods, "Count"), class_node)[1] == "Tests/Dal/DalOrder"

    def test_relative_path(self):
        artifact = GeneratedArtifact("DalOrderCountTest", "DAL/DalOrder", "")
        assert artifact.relative_path == PurePosixPath("DAL/DalOrder/DalOrderCountTest.cs")


class TestShouldGenerate:
    def _should(self, dal, name, index=0, exists=False):
        _, model, _, class_symbol, diagnostics, methods = dal
        return TestGenerator().should_generate(
            _method(methods, name, index), class_symbol, model, diagnostics, lambda p: exists
        )

    def test_public_method_with_accessor(self, dal):
        assert self._should(dal, "Find")
        assert self._should(dal, "Find", 1)
        assert self._should(dal, "Update")

    def test_method_without_accessor(self, dal):
        assert not self._should(dal, "Count")

    def test_non_public_method(self, dal):
        assert not self._should(dal, "Purge")

    def test_existing_destination(self, dal):
        assert not self._should(dal, "Update", exists=True)

    def test_destination_queried_by_relative_path(self, dal):
        _, model, _, class_symbol, diagnostics, methods = dal
        asked = []
        TestGenerator().should_generate(
            _method(methods, "Update"), class_symbol, model, diagnostics, lambda p: asked.append(p) or False
        )
        assert asked == [PurePosixPath("DAL/DalOrder/DalOrderUpdateTest.cs")]

    def test_non_dal_class(self, dal, node_named):
        tree, model, _, _, diagnostics, _ = dal
        helper = model.resolve_declared(node_named(tree, SyntaxKind.CLASS_DECLARATION, "Helper"))
        run = model.resolve_declared(node_named(tree, SyntaxKind.METHOD_DECLARATION, "Run"))
        assert not TestGenerator().should_generate(run, helper, model, diagnostics, lambda p: False)

    def test_without_engine_diagnostics(self, dal):
        _, model, _, class_symbol, _, methods = dal
        assert not TestGenerator().should_generate(
            _method(methods, "Update"), class_symbol, model, [], lambda p: False
        )


class TestGenerate:
    def test_semantic_content(self, dal):
        _, _, class_node, _, _, methods = dal
        artifact = TestGenerator().generate(_method(methods, "Find"), class_node, TestStrategy.SEMANTIC)
        content = artifact.content

        assert content.startswith(
            "using System;\n"
            "using Chaine.Referentiel.DAL;\n"
            "using Kinetix.Test;\n"
            "using Microsoft.VisualStudio.TestTools.UnitTesting;\n"
        )
        assert "namespace Chaine.Referentiel.DAL.Test\n{" in content
        assert "    [TestClass]\n    public class DalOrderFindInt32Test : DalTest\n" in content
        assert "        [TestMethod]\n        public void FindTest()\n" in content
        assert "ExecuteInRollbackTransaction(() =>" in content
        assert "var dal = GetDal<DalOrder>();" in content
        assert "var result = dal.Find(default(int));" in content
        assert "Assert.IsNotNull(result);" in content

    def test_syntax_strategy(self, dal):
        _, _, class_node, _, _, methods = dal
        artifact = TestGenerator().generate(_method(methods, "Find"), class_node, TestStrategy.SYNTAX)
        assert "CheckSqlSyntax(() =>" in artifact.content
        assert "dal.Find(default(int));" in artifact.content
        assert "Assert.IsNotNull" not in artifact.content

    def test_deterministic(self, dal):
        _, _, class_node, _, _, methods = dal
        generator = TestGenerator()
        method = _method(methods, "Update")
        assert generator.generate(method, class_node) == generator.generate(method, class_node)

    def test_namespace_from_assembly_when_global(self, compile_csharp, node_named):
        tree, model = compile_csharp("[RegisterImpl] public class DalX { public void A() {} }")
        class_node = node_named(tree, SyntaxKind.CLASS_DECLARATION, "DalX")
        method = model.resolve_declared(node_named(tree, SyntaxKind.METHOD_DECLARATION, "A"))
        artifact = TestGenerator().generate(method, class_node, assembly_name="Chaine.ReferentielImplementation")
        assert "namespace Chaine.Test\n" in artifact.content


class TestRenderBody:
    def test_ref_and_out_arguments(self, dal):
        _, _, _, _, _, methods = dal
        body = render_test_body(_method(methods, "Update"), "DalOrder", TestStrategy.SEMANTIC)
        assert body == [
            "ExecuteInRollbackTransaction(() =>",
            "{",
            "    var dal = GetDal<DalOrder>();",
            "    var order = default(Order);",
            "    dal.Update(ref order, out _);",
            "});",
        ]

    def test_strategy_parse(self):
        assert TestStrategy.parse("Syntax") is TestStrategy.SYNTAX
        with pytest.raises(ValueError):
            TestStrategy.parse("fuzz")
