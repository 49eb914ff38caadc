"""Tests for scanning/semantic.py - symbol binding and name resolution."""

import pytest

from kinetix_tools.scanning import (
    CSHARP_AVAILABLE,
    Compilation,
    FieldSymbol,
    LocalSymbol,
    MethodKind,
    MethodSymbol,
    ParameterSymbol,
    SemanticModel,
    SyntaxKind,
    TreeSitterNormalizer,
    TypeKind,
    TypeSymbol,
)

pytestmark = pytest.mark.skipif(not CSHARP_AVAILABLE, reason="tree-sitter-c-sharp not installed")


SOURCE = """
namespace Shop.Data
{
    public interface IStore {}

    [RegisterContract]
    public interface IOrderStore : IStore {}

    public class BaseDal
    {
        protected readonly string _connection;
        protected void Open() {}
    }

    [RegisterImpl]
    public class DalOrder : BaseDal, IOrderStore
    {
        private readonly int _id;
        private int _count;

        public DalOrder(int id)
        {
            _id = id;
            this._count = 1;
        }

        public void Load(int _count)
        {
            var local = _count;
            Open();
            base.Open();
            Save(local, 2);
            Save(local);
            GetSqlCommand("x");
        }

        public void Save(int a) {}
        public void Save(int a, int b) {}
    }
}
"""


@pytest.fixture
def order_model(compile_csharp):
    return compile_csharp(SOURCE)


def _calls(tree, name):
    return [n for n in tree.root.descendants(SyntaxKind.INVOCATION_EXPRESSION) if n.name == name]


class TestBinding:
    """Declared symbols."""

    def test_type_symbol(self, order_model, node_named):
        tree, model = order_model
        symbol = model.resolve_declared(node_named(tree, SyntaxKind.CLASS_DECLARATION, "DalOrder"))
        assert isinstance(symbol, TypeSymbol)
        assert symbol.qualified_name == "Shop.Data.DalOrder"
        assert symbol.namespace == "Shop.Data"
        assert symbol.type_kind is TypeKind.CLASS
        assert symbol.attributes == frozenset({"RegisterImpl"})
        assert symbol.assembly == "Test.Implementation"

    def test_field_symbols(self, order_model, node_named):
        tree, model = order_model
        symbol = model.resolve_declared(node_named(tree, SyntaxKind.VARIABLE_DECLARATOR, "_id"))
        assert isinstance(symbol, FieldSymbol)
        assert symbol.is_readonly
        assert symbol.containing_type == "Shop.Data.DalOrder"
        assert symbol.type.name == "Int32"

    def test_constructor_symbol(self, order_model, node_named):
        tree, model = order_model
        symbol = model.resolve_declared(node_named(tree, SyntaxKind.CONSTRUCTOR_DECLARATION, "DalOrder"))
        assert isinstance(symbol, MethodSymbol)
        assert symbol.method_kind is MethodKind.CONSTRUCTOR
        assert [p.name for p in symbol.parameters] == ["id"]

    def test_partial_declarations_merge(self, compile_csharp):
        tree, model = compile_csharp(
            """
            [RegisterImpl] partial class DalA : IA {}
            partial class DalA : IB {}
            """
        )
        first, second = tree.type_declarations()
        symbol = model.resolve_declared(first)
        assert model.resolve_declared(second) is symbol
        assert symbol.base_types == ("IA", "IB")
        assert symbol.attributes == frozenset({"RegisterImpl"})
        assert len(symbol.declarations) == 2


class TestResolution:
    """Expression resolution."""

    def test_parameter_shadows_field(self, order_model, node_named):
        tree, model = order_model
        load = node_named(tree, SyntaxKind.METHOD_DECLARATION, "Load")
        reference = next(
            n for n in load.descendants(SyntaxKind.IDENTIFIER_NAME) if n.name == "_count"
        )
        assert isinstance(model.resolve(reference), ParameterSymbol)

    def test_local(self, order_model, node_named):
        tree, model = order_model
        save_call = _calls(tree, "Save")[0]
        argument = save_call.arguments[0].expression
        assert isinstance(model.resolve(argument), LocalSymbol)

    def test_field_assignment_in_constructor(self, order_model, node_named):
        tree, model = order_model
        ctor = node_named(tree, SyntaxKind.CONSTRUCTOR_DECLARATION, "DalOrder")
        field_symbol = model.resolve_declared(node_named(tree, SyntaxKind.VARIABLE_DECLARATOR, "_id"))
        targets = [a.left for a in ctor.descendants(SyntaxKind.ASSIGNMENT_EXPRESSION)]
        assert model.resolve(targets[0]) == field_symbol

    def test_this_member_access(self, order_model, node_named):
        tree, model = order_model
        ctor = node_named(tree, SyntaxKind.CONSTRUCTOR_DECLARATION, "DalOrder")
        targets = [a.left for a in ctor.descendants(SyntaxKind.ASSIGNMENT_EXPRESSION)]
        resolved = model.resolve(targets[1])
        assert isinstance(resolved, FieldSymbol)
        assert resolved.name == "_count"

    def test_inherited_method(self, order_model):
        tree, model = order_model
        resolved = [model.resolve(call) for call in _calls(tree, "Open")]
        assert all(isinstance(m, MethodSymbol) for m in resolved)
        assert {m.containing_type for m in resolved} == {"Shop.Data.BaseDal"}

    def test_overload_by_arity(self, order_model):
        tree, model = order_model
        two, one = (model.resolve(call) for call in _calls(tree, "Save"))
        assert len(two.parameters) == 2
        assert len(one.parameters) == 1

    def test_unknown_method_is_external(self, order_model):
        tree, model = order_model
        (call,) = _calls(tree, "GetSqlCommand")
        resolved = model.resolve(call)
        assert isinstance(resolved, MethodSymbol)
        assert resolved.is_external
        assert resolved.name == "GetSqlCommand"

    def test_delegate_local_invocation(self, compile_csharp):
        tree, model = compile_csharp(
            "class C { void M(System.Action GetBroker) { GetBroker(); } }"
        )
        (call,) = _calls(tree, "GetBroker")
        assert model.resolve(call).name == "Invoke"


class TestInterfaces:
    def test_transitive_interfaces(self, order_model, node_named):
        tree, model = order_model
        symbol = model.resolve_declared(node_named(tree, SyntaxKind.CLASS_DECLARATION, "DalOrder"))
        names = {i.name for i in model.all_interfaces(symbol)}
        assert names == {"IOrderStore", "IStore"}

    def test_cyclic_bases_terminate(self, compile_csharp, node_named):
        tree, model = compile_csharp("interface IA : IB {} interface IB : IA {} class C : IA {}")
        symbol = model.resolve_declared(node_named(tree, SyntaxKind.CLASS_DECLARATION, "C"))
        assert {i.name for i in model.all_interfaces(symbol)} == {"IA", "IB"}


class TestReferencedCompilations:
    def test_types_found_in_references(self):
        normalizer = TreeSitterNormalizer()
        contracts = normalizer.parse_tree(
            "namespace Shop.Contract { [RegisterContract] public interface IOrders {} }", "IOrders.cs"
        )
        impl = normalizer.parse_tree(
            "namespace Shop.Impl { [RegisterImpl] public class Orders : IOrders {} }", "Orders.cs"
        )
        referenced = Compilation("Shop.Contract", [contracts])
        compilation = Compilation("Shop.Implementation", [impl], references=[referenced])
        model = SemanticModel(compilation, impl)

        (node,) = impl.type_declarations()
        (interface,) = model.all_interfaces(model.resolve_declared(node))
        assert interface.qualified_name == "Shop.Contract.IOrders"
        assert interface.assembly == "Shop.Contract"
        assert model.attributes(interface) == frozenset({"RegisterContract"})
