"""Test content strategies.

SEMANTIC runs the data-access method inside a rolled-back transaction and
checks its result. SYNTAX only checks that the SQL the method issues parses,
without executing it.
"""

from __future__ import annotations

from enum import Enum

from ..scanning.symbols import MethodSymbol


class TestStrategy(Enum):
    SEMANTIC = "semantic"
    SYNTAX = "syntax"

    # not a pytest test class
    __test__ = False

    @classmethod
    def parse(cls, value: str) -> TestStrategy:
        return cls(value.lower())


_HARNESS = {
    TestStrategy.SEMANTIC: "ExecuteInRollbackTransaction",
    TestStrategy.SYNTAX: "CheckSqlSyntax",
}


def _argument_list(method: MethodSymbol) -> tuple[list[str], list[str]]:
    """Local declarations needed by the call, and the call arguments."""
    setup: list[str] = []
    arguments: list[str] = []
    for index, parameter in enumerate(method.parameters):
        type_text = _declared_type(parameter.declaration) or str(parameter.type)
        if parameter.ref_kind == "out":
            arguments.append("out _")
        elif parameter.ref_kind == "ref":
            local = parameter.name or f"arg{index}"
            setup.append(f"var {local} = default({type_text});")
            arguments.append(f"ref {local}")
        else:
            arguments.append(f"default({type_text})")
    return setup, arguments


def _declared_type(declaration) -> str | None:
    return declaration.type_name if declaration is not None else None


def render_test_body(method: MethodSymbol, class_name: str, strategy: TestStrategy) -> list[str]:
    """Statements of the test method, unindented."""
    setup, arguments = _argument_list(method)
    call = f"dal.{method.name}({', '.join(arguments)})"
    returns_value = method.return_type.name != "Void"

    body = [f"{_HARNESS[strategy]}(() =>", "{", f"    var dal = GetDal<{class_name}>();"]
    body.extend(f"    {line}" for line in setup)
    if strategy is TestStrategy.SEMANTIC and returns_value:
        body.append(f"    var result = {call};")
        body.append("    Assert.IsNotNull(result);")
    else:
        body.append(f"    {call};")
    body.append("});")
    return body
