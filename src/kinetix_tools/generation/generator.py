"""Test artifact generation for data-access methods.

Content synthesis is pure: it turns a method symbol and its class declaration
into a file name, a folder and the file text. Writing the artifact is the
pipeline's job.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Optional

from ..config import DEFAULT_CONVENTIONS, ConventionConfig
from ..rules.dal_low_level_call import DAL_LOW_LEVEL_CALL
from ..scanning.symbols import MethodKind, MethodSymbol, TypeSymbol
from ..scanning.syntax import SyntaxKind, SyntaxNode, namespace_of
from ..semantics import Role, application_name, classify
from .strategies import TestStrategy, render_test_body
from .usings import add_using

if TYPE_CHECKING:
    from ..rules.models import Diagnostic
    from ..scanning.semantic import SemanticModel

_INDENT = "    "


@dataclass(frozen=True)
class GeneratedArtifact:
    """A test source file to materialize.

    Attributes:
        file_name: File name without extension (``DalOrderGetOrdersTest``)
        folder: Folder relative to the test project (``DAL/DalOrder``)
        content: Full C# text
    """

    file_name: str
    folder: str
    content: str

    @property
    def relative_path(self) -> PurePosixPath:
        return PurePosixPath(self.folder) / f"{self.file_name}.cs"


class TestGenerator:
    """Builds MSTest classes for data-access methods."""

    __test__ = False

    def __init__(self, conventions: ConventionConfig = DEFAULT_CONVENTIONS) -> None:
        self.conventions = conventions

    def artifact_location(
        self,
        method: MethodSymbol,
        class_decl: SyntaxNode,
        model: Optional[SemanticModel] = None,
    ) -> tuple[str, str]:
        """Deterministic (file name, folder) of the test of ``method``.

        Overloaded methods get their canonical parameter type names appended
        so every overload has its own file. With a semantic model, overloads
        are counted over every partial declaration of the class; without one,
        only ``class_decl`` is looked at.
        """
        class_name = class_decl.name or ""
        file_name = f"{class_name}{method.name}Test"

        if _overload_count(method, class_decl, model) > 1:
            file_name = f"{class_name}{method.name}" + "".join(
                p.type.display_name for p in method.parameters
            ) + "Test"

        folder = str(PurePosixPath(self.conventions.test_folder) / class_name)
        return file_name, folder

    def should_generate(
        self,
        method: MethodSymbol,
        class_symbol: TypeSymbol,
        model: SemanticModel,
        diagnostics: Sequence[Diagnostic],
        destination_exists: Callable[[PurePosixPath], bool],
    ) -> bool:
        """Whether a test must be generated for ``method``.

        Requires all of:
            - the class is a data-access implementation
            - the method is public
            - KTA1300 was reported on the method by the rule engine run
            - nothing exists yet at the artifact's destination

        Args:
            method: Candidate method
            class_symbol: Its containing class
            model: Semantic model of the document
            diagnostics: Diagnostics of the engine run over the document
            destination_exists: Tells whether a path relative to the test project exists
        """
        if Role.DATA_ACCESS_IMPLEMENTATION not in classify(class_symbol, model, self.conventions):
            return False
        if not method.is_public:
            return False
        if not any(
            d.id == DAL_LOW_LEVEL_CALL.id and d.location == method.location for d in diagnostics
        ):
            return False

        class_decl = _class_declaration(method, class_symbol)
        if class_decl is None:
            return False
        file_name, folder = self.artifact_location(method, class_decl, model)
        return not destination_exists(PurePosixPath(folder) / f"{file_name}.cs")

    def generate(
        self,
        method: MethodSymbol,
        class_decl: SyntaxNode,
        strategy: TestStrategy = TestStrategy.SEMANTIC,
        assembly_name: str = "",
        model: Optional[SemanticModel] = None,
    ) -> GeneratedArtifact:
        """Synthesize the test of ``method``."""
        file_name, folder = self.artifact_location(method, class_decl, model)
        class_name = class_decl.name or ""

        class_namespace = namespace_of(class_decl)
        if class_namespace:
            test_namespace = f"{class_namespace}.Test"
        else:
            test_namespace = f"{application_name(assembly_name) or class_name}.Test"

        text = ""
        for using in self.conventions.test_usings:
            text = add_using(text, using)
        if class_namespace:
            text = add_using(text, class_namespace)

        body = render_test_body(method, class_name, strategy)
        lines = [
            f"namespace {test_namespace}",
            "{",
            f"{_INDENT}/// <summary>",
            f"{_INDENT}/// Test of <see cref=\"{class_name}.{method.name}\"/> ({strategy.value}).",
            f"{_INDENT}/// </summary>",
            f"{_INDENT}[TestClass]",
            f"{_INDENT}public class {file_name} : {self.conventions.test_base_class}",
            f"{_INDENT}{{",
            f"{_INDENT * 2}[TestMethod]",
            f"{_INDENT * 2}public void {method.name}Test()",
            f"{_INDENT * 2}{{",
            *(f"{_INDENT * 3}{line}" for line in body),
            f"{_INDENT * 2}}}",
            f"{_INDENT}}}",
            "}",
        ]
        content = text + "\n" + "\n".join(lines) + "\n"
        return GeneratedArtifact(file_name=file_name, folder=folder, content=content)


def _class_declaration(method: MethodSymbol, class_symbol: TypeSymbol) -> Optional[SyntaxNode]:
    """Class declaration the method is written in (partial classes have several)."""
    declaration = method.declaration
    if declaration is not None and declaration.parent is not None:
        if declaration.parent.kind is SyntaxKind.CLASS_DECLARATION:
            return declaration.parent
    return class_symbol.declaration


def _overload_count(
    method: MethodSymbol, class_decl: SyntaxNode, model: Optional[SemanticModel]
) -> int:
    class_symbol = model.resolve_declared(class_decl) if model is not None else None
    if isinstance(class_symbol, TypeSymbol):
        members = model.compilation.members_of(class_symbol).get(method.name, [])
        return sum(
            1 for m in members if isinstance(m, MethodSymbol) and m.method_kind is MethodKind.ORDINARY
        )
    return sum(1 for m in class_decl.child_nodes(SyntaxKind.METHOD_DECLARATION) if m.name == method.name)
