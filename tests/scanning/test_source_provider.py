"""Tests for scanning/provider.py - per-project compilations."""

import pytest

from kinetix_tools.exceptions import DocumentLoadError
from kinetix_tools.scanning import CSHARP_AVAILABLE, SourceModelProvider
from kinetix_tools.workspace import Document, load_solution

pytestmark = pytest.mark.skipif(not CSHARP_AVAILABLE, reason="tree-sitter-c-sharp not installed")


def _provider(solution_path, max_file_size=5 * 1024 * 1024):
    solution = load_solution(solution_path)
    return solution, SourceModelProvider(solution, max_file_size)


class TestSourceModelProvider:
    def test_semantic_model_for_document(self, dal_solution):
        solution, provider = _provider(dal_solution)
        project = solution.project_by_name("Chaine.ReferentielImplementation")
        document = next(d for d in solution.documents(project) if d.name == "DalOrder.cs")

        model = provider.semantic_model(document)
        assert model.tree.path == str(document.path)
        assert model.compilation.assembly_name == "Chaine.ReferentielImplementation"

    def test_compilation_is_shared(self, dal_solution):
        solution, provider = _provider(dal_solution)
        project = solution.project_by_name("Chaine.ReferentielImplementation")
        first, second = solution.documents(project)
        assert provider.semantic_model(first).compilation is provider.semantic_model(second).compilation

    def test_referenced_project_compiled(self, dal_solution):
        solution, provider = _provider(dal_solution)
        test_project = solution.project_by_name("Chaine.ReferentielImplementation.Test")
        compilation = provider.compilation(test_project)
        (referenced,) = compilation.references
        assert referenced.assembly_name == "Chaine.ReferentielImplementation"
        assert compilation.find_type("DalOrder") is not None

    def test_oversized_document_fails_alone(self, dal_solution):
        solution, provider = _provider(dal_solution, max_file_size=400)
        project = solution.project_by_name("Chaine.ReferentielImplementation")
        documents = {d.name: d for d in solution.documents(project)}

        with pytest.raises(DocumentLoadError) as exc_info:
            provider.semantic_model(documents["DalOrder.cs"])
        assert "exceeds limit" in exc_info.value.reason

        assert provider.semantic_model(documents["OrderService.cs"]) is not None

    def test_unknown_project(self, dal_solution, tmp_path):
        _, provider = _provider(dal_solution)
        with pytest.raises(DocumentLoadError):
            provider.semantic_model(Document(tmp_path / "X.cs", "Missing"))
