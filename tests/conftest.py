"""Shared test fixtures for Kinetix Tools.

Source-level fixtures compile C# snippets into a semantic model; solution
fixtures lay out a small Visual Studio solution on disk:

    Chaine.sln
    Chaine.ReferentielImplementation/
        Chaine.ReferentielImplementation.csproj
        DAL.Implementation/DalOrder.cs
    Chaine.ReferentielImplementation.Test/
        Chaine.ReferentielImplementation.Test.csproj
"""

from pathlib import Path
from textwrap import dedent

import pytest

from kinetix_tools.config import AnalysisConfig
from kinetix_tools.scanning import Compilation, SemanticModel, TreeSitterNormalizer

SLN_HEADER = """\
Microsoft Visual Studio Solution File, Format Version 12.00
# Visual Studio Version 17
"""

CSPROJ = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net48</TargetFramework>
  </PropertyGroup>
{references}</Project>
"""

DAL_ORDER = """\
using Kinetix.ComponentModel;

namespace Chaine.Referentiel.DAL
{
    [RegisterImpl]
    public class DalOrder : AbstractDal
    {
        public int GetOrders(int id)
        {
            var cmd = GetSqlCommand("GetOrders");
            return cmd.ExecuteNonQuery();
        }

        public void Save(string name)
        {
            GetBroker<Order>().Save(name);
        }

        public string Format(int id)
        {
            return id.ToString();
        }

        private void Purge()
        {
            GetSqlCommand("Purge");
        }
    }
}
"""

SERVICE = """\
namespace Chaine.Referentiel.Services
{
    public class OrderService
    {
        private readonly IOrderStore _store;
        private readonly ILogger _logger;

        public OrderService(IOrderStore store)
        {
            _store = store;
        }
    }
}
"""


def compile_source(source: str, path: str = "Test.cs", assembly_name: str = "Test.Implementation"):
    """Parse ``source`` and return ``(tree, model)``."""
    normalizer = TreeSitterNormalizer()
    tree = normalizer.parse_tree(dedent(source), path)
    assert tree is not None
    compilation = Compilation(assembly_name, [tree])
    return tree, SemanticModel(compilation, tree)


def find_node(tree, kind, name):
    """First node of ``kind`` named ``name``."""
    for node in tree.root.walk():
        if node.kind is kind and node.name == name:
            return node
    raise AssertionError(f"no {kind} named {name}")


def _project_line(name: str, path: str) -> str:
    return (
        f'Project("{{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}}") = "{name}", "{path}", '
        f'"{{11111111-2222-3333-4444-555555555555}}"\nEndProject\n'
    )


def write_solution(root: Path, projects: dict[str, dict[str, str]], references: dict[str, list[str]] = None) -> Path:
    """Write a solution with one SDK-style project per entry.

    Args:
        root: Directory receiving the solution
        projects: Project name -> {relative source path: content}
        references: Project name -> referenced project names
    """
    references = references or {}
    lines = [SLN_HEADER]
    for name, sources in projects.items():
        directory = root / name
        directory.mkdir(parents=True, exist_ok=True)
        refs = "".join(
            f'  <ItemGroup>\n    <ProjectReference Include="..\\{r}\\{r}.csproj" />\n  </ItemGroup>\n'
            for r in references.get(name, [])
        )
        (directory / f"{name}.csproj").write_text(CSPROJ.format(references=refs), encoding="utf-8")
        for relative, content in sources.items():
            source_path = directory / relative
            source_path.parent.mkdir(parents=True, exist_ok=True)
            source_path.write_text(content, encoding="utf-8")
        lines.append(_project_line(name, f"{name}\\{name}.csproj"))

    solution = root / "Chaine.sln"
    solution.write_text("".join(lines), encoding="utf-8")
    return solution


@pytest.fixture
def dal_solution(tmp_path):
    """Business project with one DAL file and its paired test project."""
    return write_solution(
        tmp_path,
        {
            "Chaine.ReferentielImplementation": {
                "DAL.Implementation/DalOrder.cs": DAL_ORDER,
                "Services/OrderService.cs": SERVICE,
            },
            "Chaine.ReferentielImplementation.Test": {},
        },
        references={"Chaine.ReferentielImplementation.Test": ["Chaine.ReferentielImplementation"]},
    )


@pytest.fixture
def paired_test_dir(dal_solution):
    return dal_solution.parent / "Chaine.ReferentielImplementation.Test"


@pytest.fixture
def compile_csharp():
    """Factory fixture around compile_source."""
    return compile_source


@pytest.fixture
def node_named():
    return find_node


@pytest.fixture
def sequential_config():
    """Single worker, isolated from any user config file."""
    return AnalysisConfig(workers=1)
