"""Solution and project loading.

Reads a Visual Studio solution (.sln), the MSBuild project files it lists and
the C# documents of each project. Only what analysis needs is kept: project
names, assembly names, project references and document paths.

Example:
    >>> solution = load_solution(Path("Chaine.sln"))
    >>> [p.assembly_name for p in solution.projects]
    ['Chaine.ReferentielImplementation', 'Chaine.ReferentielImplementation.Test']
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .exceptions import InvalidPathError
from .security import validate_solution_path

logger = logging.getLogger(__name__)

# Project("{type-guid}") = "Name", "relative\path.csproj", "{project-guid}"
_PROJECT_LINE = re.compile(
    r'^Project\("\{[^}]*\}"\)\s*=\s*"(?P<name>[^"]+)"\s*,\s*"(?P<path>[^"]+)"\s*,\s*"\{[^}]*\}"',
    re.MULTILINE,
)

_EXCLUDED_DIRECTORIES = frozenset({"bin", "obj"})


@dataclass(frozen=True)
class Document:
    """A C# source file and the project it belongs to."""

    path: Path
    project_name: str

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class Project:
    """An MSBuild project of the solution.

    Attributes:
        name: Project name as listed in the solution
        path: Path of the .csproj file
        assembly_name: AssemblyName property (defaults to the project file stem)
        references: Names of referenced projects
        sdk_style: The project file uses an MSBuild SDK (``<Project Sdk=...>``)
        default_compile_items: ``**/*.cs`` is compiled implicitly (SDK default)
        compile_includes: ``<Compile Include>`` item specs, relative to the project
        compile_removes: ``<Compile Remove>`` item specs, relative to the project
    """

    name: str
    path: Path
    assembly_name: str
    references: tuple[str, ...] = ()
    sdk_style: bool = False
    default_compile_items: bool = False
    compile_includes: tuple[str, ...] = field(default=(), repr=False)
    compile_removes: tuple[str, ...] = field(default=(), repr=False)

    @property
    def directory(self) -> Path:
        return self.path.parent


class Solution:
    """Projects of a solution and the documents they own."""

    def __init__(self, path: Path, projects: list[Project]) -> None:
        self.path = path
        self.projects = list(projects)
        self._by_name = {p.name: p for p in self.projects}
        self._documents: dict[str, list[Document]] = {}

    def project_by_name(self, name: str) -> Optional[Project]:
        return self._by_name.get(name)

    def documents(self, project: Project) -> list[Document]:
        """C# documents of a project, sorted by path."""
        if project.name not in self._documents:
            self._documents[project.name] = [
                Document(path=p, project_name=project.name) for p in _enumerate_sources(project)
            ]
        return self._documents[project.name]

    def referenced_projects(self, project: Project) -> list[Project]:
        return [self._by_name[name] for name in project.references if name in self._by_name]

    def test_project_for(self, project: Project, suffix: str = ".Test") -> Optional[Project]:
        """Paired test project, found by the ``<ProjectName><suffix>`` naming convention."""
        return self._by_name.get(f"{project.name}{suffix}")


def load_solution(path: Path) -> Solution:
    """Load a solution file and its projects.

    Args:
        path: Path to the .sln file

    Returns:
        Solution with every readable C# project

    Raises:
        InvalidPathError: If the solution file does not exist or cannot be read
    """
    solution_path = validate_solution_path(path)

    try:
        text = solution_path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        raise InvalidPathError(solution_path, f"Cannot read solution: {e}")

    projects: list[Project] = []
    for match in _PROJECT_LINE.finditer(text):
        relative = match.group("path").replace("\\", "/")
        if not relative.lower().endswith(".csproj"):
            # solution folders and non C# projects
            continue
        project_path = (solution_path.parent / relative).resolve()
        project = _load_project(match.group("name"), project_path)
        if project is not None:
            projects.append(project)

    logger.debug(f"Loaded {len(projects)} projects from {solution_path.name}")
    return Solution(solution_path, projects)


def _load_project(name: str, path: Path) -> Optional[Project]:
    """Read a .csproj; unreadable project files are skipped with a warning."""
    try:
        root = ET.parse(path).getroot()
    except (OSError, ET.ParseError) as e:
        logger.warning(f"Skipping project {name}: cannot read {path} ({e})")
        return None

    assembly_name = path.stem
    references: list[str] = []
    includes: list[str] = []
    removes: list[str] = []
    sdk_style = root.get("Sdk") is not None
    default_items = True

    # Legacy project files carry the msbuild namespace; SDK-style ones do not.
    for element in root.iter():
        tag = element.tag.rsplit("}", 1)[-1]
        if tag == "AssemblyName" and element.text and element.text.strip():
            assembly_name = element.text.strip()
        elif tag == "EnableDefaultCompileItems" and element.text:
            default_items = element.text.strip().lower() != "false"
        elif tag == "Sdk" or (tag == "Import" and element.get("Sdk")):
            sdk_style = True
        elif tag == "ProjectReference":
            include = element.get("Include")
            if include:
                references.append(Path(include.replace("\\", "/")).stem)
        elif tag == "Compile":
            include = element.get("Include")
            if include and include.lower().endswith(".cs"):
                includes.append(include.replace("\\", "/"))
            remove = element.get("Remove")
            if remove:
                removes.append(remove.replace("\\", "/"))

    return Project(
        name=name,
        path=path,
        assembly_name=assembly_name,
        references=tuple(references),
        sdk_style=sdk_style,
        default_compile_items=sdk_style and default_items,
        compile_includes=tuple(includes),
        compile_removes=tuple(removes),
    )


def _expand(directory: Path, pattern: str) -> set[Path]:
    """Files matched by an MSBuild item spec (plain path or ``*``/``**`` glob)."""
    if any(char in pattern for char in "*?"):
        if Path(pattern).is_absolute():
            return set()
        if pattern.endswith("**"):
            # a trailing ** only yields directories before Python 3.13
            pattern += "/*"
        return {p.resolve() for p in directory.glob(pattern) if p.is_file()}
    candidate = (directory / pattern).resolve()
    return {candidate} if candidate.is_file() else set()


def _enumerate_sources(project: Project) -> list[Path]:
    """C# files compiled by a project.

    SDK-style projects compile every ``*.cs`` under their directory (minus
    ``bin``/``obj``) plus explicit includes such as linked files. Legacy
    projects compile exactly their ``<Compile Include>`` items. ``<Compile
    Remove>`` applies to both.
    """
    sources: set[Path] = set()
    if project.default_compile_items:
        for candidate in project.directory.rglob("*.cs"):
            relative = candidate.relative_to(project.directory)
            if any(part.lower() in _EXCLUDED_DIRECTORIES for part in relative.parts[:-1]):
                continue
            if candidate.is_file():
                sources.add(candidate.resolve())

    for pattern in project.compile_includes:
        sources.update(_expand(project.directory, pattern))
    for pattern in project.compile_removes:
        sources.difference_update(_expand(project.directory, pattern))
    return sorted(sources)
