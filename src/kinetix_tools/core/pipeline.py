"""Orchestration pipeline: documents in, diagnostics and test artifacts out.

Each document is one independent task moving through

    LOADED -> PARSED -> CLASSIFIED -> RULE_EVALUATED -> (GENERATION_EVALUATED)* -> DONE

or ending early in SKIPPED (outside scope) or FAILED (load or analysis error).
Tasks share no mutable state: the source model provider hands out read-only
compilations and the artifact writer relies on exclusive file creation.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from ..config import AnalysisConfig
from ..exceptions import KinetixToolsError, UnsupportedLanguageError
from ..file_ops import ArtifactWriter
from ..generation import GeneratedArtifact, TestGenerator, TestStrategy
from ..logging_config import get_logger
from ..rules import DAL_LOW_LEVEL_CALL, Diagnostic, build_engine
from ..scanning.provider import SourceModelProvider
from ..scanning.semantic import SemanticModel
from ..scanning.symbols import MethodSymbol, TypeSymbol
from ..scanning.syntax import SyntaxKind, SyntaxNode
from ..semantics import Role, classify, is_business_assembly, is_dal_implementation_file
from ..workspace import Document, Project, Solution

logger = get_logger(__name__)


class DocumentState(Enum):
    LOADED = "loaded"
    PARSED = "parsed"
    CLASSIFIED = "classified"
    RULE_EVALUATED = "rule_evaluated"
    GENERATION_EVALUATED = "generation_evaluated"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


TERMINAL_STATES = frozenset({DocumentState.DONE, DocumentState.SKIPPED, DocumentState.FAILED})


@dataclass
class DocumentOutcome:
    """What happened to one document.

    Attributes:
        document: The document
        states: Every state the document went through, in order
        diagnostics: Diagnostics reported on the document
        artifacts: Test artifacts generated for its methods
        generated: Artifacts actually created on disk
        written: Paths actually created on disk
        skip_reason: Why the document was skipped
        error: Why the document failed
    """

    document: Document
    states: list[DocumentState] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    artifacts: list[GeneratedArtifact] = field(default_factory=list)
    generated: list[GeneratedArtifact] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    skip_reason: Optional[str] = None
    error: Optional[str] = None

    def advance(self, state: DocumentState) -> None:
        self.states.append(state)

    @property
    def state(self) -> Optional[DocumentState]:
        return self.states[-1] if self.states else None

    def skip(self, reason: str) -> DocumentOutcome:
        self.skip_reason = reason
        self.advance(DocumentState.SKIPPED)
        return self

    def fail(self, error: str) -> DocumentOutcome:
        self.error = error
        self.advance(DocumentState.FAILED)
        return self


@dataclass
class PipelineResult:
    """Joined outcome of every document task."""

    outcomes: list[DocumentOutcome] = field(default_factory=list)
    skipped_projects: list[str] = field(default_factory=list)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        found = [d for outcome in self.outcomes for d in outcome.diagnostics]
        return sorted(found, key=Diagnostic.sort_key)

    @property
    def artifacts(self) -> list[GeneratedArtifact]:
        return [a for outcome in self.outcomes for a in outcome.artifacts]

    @property
    def generated(self) -> list[GeneratedArtifact]:
        return [a for outcome in self.outcomes for a in outcome.generated]

    @property
    def written(self) -> list[Path]:
        return [p for outcome in self.outcomes for p in outcome.written]

    def count(self, state: DocumentState) -> int:
        return sum(1 for outcome in self.outcomes if outcome.state is state)

    @property
    def failed(self) -> list[DocumentOutcome]:
        return [o for o in self.outcomes if o.state is DocumentState.FAILED]


class AnalysisPipeline:
    """Runs rules and test generation over the business projects of a solution.

    Args:
        config: Analysis configuration
        solution: Loaded solution
        provider: Source model provider (built from the solution when omitted)
    """

    def __init__(
        self,
        config: AnalysisConfig,
        solution: Solution,
        provider: Optional[SourceModelProvider] = None,
    ) -> None:
        self.config = config
        self.solution = solution
        self.provider = provider or SourceModelProvider(solution, config.max_file_size_bytes)
        self.generator = TestGenerator(config.conventions)
        self._analysis_engine = build_engine(config)
        # generation eligibility is KTA1300 itself, whatever the user disabled
        self._generation_engine = build_engine(config, force=[DAL_LOW_LEVEL_CALL.id])

    # ── scoping ────────────────────────────────────────────────

    def business_projects(self, result: PipelineResult) -> list[Project]:
        projects: list[Project] = []
        for project in self.solution.projects:
            if is_business_assembly(project.assembly_name, self.config.conventions):
                projects.append(project)
            else:
                logger.info(f"Skipping project {project.name}: not a business assembly")
                result.skipped_projects.append(project.name)
        return projects

    def _check_parser(self) -> None:
        if not self.provider.available:
            raise UnsupportedLanguageError("csharp", "tree-sitter-c-sharp")

    # ── entry points ───────────────────────────────────────────

    def analyze(self) -> PipelineResult:
        """Run every active rule over every business-assembly document."""
        self._check_parser()
        result = PipelineResult()
        tasks: list[Callable[[], DocumentOutcome]] = []
        for project in self.business_projects(result):
            for document in self.solution.documents(project):
                tasks.append(lambda d=document: self._analyze_document(d))
        result.outcomes = self._run_all(tasks)
        return result

    def generate(
        self, strategy: Optional[TestStrategy] = None, dry_run: bool = False
    ) -> PipelineResult:
        """Generate missing tests for the data-access methods of every business project.

        Args:
            strategy: Content strategy (defaults to the configured one)
            dry_run: Compute artifacts without writing them
        """
        self._check_parser()
        strategy = strategy or TestStrategy.parse(self.config.strategy)
        conventions = self.config.conventions
        result = PipelineResult()
        tasks: list[Callable[[], DocumentOutcome]] = []
        skipped: list[DocumentOutcome] = []

        for project in self.business_projects(result):
            documents = self.solution.documents(project)
            test_project = self.solution.test_project_for(project, conventions.test_project_suffix)
            if test_project is None:
                logger.info(
                    f"Skipping {project.name}: no {project.name}{conventions.test_project_suffix} project"
                )
                result.skipped_projects.append(project.name)
                for document in documents:
                    outcome = DocumentOutcome(document)
                    outcome.advance(DocumentState.LOADED)
                    skipped.append(outcome.skip("no paired test project"))
                continue

            writer = ArtifactWriter(test_project.directory, dry_run=dry_run)
            for document in documents:
                if self.config.dal_file_filter and not is_dal_implementation_file(
                    document.path, conventions
                ):
                    outcome = DocumentOutcome(document)
                    outcome.advance(DocumentState.LOADED)
                    skipped.append(outcome.skip("not a DAL implementation file"))
                    continue
                tasks.append(
                    lambda d=document, w=writer, p=project: self._generate_document(d, w, strategy, p)
                )

        result.outcomes = skipped + self._run_all(tasks)
        result.outcomes.sort(key=lambda o: str(o.document.path))
        return result

    # ── per-document tasks ─────────────────────────────────────

    def _run_all(self, tasks: list[Callable[[], DocumentOutcome]]) -> list[DocumentOutcome]:
        if not tasks:
            return []

        outcomes: list[DocumentOutcome] = []
        workers = self.config.worker_count
        if workers == 1 or len(tasks) == 1:
            outcomes = [task() for task in tasks]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(task) for task in tasks]
                for future in as_completed(futures):
                    outcomes.append(future.result())

        outcomes.sort(key=lambda o: str(o.document.path))
        return outcomes

    def _load(self, outcome: DocumentOutcome) -> SemanticModel:
        outcome.advance(DocumentState.LOADED)
        model = self.provider.semantic_model(outcome.document)
        outcome.advance(DocumentState.PARSED)
        return model

    def _classified_classes(
        self, model: SemanticModel
    ) -> list[tuple[SyntaxNode, TypeSymbol, frozenset[Role]]]:
        classes = []
        for node in model.tree.type_declarations():
            if node.kind is not SyntaxKind.CLASS_DECLARATION:
                continue
            symbol = model.resolve_declared(node)
            if isinstance(symbol, TypeSymbol):
                classes.append((node, symbol, classify(symbol, model, self.config.conventions)))
        return classes

    def _analyze_document(self, document: Document) -> DocumentOutcome:
        outcome = DocumentOutcome(document)
        try:
            model = self._load(outcome)
            classes = self._classified_classes(model)
            logger.debug(f"{document.path}: {len(classes)} classes classified")
            outcome.advance(DocumentState.CLASSIFIED)
            outcome.diagnostics = self._analysis_engine.run(model.tree, model)
            outcome.advance(DocumentState.RULE_EVALUATED)
            outcome.advance(DocumentState.DONE)
        except KinetixToolsError as e:
            logger.warning(f"{document.path}: {e}")
            outcome.fail(str(e))
        except Exception as e:
            logger.warning(f"{document.path}: unexpected error: {e}")
            outcome.fail(f"Unexpected error: {e}")
        return outcome

    def _generate_document(
        self,
        document: Document,
        writer: ArtifactWriter,
        strategy: TestStrategy,
        project: Project,
    ) -> DocumentOutcome:
        outcome = DocumentOutcome(document)
        try:
            model = self._load(outcome)
            dal_classes = [
                (node, symbol)
                for node, symbol, roles in self._classified_classes(model)
                if Role.DATA_ACCESS_IMPLEMENTATION in roles
            ]
            outcome.advance(DocumentState.CLASSIFIED)
            if not dal_classes:
                outcome.advance(DocumentState.DONE)
                return outcome

            outcome.diagnostics = self._generation_engine.run(model.tree, model)
            outcome.advance(DocumentState.RULE_EVALUATED)

            for class_node, class_symbol in dal_classes:
                for method_node in class_node.child_nodes(SyntaxKind.METHOD_DECLARATION):
                    method = model.resolve_declared(method_node)
                    if not isinstance(method, MethodSymbol):
                        continue
                    self._generate_method(
                        outcome, method, class_node, class_symbol, model, writer, strategy, project
                    )

            outcome.advance(DocumentState.DONE)
        except KinetixToolsError as e:
            logger.warning(f"{document.path}: {e}")
            outcome.fail(str(e))
        except Exception as e:
            logger.warning(f"{document.path}: unexpected error: {e}")
            outcome.fail(f"Unexpected error: {e}")
        return outcome

    def _generate_method(
        self,
        outcome: DocumentOutcome,
        method: MethodSymbol,
        class_node: SyntaxNode,
        class_symbol: TypeSymbol,
        model: SemanticModel,
        writer: ArtifactWriter,
        strategy: TestStrategy,
        project: Project,
    ) -> None:
        eligible = self.generator.should_generate(
            method, class_symbol, model, outcome.diagnostics, lambda p: writer.exists(Path(p))
        )
        outcome.advance(DocumentState.GENERATION_EVALUATED)
        if not eligible:
            return

        artifact = self.generator.generate(
            method, class_node, strategy, project.assembly_name, model
        )
        outcome.artifacts.append(artifact)
        written = writer.write(Path(artifact.relative_path), artifact.content)
        if written is not None:
            outcome.written.append(written)
            outcome.generated.append(artifact)
            logger.info(f"{artifact.folder}/{artifact.file_name} generated")
