"""
notifyprops Generator - Observable Property Generation Pipeline
===============================================================

ObservableObjectGenerator runs one generation pass over a Compilation:

1. the MarkerScanner picks decorated classes out of every module
2. the SemanticResolver keeps classes carrying the marker, rejects nested ones
   and collects each type's own fields and declared bases
3. per type, the EligibilityEngine derives property names, the capability
   detector checks the declared bases, the ClassEmitter builds a document and
   the configured Renderer turns it into text

Types are independent of each other. With ``max_workers > 1`` step 3 runs on a
thread pool; results are always collected in resolution order, so the output
is the same as a serial pass.

Usage:
    compilation = Compilation.from_sources(sources)
    result = ObservableObjectGenerator().run(compilation)
    for artifact in result.artifacts:
        print(artifact.hint_name)
    for diagnostic in result.diagnostics:
        print(diagnostic)
"""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .analysis.compilation import Compilation
from .analysis.resolver import (
    GenerationContext,
    ResolvedType,
    SemanticResolver,
    resolve_context,
)
from .analysis.symbols import WellKnownNames
from .analysis.syntax import MarkerScanner
from .diagnostics import Diagnostic, DiagnosticBag, DiagnosticChannel, DiagnosticReporter
from .errors import ArtifactCollisionError, GenerationCancelled
from .generation.capabilities import detect_capabilities
from .generation.emitter import ClassEmitter
from .generation.naming import EligibilityEngine, Emitted, FieldOutcome
from .generation.renderers import PythonRenderer, Renderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorOptions:
    """
    Configuration of a generator.

    Attributes:
        report_skipped_fields: Report NP101 for fields that produce no property
        artifact_suffix: Appended to the type name to form the artifact name
        max_workers: Threads used to process types; 1 processes them inline
        well_known: Dotted names of the marker and capability declarations
        renderer: Spelling of generated artifacts
    """

    report_skipped_fields: bool = True
    artifact_suffix: str = "_observable"
    max_workers: int = 1
    well_known: WellKnownNames = field(default_factory=WellKnownNames)
    renderer: Renderer = field(default_factory=PythonRenderer)


@dataclass(frozen=True)
class Artifact:
    """One generated source file handed to the host."""

    hint_name: str
    text: str

    @property
    def content(self) -> bytes:
        return self.text.encode("utf-8")


@dataclass(frozen=True)
class TypeResult:
    """Outcome of processing one marked type."""

    display_name: str
    outcomes: Tuple[FieldOutcome, ...]
    artifact: Optional[Artifact]


@dataclass
class GenerationResult:
    artifacts: List[Artifact]
    diagnostics: List[Diagnostic]
    field_outcomes: Dict[str, Tuple[FieldOutcome, ...]]

    def artifact(self, hint_name: str) -> Artifact:
        for artifact in self.artifacts:
            if artifact.hint_name == hint_name:
                return artifact
        raise KeyError(hint_name)


class ObservableObjectGenerator:
    """Generates observable properties for marked classes."""

    def __init__(self, options: Optional[GeneratorOptions] = None):
        self.options = options or GeneratorOptions()
        self.scanner = MarkerScanner()

    def execute(
        self,
        compilation: Compilation,
        report: DiagnosticChannel,
        cancel: Optional[threading.Event] = None,
    ) -> List[Artifact]:
        """
        Run one pass and return the artifacts.

        Args:
            compilation: Program snapshot to analyze
            report: Host channel receiving diagnostics; use ``run`` to have them
                collected instead
            cancel: Checked before each type; when set the pass stops

        Raises:
            MissingWellKnownSymbolError: If the well-known declarations are absent
            GenerationCancelled: If ``cancel`` was set during the pass
            ArtifactCollisionError: If two types map to the same artifact name
        """
        results = self._run(compilation, DiagnosticReporter(report), cancel)
        return [r.artifact for r in results if r.artifact is not None]

    def run(
        self, compilation: Compilation, cancel: Optional[threading.Event] = None
    ) -> GenerationResult:
        """Run one pass collecting diagnostics and field outcomes as well."""
        bag = DiagnosticBag()
        results = self._run(compilation, DiagnosticReporter(bag), cancel)
        return GenerationResult(
            artifacts=[r.artifact for r in results if r.artifact is not None],
            diagnostics=bag.sorted(),
            field_outcomes={r.display_name: r.outcomes for r in results},
        )

    def _run(
        self,
        compilation: Compilation,
        reporter: DiagnosticReporter,
        cancel: Optional[threading.Event],
    ) -> List[TypeResult]:
        context = resolve_context(compilation, self.options, reporter)
        resolver = SemanticResolver(context)
        resolved = resolver.resolve(self.scanner.scan(compilation.trees))

        def process(item: ResolvedType) -> TypeResult:
            if cancel is not None and cancel.is_set():
                raise GenerationCancelled("Generation cancelled by the host")
            return self._process_type(context, item)

        if self.options.max_workers > 1 and len(resolved) > 1:
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=self.options.max_workers
            ) as executor:
                results = list(executor.map(process, resolved))
        else:
            results = [process(item) for item in resolved]

        seen = set()
        for result in results:
            if result.artifact is None:
                continue
            if result.artifact.hint_name in seen:
                raise ArtifactCollisionError(result.artifact.hint_name)
            seen.add(result.artifact.hint_name)

        logger.debug(
            "Generated %d artifacts for %d marked types", len(seen), len(results)
        )
        return results

    def _process_type(self, context: GenerationContext, resolved: ResolvedType) -> TypeResult:
        candidate = resolved.candidate
        outcomes = EligibilityEngine(context).classify(candidate, resolved.fields)
        properties = [o.property for o in outcomes if isinstance(o, Emitted)]

        capabilities = detect_capabilities(resolved.interfaces, context.symbols)
        document = ClassEmitter(context.symbols).build(resolved, capabilities, properties)
        if document is None:
            logger.debug("No eligible fields on %s; nothing generated", candidate.display_name)
            return TypeResult(candidate.display_name, tuple(outcomes), None)

        renderer = self.options.renderer
        hint_name = f"{candidate.name}{self.options.artifact_suffix}{renderer.file_extension}"
        artifact = Artifact(hint_name, renderer.render(document))
        logger.debug(
            "Generated %s with %d properties", hint_name, len(document.properties)
        )
        return TypeResult(candidate.display_name, tuple(outcomes), artifact)


def generate(
    sources: Mapping[str, str],
    options: Optional[GeneratorOptions] = None,
    packages=(),
) -> GenerationResult:
    """Parse ``sources`` (module name -> source) and run one generation pass."""
    compilation = Compilation.from_sources(sources, packages=packages)
    return ObservableObjectGenerator(options).run(compilation)
