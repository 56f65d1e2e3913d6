"""
notifyprops Semantic Resolver
=============================

Turns scanner candidates into validated types. For each decorated class the
resolver binds the declaration to its symbol, keeps it only if one of its
decorators is the marker by exact identity, rejects nested classes with a
diagnostic, and collects the fields and directly declared bases the later
stages need.

The well-known identities are resolved through the compilation exactly once
and carried explicitly in a GenerationContext that every stage receives.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from ..diagnostics import NESTED_TYPE, DiagnosticReporter
from .compilation import Compilation
from .symbols import FieldSymbol, Symbol, TypeSymbol, WellKnownNames, WellKnownSymbols
from .syntax import CandidateDeclaration, Location

if TYPE_CHECKING:
    from ..generator import GeneratorOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationContext:
    """Everything one generation pass shares between its stages."""

    compilation: Compilation
    symbols: WellKnownSymbols
    options: "GeneratorOptions"
    reporter: DiagnosticReporter


@dataclass(frozen=True)
class CandidateType:
    """A class carrying the marker, before structural validation."""

    symbol: TypeSymbol
    namespace: str
    is_top_level: bool
    marker_location: Location

    @property
    def name(self) -> str:
        return self.symbol.name

    @property
    def display_name(self) -> str:
        return self.symbol.to_display_string()


@dataclass(frozen=True)
class ResolvedType:
    """A validated top-level marked type with its own fields and bases."""

    candidate: CandidateType
    fields: Tuple[FieldSymbol, ...]
    interfaces: Tuple[Symbol, ...]


def resolve_context(
    compilation: Compilation,
    options: "GeneratorOptions",
    reporter: DiagnosticReporter,
    names: Optional[WellKnownNames] = None,
) -> GenerationContext:
    """
    Build the context for one pass over a compilation.

    Raises:
        MissingWellKnownSymbolError: If the host did not make the marker or a
            capability declaration resolvable
    """
    symbols = compilation.well_known_symbols(names or options.well_known)
    return GenerationContext(compilation, symbols, options, reporter)


class SemanticResolver:
    """Binds candidate declarations and validates marked types."""

    def __init__(self, context: GenerationContext):
        self.context = context

    def bind(self, declaration: CandidateDeclaration) -> Optional[CandidateType]:
        """Return the candidate type, or None when the marker is not applied."""
        model = self.context.compilation.get_semantic_model(declaration.tree)
        symbol = model.declared_symbol(declaration.node)
        marker = self.context.symbols.marker
        for attribute in model.attributes(symbol):
            if attribute.attribute_class == marker:
                return CandidateType(
                    symbol=symbol,
                    namespace=symbol.namespace,
                    is_top_level=symbol.is_top_level,
                    marker_location=attribute.application_location,
                )
        return None

    def validate(self, candidate: CandidateType) -> bool:
        """Report nested marked types; only top-level types are generated."""
        if candidate.is_top_level:
            return True
        self.context.reporter.report(
            NESTED_TYPE, candidate.marker_location, candidate.display_name
        )
        return False

    def resolve(self, declarations: Iterable[CandidateDeclaration]) -> List[ResolvedType]:
        """Bind, validate and group fields by owning type, in source order."""
        resolved = []
        for declaration in declarations:
            candidate = self.bind(declaration)
            if candidate is None or not self.validate(candidate):
                continue
            model = self.context.compilation.get_semantic_model(declaration.tree)
            resolved.append(
                ResolvedType(
                    candidate=candidate,
                    fields=tuple(model.declared_fields(candidate.symbol)),
                    interfaces=tuple(model.declared_interfaces(candidate.symbol)),
                )
            )
        logger.debug("Resolved %d marked types", len(resolved))
        return resolved
