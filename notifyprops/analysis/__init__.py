"""
notifyprops Analysis - syntax trees, symbols and semantic binding.

The resolver lives in ``notifyprops.analysis.resolver`` and is imported from
there; it depends on the diagnostics module, which itself builds on this
package.
"""

from .compilation import AttributeData, Compilation, SemanticModel
from .symbols import (
    FieldSymbol,
    Symbol,
    SymbolKind,
    TypeSymbol,
    WellKnownNames,
    WellKnownSymbols,
)
from .syntax import CandidateDeclaration, Location, MarkerScanner, SyntaxTree, parse_module

__all__ = [
    "AttributeData",
    "CandidateDeclaration",
    "Compilation",
    "FieldSymbol",
    "Location",
    "MarkerScanner",
    "SemanticModel",
    "Symbol",
    "SymbolKind",
    "SyntaxTree",
    "TypeSymbol",
    "WellKnownNames",
    "WellKnownSymbols",
    "parse_module",
]
