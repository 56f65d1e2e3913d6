"""
notifyprops Symbols
===================

Semantic symbols produced by binding parsed modules. A symbol is identified by
its kind and fully qualified name; two symbols compare equal only when both
match, so a same-named class from another module is a different symbol.
"""

import ast
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .syntax import Location, SyntaxTree


class SymbolKind(Enum):
    """Kinds of declarations the binder understands."""

    MODULE = "module"
    TYPE = "type"
    FUNCTION = "function"
    VARIABLE = "variable"
    FIELD = "field"


@dataclass(frozen=True, eq=False)
class Symbol:
    """Base for every bound declaration."""

    name: str
    kind: SymbolKind
    containing_symbol: Optional["Symbol"] = None
    location: Optional[Location] = None

    @property
    def qualified_name(self) -> str:
        if self.containing_symbol is None:
            return self.name
        if self.containing_symbol.kind is SymbolKind.FUNCTION:
            return f"{self.containing_symbol.qualified_name}.<locals>.{self.name}"
        return f"{self.containing_symbol.qualified_name}.{self.name}"

    @property
    def containing_module(self) -> Optional["Symbol"]:
        symbol: Optional[Symbol] = self
        while symbol is not None and symbol.kind is not SymbolKind.MODULE:
            symbol = symbol.containing_symbol
        return symbol

    def to_display_string(self) -> str:
        return self.qualified_name

    def _key(self):
        return (self.kind, self.qualified_name)

    def __eq__(self, other):
        if not isinstance(other, Symbol):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self) -> str:
        return f"<{self.kind.value} {self.qualified_name}>"


def module_symbol(name: str) -> Symbol:
    return Symbol(name, SymbolKind.MODULE)


@dataclass(frozen=True, eq=False, repr=False)
class TypeSymbol(Symbol):
    """A class declaration together with the syntax it was bound from."""

    node: Optional[ast.ClassDef] = None
    tree: Optional[SyntaxTree] = None

    @property
    def is_top_level(self) -> bool:
        return (
            self.containing_symbol is not None
            and self.containing_symbol.kind is SymbolKind.MODULE
        )

    @property
    def namespace(self) -> str:
        module = self.containing_module
        return module.name if module is not None else ""


@dataclass(frozen=True, eq=False, repr=False)
class FieldSymbol(Symbol):
    """
    A field declared directly by a class.

    Attributes:
        type_name: Annotation source text, or None for untyped fields
        ordinal: Position among the owning type's fields, in declaration order
    """

    type_name: Optional[str] = None
    ordinal: int = 0

    @property
    def containing_type(self) -> TypeSymbol:
        return self.containing_symbol


@dataclass(frozen=True)
class WellKnownNames:
    """Dotted names of the marker and the two notification capabilities."""

    marker: str = "notifyprops.markers.observable_object"
    changed: str = "notifyprops.markers.NotifyPropertyChanged"
    changing: str = "notifyprops.markers.NotifyPropertyChanging"


@dataclass(frozen=True)
class WellKnownSymbols:
    """Resolved identities of the well-known declarations of one compilation."""

    marker: Symbol
    changed: Symbol
    changing: Symbol
    names: WellKnownNames = field(default_factory=WellKnownNames)

    @property
    def support_module(self) -> str:
        """Module that generated code imports its runtime helpers from."""
        module = self.marker.containing_module
        return module.name if module is not None else ""
