"""
notifyprops Naming - Property Names and Field Eligibility
=========================================================

Every field of a marked type either becomes a property or is skipped with an
explicit reason. The property name comes from a fixed rule:

1. strip the leading run of underscores
2. nothing left: no property
3. one character left: its upper-case form
4. otherwise upper-case the first character and keep the rest
5. the result equals the field name: no property. A field without a leading
   underscore counts as unchanged too, since only the case of one letter would
   tell field and property apart (``name`` -> ``Name``)

A derived name that is a Python keyword (``_none`` -> ``None``) cannot be an
attribute name in generated source and is skipped as well. Within one type the
first field to claim a name keeps it; later fields deriving the same name
(``_name`` and ``__name``) are skipped.

Examples:
    derive_property_name("_x")     # "X"
    derive_property_name("_name")  # "Name"
    derive_property_name("_")      # ""
"""

import keyword
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Union

from ..analysis.symbols import FieldSymbol
from ..diagnostics import SKIPPED_FIELD

if TYPE_CHECKING:
    from ..analysis.resolver import CandidateType, GenerationContext

logger = logging.getLogger(__name__)


class SkipReason(Enum):
    """Why a field produced no property."""

    EMPTY_NAME = "the name is empty once leading underscores are removed"
    UNCHANGED_NAME = "the field has no leading underscore to drop"
    RESERVED_WORD = "the derived name is a reserved word"
    DUPLICATE_NAME = "an earlier field already produces a property of that name"


@dataclass(frozen=True)
class GeneratedProperty:
    """A property to emit, backed by one field."""

    name: str
    field: FieldSymbol

    @property
    def backing_field(self) -> str:
        return self.field.name

    @property
    def type_name(self) -> Optional[str]:
        return self.field.type_name


@dataclass(frozen=True)
class Emitted:
    property: GeneratedProperty

    @property
    def field(self) -> FieldSymbol:
        return self.property.field


@dataclass(frozen=True)
class Skipped:
    field: FieldSymbol
    reason: SkipReason


FieldOutcome = Union[Emitted, Skipped]


def derive_property_name(field_name: str) -> str:
    """Apply the naming rule; an empty result means no name could be derived."""
    stripped = field_name.lstrip("_")
    if not stripped:
        return ""
    if len(stripped) == 1:
        return stripped.upper()
    return stripped[0].upper() + stripped[1:]


def classify_field(field: FieldSymbol) -> FieldOutcome:
    name = derive_property_name(field.name)
    if not name:
        return Skipped(field, SkipReason.EMPTY_NAME)
    if name == field.name or not field.name.startswith("_"):
        return Skipped(field, SkipReason.UNCHANGED_NAME)
    if keyword.iskeyword(name):
        return Skipped(field, SkipReason.RESERVED_WORD)
    return Emitted(GeneratedProperty(name, field))


class EligibilityEngine:
    """Classifies the fields of one type and reports the skipped ones."""

    def __init__(self, context: "GenerationContext"):
        self.context = context

    def classify(
        self, candidate: "CandidateType", fields: Iterable[FieldSymbol]
    ) -> List[FieldOutcome]:
        outcomes: List[FieldOutcome] = []
        claimed = set()
        for field in fields:
            outcome = classify_field(field)
            if isinstance(outcome, Emitted):
                if outcome.property.name in claimed:
                    outcome = Skipped(field, SkipReason.DUPLICATE_NAME)
                else:
                    claimed.add(outcome.property.name)
            outcomes.append(outcome)

        for outcome in outcomes:
            if isinstance(outcome, Skipped):
                logger.debug(
                    "Skipping %s.%s: %s",
                    candidate.name,
                    outcome.field.name,
                    outcome.reason.value,
                )
                if self.context.options.report_skipped_fields:
                    self.context.reporter.report(
                        SKIPPED_FIELD,
                        outcome.field.location,
                        outcome.field.name,
                        candidate.display_name,
                        outcome.reason.value,
                    )
        return outcomes
