"""
notifyprops Diagnostics
=======================

Structured diagnostics for misuse of the marker. A diagnostic pairs a fixed
descriptor (code, title, message template, category, severity) with a source
location and the arguments substituted into the template.

Diagnostics travel through a reporting channel supplied by the host: any
callable accepting a Diagnostic. DiagnosticBag is the collecting channel used
when the host does not bring its own.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

from .analysis.syntax import Location

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Diagnostic severities, ordered from least to most severe."""

    HIDDEN = "hidden"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Static description of one kind of diagnostic."""

    id: str
    title: str
    message_format: str
    category: str
    default_severity: Severity
    description: str = ""


@dataclass(frozen=True)
class Diagnostic:
    """A reported diagnostic."""

    descriptor: DiagnosticDescriptor
    location: Location
    arguments: Tuple[str, ...] = ()

    @property
    def code(self) -> str:
        return self.descriptor.id

    @property
    def severity(self) -> Severity:
        return self.descriptor.default_severity

    @property
    def message(self) -> str:
        return self.descriptor.message_format.format(*self.arguments)

    def sort_key(self):
        return (
            self.location.path,
            self.location.line,
            self.location.column,
            self.code,
            self.arguments,
        )

    def __str__(self) -> str:
        return f"{self.location}: {self.severity.value} {self.code}: {self.message}"


NESTED_TYPE = DiagnosticDescriptor(
    id="NP100",
    title="Incorrect attribute usage.",
    message_format="Targeted class {0} can not be a part of another class.",
    category="Attribute Usage",
    default_severity=Severity.WARNING,
    description="Targeted class can not be a part of another class.",
)

SKIPPED_FIELD = DiagnosticDescriptor(
    id="NP101",
    title="Field produces no property.",
    message_format="Field {0} of class {1} produces no property: {2}.",
    category="Naming",
    default_severity=Severity.WARNING,
    description=(
        "The property name derived from the field is empty, equal to the field "
        "name, a reserved word or already taken by an earlier field, so no "
        "property is generated for it."
    ),
)

DiagnosticChannel = Callable[[Diagnostic], None]


class DiagnosticBag:
    """Thread-safe collecting channel."""

    def __init__(self):
        self._items: List[Diagnostic] = []
        self._lock = threading.Lock()

    def __call__(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._items.append(diagnostic)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.sorted())

    def sorted(self) -> List[Diagnostic]:
        """Diagnostics in a stable order, independent of reporting order."""
        with self._lock:
            return sorted(self._items, key=Diagnostic.sort_key)


class DiagnosticReporter:
    """Builds diagnostics from descriptors and hands them to the host channel."""

    def __init__(self, channel: Optional[DiagnosticChannel] = None):
        self.channel = channel if channel is not None else DiagnosticBag()

    def report(
        self, descriptor: DiagnosticDescriptor, location: Location, *arguments: str
    ) -> Diagnostic:
        diagnostic = Diagnostic(descriptor, location, tuple(str(a) for a in arguments))
        logger.debug("Reporting %s", diagnostic)
        self.channel(diagnostic)
        return diagnostic
