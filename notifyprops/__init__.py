"""
notifyprops - Observable Properties Generated from Marked Classes

Mark a class with ``@observable_object`` and the generator emits, for every
underscore-prefixed field, a public property whose setter raises
``property_changing`` before and ``property_changed`` after the assignment.
"""

# Runtime declarations used by marked classes and generated modules
from .markers import (
    Event,
    EventHandlers,
    NotifyPropertyChanged,
    NotifyPropertyChanging,
    PropertyChangedEventArgs,
    PropertyChangingEventArgs,
    observable_object,
    partial_class,
)

# Generation pipeline
from .analysis import Compilation, Location, WellKnownNames, parse_module
from .diagnostics import (
    NESTED_TYPE,
    SKIPPED_FIELD,
    Diagnostic,
    DiagnosticBag,
    DiagnosticDescriptor,
    Severity,
)
from .errors import (
    ArtifactCollisionError,
    GenerationCancelled,
    GeneratorError,
    MissingWellKnownSymbolError,
    SourceParseError,
)
from .generation import PythonRenderer, SkipReason, StubRenderer, derive_property_name
from .generator import (
    Artifact,
    GenerationResult,
    GeneratorOptions,
    ObservableObjectGenerator,
    generate,
)

__all__ = [
    # Runtime
    "observable_object",
    "partial_class",
    "Event",
    "EventHandlers",
    "NotifyPropertyChanged",
    "NotifyPropertyChanging",
    "PropertyChangedEventArgs",
    "PropertyChangingEventArgs",
    # Generator
    "ObservableObjectGenerator",
    "GeneratorOptions",
    "GenerationResult",
    "Artifact",
    "generate",
    "Compilation",
    "parse_module",
    "Location",
    "WellKnownNames",
    "derive_property_name",
    "SkipReason",
    "PythonRenderer",
    "StubRenderer",
    # Diagnostics
    "Diagnostic",
    "DiagnosticBag",
    "DiagnosticDescriptor",
    "Severity",
    "NESTED_TYPE",
    "SKIPPED_FIELD",
    # Exceptions
    "GeneratorError",
    "MissingWellKnownSymbolError",
    "SourceParseError",
    "ArtifactCollisionError",
    "GenerationCancelled",
]
