"""
notifyprops Generation - naming, capability detection, documents and rendering.
"""

from .capabilities import CapabilitySet, detect_capabilities
from .document import CapabilityRef, ClassDocument, NotificationMember, PropertyNode
from .emitter import ClassEmitter
from .naming import (
    EligibilityEngine,
    Emitted,
    FieldOutcome,
    GeneratedProperty,
    SkipReason,
    Skipped,
    classify_field,
    derive_property_name,
)
from .renderers import PythonRenderer, Renderer, StubRenderer

__all__ = [
    "CapabilityRef",
    "CapabilitySet",
    "ClassDocument",
    "ClassEmitter",
    "EligibilityEngine",
    "Emitted",
    "FieldOutcome",
    "GeneratedProperty",
    "NotificationMember",
    "PropertyNode",
    "PythonRenderer",
    "Renderer",
    "SkipReason",
    "Skipped",
    "StubRenderer",
    "classify_field",
    "derive_property_name",
    "detect_capabilities",
]
