"""
notifyprops Class Emitter

Builds the ClassDocument for a validated type from data the earlier stages
already computed. No binding happens here, so the document is a pure function
of the resolved type, its capability set and its generated properties.
"""

from typing import TYPE_CHECKING, Optional, Sequence

from ..analysis.symbols import WellKnownSymbols
from .capabilities import CapabilitySet
from .document import (
    CHANGED_MEMBER,
    CHANGING_MEMBER,
    CapabilityRef,
    ClassDocument,
    PropertyNode,
)
from .naming import GeneratedProperty

if TYPE_CHECKING:
    from ..analysis.resolver import ResolvedType


class ClassEmitter:
    def __init__(self, symbols: WellKnownSymbols):
        self.symbols = symbols

    def build(
        self,
        resolved: "ResolvedType",
        capabilities: CapabilitySet,
        properties: Sequence[GeneratedProperty],
    ) -> Optional[ClassDocument]:
        """Return the document, or None when there is no property to emit."""
        if not properties:
            return None

        interfaces = []
        notifications = []
        if not capabilities.has_changed:
            interfaces.append(CapabilityRef.from_symbol(self.symbols.changed))
            notifications.append(CHANGED_MEMBER)
        if not capabilities.has_changing:
            interfaces.append(CapabilityRef.from_symbol(self.symbols.changing))
            notifications.append(CHANGING_MEMBER)

        candidate = resolved.candidate
        return ClassDocument(
            module=candidate.namespace,
            type_name=candidate.name,
            display_name=candidate.display_name,
            support_module=self.symbols.support_module,
            interfaces=tuple(interfaces),
            notifications=tuple(notifications),
            properties=tuple(
                PropertyNode(p.name, p.backing_field, p.type_name)
                for p in sorted(properties, key=lambda p: p.field.ordinal)
            ),
        )
