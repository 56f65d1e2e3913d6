"""
notifyprops Class Documents

The structural form of one generated artifact: which capabilities the carrier
class declares, which notification members it adds and which properties it
defines, all in output order. Renderers turn a document into text; nothing in
a document depends on how it will look.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..analysis.symbols import Symbol


@dataclass(frozen=True)
class CapabilityRef:
    """A capability class as generated code refers to it."""

    name: str
    module: str

    @classmethod
    def from_symbol(cls, symbol: Symbol) -> "CapabilityRef":
        module = symbol.containing_module
        return cls(symbol.name, module.name if module is not None else "")


@dataclass(frozen=True)
class NotificationMember:
    """An event member raised by property setters."""

    name: str
    args_type: str


CHANGED_MEMBER = NotificationMember("property_changed", "PropertyChangedEventArgs")
CHANGING_MEMBER = NotificationMember("property_changing", "PropertyChangingEventArgs")


@dataclass(frozen=True)
class PropertyNode:
    name: str
    backing_field: str
    type_name: Optional[str]


@dataclass(frozen=True)
class ClassDocument:
    """
    One partial re-declaration of a marked type.

    Attributes:
        module: Module that declares the marked type
        type_name: Simple name of the marked type
        support_module: Module providing Event, event args and partial_class
        interfaces: Capabilities the carrier declares, in output order
        notifications: Event members the carrier adds, in output order
        properties: Properties in field declaration order
    """

    module: str
    type_name: str
    display_name: str
    support_module: str
    interfaces: Tuple[CapabilityRef, ...]
    notifications: Tuple[NotificationMember, ...]
    properties: Tuple[PropertyNode, ...]
    changing: NotificationMember = CHANGING_MEMBER
    changed: NotificationMember = CHANGED_MEMBER
