"""
notifyprops Markers - Runtime Declarations Used by Marked and Generated Code
============================================================================

This module holds the well-known declarations the generator looks for and the
small runtime that generated modules rely on:

- **observable_object**: the class decorator marking types for generation
- **NotifyPropertyChanged** / **NotifyPropertyChanging**: the notification
  capabilities, as ABCs exposing a ``property_changed`` / ``property_changing``
  event
- **Event**: descriptor giving every instance its own EventHandlers
- **partial_class**: merges a generated carrier class into the marked type

Basic Usage
-----------

```python
from notifyprops.markers import observable_object

@observable_object
class Person:
    _name: str = ""

# after the generated Person_observable module is imported:
person = Person()
person.property_changed += lambda sender, args: print(args.property_name)
person.Name = "Ada"  # prints "Name"
```
"""

from abc import ABC, ABCMeta
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Type, TypeVar

T = TypeVar("T")

EventHandler = Callable[[Any, Any], None]


def observable_object(cls: Type[T]) -> Type[T]:
    """Mark a class for observable property generation; returns it unchanged."""
    return cls


@dataclass(frozen=True)
class PropertyChangedEventArgs:
    property_name: str


@dataclass(frozen=True)
class PropertyChangingEventArgs:
    property_name: str


class EventHandlers:
    """
    Handlers registered on one event of one instance.

    Notification iterates over a snapshot, so handlers may subscribe or
    unsubscribe while being notified. Handler exceptions propagate to the code
    that raised the event.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> EventHandler:
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove the most recently added registration of ``handler``."""
        for index in range(len(self._handlers) - 1, -1, -1):
            if self._handlers[index] == handler:
                del self._handlers[index]
                return

    def __iadd__(self, handler: EventHandler) -> "EventHandlers":
        self.subscribe(handler)
        return self

    def __isub__(self, handler: EventHandler) -> "EventHandlers":
        self.unsubscribe(handler)
        return self

    def __len__(self) -> int:
        return len(self._handlers)

    def __bool__(self) -> bool:
        return bool(self._handlers)

    def notify(self, sender: Any, args: Any) -> None:
        """Call every handler with ``(sender, args)``; no-op when there are none."""
        for handler in tuple(self._handlers):
            handler(sender, args)


class Event:
    """
    Descriptor for an instance event.

    Accessing the event on an instance returns that instance's EventHandlers,
    created on first access and stored in the instance ``__dict__``. Accessing
    it on the class returns the descriptor itself.
    """

    def __init__(self) -> None:
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional[object], owner: type):
        if instance is None:
            return self
        handlers = instance.__dict__.get(self.name)
        if handlers is None:
            handlers = instance.__dict__[self.name] = EventHandlers()
        return handlers

    def __set__(self, instance: object, value: EventHandlers) -> None:
        # `obj.event += handler` reads, mutates in place and assigns back
        if value is not self.__get__(instance, type(instance)):
            raise AttributeError(
                f"Event '{self.name}' can only be changed with += and -="
            )


class NotifyPropertyChanged(ABC):
    """Capability: raises ``property_changed`` after a property changes."""

    property_changed = Event()


class NotifyPropertyChanging(ABC):
    """Capability: raises ``property_changing`` before a property changes."""

    property_changing = Event()


# Members every class body gets from type creation; never merged
_CARRIER_ONLY = {"_abc_impl"}


def partial_class(target: Type[T]) -> Callable[[type], Type[T]]:
    """
    Merge a carrier class into ``target`` and return ``target``.

    Non-dunder members the carrier defines are copied onto ``target``; every
    ABC the carrier lists as a base is registered as a virtual base of
    ``target`` unless ``target`` already subclasses it.
    """

    def merge(carrier: type) -> Type[T]:
        for name, value in vars(carrier).items():
            if name in _CARRIER_ONLY or (name.startswith("__") and name.endswith("__")):
                continue
            setattr(target, name, value)
        for base in carrier.__bases__:
            if isinstance(base, ABCMeta) and not issubclass(target, base):
                base.register(target)
        return target

    return merge
