"""
notifyprops Capability Detection

Decides which notification capabilities a marked type already declares, so the
emitter never declares one twice. Matching is on symbol identity: a locally
defined class that happens to be called ``NotifyPropertyChanged`` does not count.
"""

from dataclasses import dataclass
from typing import Iterable

from ..analysis.symbols import Symbol, WellKnownSymbols


@dataclass(frozen=True)
class CapabilitySet:
    has_changed: bool
    has_changing: bool


def detect_capabilities(
    interfaces: Iterable[Symbol], symbols: WellKnownSymbols
) -> CapabilitySet:
    """Check a type's directly declared bases against both capabilities."""
    declared = set(interfaces)
    return CapabilitySet(
        has_changed=symbols.changed in declared,
        has_changing=symbols.changing in declared,
    )
