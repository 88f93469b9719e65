"""Protocol definitions for device observer patterns.

This package contains protocols and events specific to the fakecandy domain:
- Events: strand and discovery events
- Observers: Protocols for components that react to these events
"""

from .events import DiscoveryEvent, StrandEvent
from .observers import DiscoveryObserver, StrandObserver

__all__ = [
    # Events
    "DiscoveryEvent",
    # Observers
    "DiscoveryObserver",
    "StrandEvent",
    "StrandObserver",
]
