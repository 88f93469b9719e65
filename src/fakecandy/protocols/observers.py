"""Observer protocol definitions for device events.

This module contains observer protocols for the domain:
- Strand observers: React to pixel and color correction changes
- Discovery observers: React to controllers finding the device
"""

from typing import Protocol, runtime_checkable

from .events import DiscoveryEvent, StrandEvent


@runtime_checkable
class StrandObserver(Protocol):
    """
    Observer that receives strand store changes.

    This protocol allows loose coupling between the strand store and
    anything that displays or mirrors it (e.g., the console renderer).
    """

    def on_strand_event(self, event: StrandEvent, channel: int | None) -> None:
        """
        Handle strand changes.

        Args:
            event: The type of strand event
            channel: Channel that changed, or None for global changes
                (COLOR_CORRECTED)

        Note:
            This is called from transport worker threads after the store
            lock is released. Implementations should be thread-safe.
        """
        ...


@runtime_checkable
class DiscoveryObserver(Protocol):
    """Observer that receives discovery responder activity."""

    def on_discovery_event(self, event: DiscoveryEvent, peer: str) -> None:
        """
        Handle discovery activity.

        Args:
            event: The type of discovery event
            peer: Address of the controller, or the advertised address
        """
        ...
