"""Domain events for observer pattern.

This module defines events emitted by the device:
- Strand events: Pixel buffer and color correction changes
- Discovery events: A controller found or probed the device
"""

from enum import Enum


class StrandEvent(Enum):
    """Events from the strand store."""

    PIXELS_SET = "pixels_set"                # A channel's pixel buffer was replaced
    COLOR_CORRECTED = "color_corrected"      # Global whitepoint changed


class DiscoveryEvent(Enum):
    """Events from discovery responders."""

    PROBED = "probed"          # A UDP probe or SSDP M-SEARCH was answered
    ADVERTISED = "advertised"  # Service registered or NOTIFY sent
