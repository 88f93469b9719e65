"""Enumerations for the fakecandy models."""

from enum import Enum


class ControlKind(str, Enum):
    """Wire transport used to carry OPC frames."""

    TCP = "TCP"
    UDP = "UDP"
    HTTP = "HTTP"


class DiscoveryKind(str, Enum):
    """Mechanism used to advertise the discovery record."""

    UDP = "UDP"
    MDNS = "MDNS"
    UPNP = "UPNP"


class CommandStatus(str, Enum):
    """Outcome of a logical command for one target device."""

    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
