"""Controller side: command translation, clients and local fulfillment."""

from .clients import ControlClient, HttpControlClient, TcpControlClient, UdpControlClient, create_client
from .fulfillment import LocalController
from .identify import DeviceInfo, IdentifyResult, expand_sub_devices, identify, reachable_devices
from .translator import parse_command, translate

__all__ = [
    "ControlClient",
    "DeviceInfo",
    "HttpControlClient",
    "IdentifyResult",
    "LocalController",
    "TcpControlClient",
    "UdpControlClient",
    "create_client",
    "expand_sub_devices",
    "identify",
    "parse_command",
    "reachable_devices",
    "translate",
]
