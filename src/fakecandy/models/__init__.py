"""Data models for fakecandy."""

from .color import Color
from .commands import COMMAND_TYPES, BrightnessAbsolute, ColorAbsolute, LogicalCommand, OnOff
from .config import (
    MAX_LED_COUNT,
    MAX_UDP_LED_COUNT,
    AppConfig,
    ControlConfig,
    DeviceConfig,
    DiscoveryConfig,
)
from .discovery import DiscoveryRecord
from .enums import CommandStatus, ControlKind, DiscoveryKind
from .scan import MdnsScanData, ScanData, UdpScanData, UpnpScanData
from .state import CommandResult, ControlTarget, LightState

__all__ = [
    "MAX_LED_COUNT",
    "MAX_UDP_LED_COUNT",
    # Config
    "AppConfig",
    # Commands
    "BrightnessAbsolute",
    "COMMAND_TYPES",
    # Models
    "Color",
    "ColorAbsolute",
    "CommandResult",
    # Enums
    "CommandStatus",
    "ControlConfig",
    "ControlKind",
    "ControlTarget",
    "DeviceConfig",
    "DiscoveryConfig",
    "DiscoveryKind",
    "DiscoveryRecord",
    "LightState",
    "LogicalCommand",
    # Scan data
    "MdnsScanData",
    "OnOff",
    "ScanData",
    "UdpScanData",
    "UpnpScanData",
]
