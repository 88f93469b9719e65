"""Device configuration models.

One `AppConfig` is built at start-up (from CLI options or a JSON file)
and passed into every component constructor.
"""

import logging
import shutil
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from fakecandy.exceptions import ConfigFileInvalidError, wrap_pydantic_error

from .discovery import DEVICE_ID_PATTERN, DiscoveryRecord
from .enums import ControlKind, DiscoveryKind

logger = logging.getLogger(__name__)

# A full strand must fit in one OPC frame (uint16 length, 3 bytes per pixel)
MAX_LED_COUNT = 0xFFFF // 3

# Over UDP the whole frame, header included, must also fit one IPv4 datagram
MAX_UDP_PAYLOAD = 65507
MAX_UDP_LED_COUNT = (MAX_UDP_PAYLOAD - 4) // 3


def check_led_count(protocol: ControlKind, led_count: int) -> None:
    """Raise ValueError if a full strand cannot be sent over `protocol`."""
    if protocol is ControlKind.UDP and led_count > MAX_UDP_LED_COUNT:
        raise ValueError(
            f"{led_count} LEDs do not fit one UDP datagram (at most {MAX_UDP_LED_COUNT} over UDP)"
        )


class DeviceConfig(BaseModel):
    """Identity and strand layout of the simulated device."""

    device_id: str = Field(
        pattern=DEVICE_ID_PATTERN, description="Device id returned in discovery responses (no whitespace)"
    )
    model: str = Field(default="fakecandy", description="Device model")
    hw_rev: str = Field(default="evt-1", description="Hardware revision")
    fw_rev: str = Field(default="v1-beta", description="Firmware revision")
    channels: list[int] = Field(
        default_factory=lambda: [1],
        min_length=1,
        description="OPC channels, one LED strand each",
    )
    led_count: int = Field(default=16, ge=1, le=MAX_LED_COUNT, description="Number of LEDs per strand")
    led_char: str = Field(default="◉", min_length=1, description="Glyph printed for each LED")

    @field_validator("channels")
    @classmethod
    def validate_channels(cls, v: list[int]) -> list[int]:
        """Channels are unique and exclude the reserved broadcast channel 0."""
        for channel in v:
            if not 1 <= channel <= 255:
                raise ValueError(f"channel {channel} out of range (1-255)")
        if len(set(v)) != len(v):
            raise ValueError("channels must be unique")
        return v

    def to_discovery_record(self) -> DiscoveryRecord:
        """Build the immutable record advertised by discovery responders."""
        return DiscoveryRecord(
            id=self.device_id,
            model=self.model,
            hw_rev=self.hw_rev,
            fw_rev=self.fw_rev,
            channels=tuple(self.channels),
        )


class ControlConfig(BaseModel):
    """OPC control listener settings."""

    protocol: ControlKind = Field(default=ControlKind.TCP, description="Control transport")
    host: str = Field(default="0.0.0.0", description="Address to bind")
    port: int = Field(default=7890, ge=0, le=65535, description="Port to listen on for OPC messages")
    read_timeout: float | None = Field(
        default=30.0,
        gt=0,
        description="Idle timeout for TCP connections in seconds (None = wait forever)",
    )


class DiscoveryConfig(BaseModel):
    """Discovery responder settings."""

    protocol: DiscoveryKind = Field(default=DiscoveryKind.UDP, description="Discovery protocol")
    udp_port: int = Field(default=3311, ge=0, le=65535, description="Port to listen on for UDP discovery queries")
    udp_packet: str = Field(
        default="A5A5A5A5",
        description="Hex encoded packet content to match for UDP discovery queries",
    )
    mdns_service_name: str = Field(default="_sample._tcp.local", description="mDNS service type")
    mdns_instance_name: str | None = Field(
        default=None, description="mDNS instance name (None = device id)"
    )
    advertise_address: str | None = Field(
        default=None,
        description="IPv4 address advertised over mDNS/SSDP (None = detect outbound interface)",
    )
    upnp_server_port: int = Field(
        default=8080, ge=0, le=65535, description="Port serving the UPnP description document"
    )
    upnp_description_path: str = Field(default="/device.xml", description="Description document path")
    upnp_device_type: str = Field(default="urn:sample:device:strand:1", description="UPnP device type")
    upnp_service_type: str = Field(default="urn:sample:service:strand:1", description="UPnP service type")

    @field_validator("udp_packet")
    @classmethod
    def validate_udp_packet(cls, v: str) -> str:
        """Ensure the probe packet is non-empty hex."""
        try:
            packet = bytes.fromhex(v)
        except ValueError as e:
            raise ValueError(f"not a hex string: {v!r}") from e
        if not packet:
            raise ValueError("discovery packet must not be empty")
        return v

    @field_validator("upnp_description_path")
    @classmethod
    def validate_description_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("description path must start with '/'")
        return v

    @property
    def udp_packet_bytes(self) -> bytes:
        return bytes.fromhex(self.udp_packet)


class AppConfig(BaseModel):
    """Complete device process configuration."""

    device: DeviceConfig
    control: ControlConfig = Field(default_factory=ControlConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    display: bool = Field(default=True, description="Print strands to the console on change")

    @model_validator(mode="after")
    def validate_strand_fits_transport(self) -> "AppConfig":
        check_led_count(self.control.protocol, self.device.led_count)
        return self

    @classmethod
    def load(cls, path: Path) -> "AppConfig":
        """
        Read a config written by `save` (or by hand).

        Raises:
            FileNotFoundError: If there is no file at `path`
            ConfigFileInvalidError: If the file is empty or not UTF-8 JSON
            ConfigValidationError: If a value is out of range
        """
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigFileInvalidError(str(path), f"not UTF-8 text: {e}") from e

        if not text.strip():
            raise ConfigFileInvalidError(str(path), "file is empty")

        try:
            config = cls.model_validate_json(text)
        except ValidationError as e:
            logger.error(f"Rejected config {path}: {e.error_count()} error(s)")
            raise wrap_pydantic_error(e, str(path)) from e

        logger.debug(f"Loaded config for {config.device.device_id} from {path}")
        return config

    def save(self, path: Path) -> None:
        """
        Write the config as indented JSON.

        A previous file at `path` is copied to `<name>.bak` first. The JSON
        is written to `<name>.tmp` and renamed over `path`.

        Raises:
            OSError: If the directory or file cannot be written
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            shutil.copy2(path, path.with_name(path.name + ".bak"))

        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
            tmp_path.replace(path)
        finally:
            tmp_path.unlink(missing_ok=True)
        logger.debug(f"Saved config for {self.device.device_id} to {path}")
