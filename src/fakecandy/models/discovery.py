"""Discovery record model."""

from pydantic import BaseModel, ConfigDict, Field

# Ids travel in SSDP headers and the UPnP UDN, so they must be one token
DEVICE_ID_PATTERN = r"^\S+$"


class DiscoveryRecord(BaseModel):
    """Identity of a physical device and its addressable channels.

    The same record is advertised whichever discovery mechanism is used;
    only its wire representation differs. A record with more than one
    channel describes a proxy exposing one logical sub-device per channel.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=DEVICE_ID_PATTERN, description="Device id, no whitespace")
    model: str = Field(description="Device model name")
    hw_rev: str = Field(description="Hardware revision")
    fw_rev: str = Field(description="Firmware revision")
    channels: tuple[int, ...] = Field(min_length=1, description="OPC channels, in configured order")

    @property
    def is_proxy(self) -> bool:
        """True if the device exposes one sub-device per channel."""
        return len(self.channels) > 1

    def sub_device_id(self, channel: int) -> str:
        """Per-channel identity used by controllers for proxied devices."""
        return f"{self.id}-{channel}"

    def to_payload(self) -> dict:
        """Plain mapping with `channels` as a list, as sent over CBOR."""
        return {
            "id": self.id,
            "model": self.model,
            "hw_rev": self.hw_rev,
            "fw_rev": self.fw_rev,
            "channels": list(self.channels),
        }
