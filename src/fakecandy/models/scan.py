"""Scan data reported to a controller by each discovery mechanism.

The three variants form a closed set tagged by `kind`; a controller
decodes any of them back into the same `DiscoveryRecord`.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class UdpScanData(BaseModel):
    """Reply to a UDP broadcast probe."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["udp"] = "udp"
    data: bytes = Field(description="CBOR encoded discovery record")
    address: str | None = Field(default=None, description="Sender address")
    port: int | None = Field(default=None, description="Sender port")


class MdnsScanData(BaseModel):
    """A resolved DNS-SD service instance."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["mdns"] = "mdns"
    service_name: str = Field(description="Service type, e.g. _sample._tcp.local.")
    name: str | None = Field(default=None, description="Full instance name")
    txt: dict[str | bytes, str | bytes | None] = Field(description="TXT record key/value pairs")
    addresses: list[str] = Field(default_factory=list)
    port: int | None = None


class UpnpScanData(BaseModel):
    """An SSDP search response or NOTIFY announcement."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["upnp"] = "upnp"
    location: str = Field(description="Description URL, or its path when host/port are given")
    host: str | None = None
    port: int | None = None
    device_type: str | None = Field(default=None, description="ST/NT header")
    usn: str | None = None

    @property
    def description_url(self) -> str:
        if "://" in self.location:
            return self.location
        return f"http://{self.host}:{self.port}{self.location}"


ScanData = Annotated[UdpScanData | MdnsScanData | UpnpScanData, Field(discriminator="kind")]
