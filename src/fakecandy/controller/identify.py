"""Identify discovered devices and enumerate their controllable targets."""

import logging
from collections.abc import Iterable

from pydantic import BaseModel

from fakecandy.models import ControlKind, ControlTarget, DiscoveryRecord

logger = logging.getLogger(__name__)

MANUFACTURER = "fakecandy corp"


class DeviceInfo(BaseModel):
    """Descriptive device metadata."""

    manufacturer: str = MANUFACTURER
    model: str
    hw_version: str = ""
    sw_version: str = ""


class IdentifyResult(BaseModel):
    """
    Identity of a discovered device.

    Proxies (more than one channel) expose their sub-devices through
    `reachable_devices`; single channel devices verify directly.
    """

    id: str
    device_info: DeviceInfo
    is_proxy: bool = False
    is_local_only: bool = False
    verification_id: str | None = None

    def to_payload(self) -> dict:
        """Smart Home IDENTIFY device payload."""
        payload: dict = {
            "id": self.id,
            "deviceInfo": {
                "manufacturer": self.device_info.manufacturer,
                "model": self.device_info.model,
                "hwVersion": self.device_info.hw_version,
                "swVersion": self.device_info.sw_version,
            },
        }
        if self.is_proxy:
            payload["isProxy"] = True
            payload["isLocalOnly"] = self.is_local_only
        else:
            payload["verificationId"] = self.verification_id
        return payload


def identify(record: DiscoveryRecord) -> IdentifyResult:
    """Describe a decoded record."""
    info = DeviceInfo(model=record.model, hw_version=record.hw_rev, sw_version=record.fw_rev)
    if record.is_proxy:
        return IdentifyResult(id=record.id, device_info=info, is_proxy=True, is_local_only=True)
    return IdentifyResult(id=record.id, device_info=info, verification_id=record.id)


def reachable_devices(proxy_id: str, candidates: Iterable[ControlTarget]) -> list[str]:
    """
    Verification ids of the candidates reachable through a proxy.

    Keeps candidates whose `proxy` equals `proxy_id`, in input order.
    """
    reachable = [
        f"{proxy_id}-{candidate.channel}" for candidate in candidates if candidate.proxy == proxy_id
    ]
    logger.debug(f"{len(reachable)} devices reachable through {proxy_id}")
    return reachable


def expand_sub_devices(
    record: DiscoveryRecord,
    host: str,
    port: int,
    control_protocol: ControlKind = ControlKind.TCP,
    leds: int = 16,
) -> list[ControlTarget]:
    """One ControlTarget per channel; proxied targets are named `{id}-{channel}`."""
    if not record.is_proxy:
        return [
            ControlTarget(
                id=record.id,
                channel=record.channels[0],
                leds=leds,
                host=host,
                port=port,
                control_protocol=control_protocol,
            )
        ]
    return [
        ControlTarget(
            id=record.sub_device_id(channel),
            channel=channel,
            leds=leds,
            host=host,
            port=port,
            control_protocol=control_protocol,
            proxy=record.id,
        )
        for channel in record.channels
    ]
