"""
mDNS/DNS-SD discovery.

The device registers one service instance named after its id. The TXT
record carries the discovery record with `channels` flattened to a
comma separated string::

    id=dev1 model=fakecandy hw_rev=evt-1 fw_rev=v1-beta channels=1,2
"""

import logging
import socket
import time
from collections.abc import Mapping
from typing import Optional

from zeroconf import IPVersion, ServiceBrowser, ServiceInfo, Zeroconf

from fakecandy.exceptions import MissingDiscoveryDataError, handle_errors
from fakecandy.models import DiscoveryRecord, MdnsScanData
from fakecandy.protocols import DiscoveryEvent

from .base import RECORD_FIELDS, DiscoveryResponder, record_from_mapping, route_local_ip

logger = logging.getLogger(__name__)


def parse_service_name(service_name: str) -> tuple[str, str, str]:
    """
    Split a DNS-SD service type into its parts.

    Example:
        >>> parse_service_name("_sample._tcp.local")
        ('_sample._tcp.local.', 'sample', 'tcp')

    Raises:
        ValueError: If the name is not `_<name>._<tcp|udp>.local`
    """
    labels = service_name.rstrip(".").split(".")
    if (
        len(labels) != 3
        or labels[2] != "local"
        or not labels[0].startswith("_")
        or labels[1] not in ("_tcp", "_udp")
        or len(labels[0]) < 2
    ):
        raise ValueError(f"not a DNS-SD service type: {service_name!r}")
    return (".".join(labels) + ".", labels[0][1:], labels[1][1:])


def encode_txt_record(record: DiscoveryRecord) -> dict[str, str]:
    """TXT key/value pairs for a record."""
    return {
        "id": record.id,
        "model": record.model,
        "hw_rev": record.hw_rev,
        "fw_rev": record.fw_rev,
        "channels": ",".join(str(channel) for channel in record.channels),
    }


def _text(value) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def decode_txt_record(txt: Mapping) -> DiscoveryRecord:
    """
    Rebuild a record from TXT pairs.

    Keys and values may be str or bytes (zeroconf reports bytes).

    Raises:
        MissingDiscoveryDataError: If a key is missing or a channel is not
            an integer
    """
    try:
        fields = {_text(key): _text(value) for key, value in txt.items()}
    except UnicodeDecodeError as e:
        raise MissingDiscoveryDataError("record", "TXT", detail=f"not UTF-8: {e}") from e

    missing = [name for name in RECORD_FIELDS if fields.get(name) is None]
    if missing:
        raise MissingDiscoveryDataError(missing, "TXT")

    try:
        fields["channels"] = [int(channel, 10) for channel in fields["channels"].split(",")]
    except ValueError as e:
        raise MissingDiscoveryDataError(
            "channels", "TXT", detail=f"not a list of integers: {fields['channels']!r}"
        ) from e

    return record_from_mapping(fields, "TXT")


class MdnsAdvertiser(DiscoveryResponder):
    """Publishes the record as a DNS-SD service instance."""

    protocol_name = "mDNS"

    def __init__(
        self,
        record: DiscoveryRecord,
        service_name: str = "_sample._tcp.local",
        port: int = 7890,
        instance_name: Optional[str] = None,
        address: Optional[str] = None,
    ):
        """
        Initialize advertiser.

        Args:
            record: Record to advertise
            service_name: DNS-SD service type
            port: Port announced in the SRV record (the control port)
            instance_name: Instance label (default: device id)
            address: IPv4 address to announce (default: outbound interface)
        """
        super().__init__(record)
        self.service_type, _, _ = parse_service_name(service_name)
        self.port = port
        self.instance_name = instance_name or record.id
        self.address = address
        self._zeroconf: Optional[Zeroconf] = None
        self._info: Optional[ServiceInfo] = None

    def build_service_info(self) -> ServiceInfo:
        address = self.address or route_local_ip()
        return ServiceInfo(
            type_=self.service_type,
            name=f"{self.instance_name}.{self.service_type}",
            addresses=[socket.inet_aton(address)],
            port=self.port,
            properties=encode_txt_record(self.record),
            server=f"{self.instance_name}.local.",
        )

    def _start(self) -> None:
        info = self.build_service_info()
        zc = Zeroconf(ip_version=IPVersion.V4Only)
        try:
            zc.register_service(info)
        except Exception:
            zc.close()
            raise

        self._zeroconf = zc
        self._info = info
        logger.info(f"mDNS discovery advertising {info.name} on port {self.port}")
        self._notify(DiscoveryEvent.ADVERTISED, info.name)

    @handle_errors(operation_name="unregister mDNS service", re_raise=False, log_level=logging.WARNING)
    def _unregister(self) -> None:
        self._zeroconf.unregister_service(self._info)
        logger.debug(f"mDNS unregistered {self._info.name}")

    def _stop(self) -> None:
        try:
            self._unregister()
        finally:
            self._zeroconf.close()
            self._zeroconf = None
            self._info = None


class _CollectingListener:
    """ServiceBrowser listener that remembers instance names."""

    def __init__(self) -> None:
        self.names: list[str] = []

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        if name not in self.names:
            self.names.append(name)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self.add_service(zc, type_, name)

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        pass


def browse(service_name: str = "_sample._tcp.local", timeout: float = 3.0) -> list[MdnsScanData]:
    """Browse for service instances for `timeout` seconds and resolve each one."""
    service_type, _, _ = parse_service_name(service_name)
    listener = _CollectingListener()
    results: list[MdnsScanData] = []

    zc = Zeroconf(ip_version=IPVersion.V4Only)
    try:
        browser = ServiceBrowser(zc, service_type, listener)
        time.sleep(timeout)
        browser.cancel()

        for name in listener.names:
            info = zc.get_service_info(service_type, name, timeout=int(timeout * 1000))
            if info is None:
                logger.debug(f"mDNS: could not resolve {name}")
                continue
            results.append(
                MdnsScanData(
                    service_name=service_type,
                    name=name,
                    txt=dict(info.properties),
                    addresses=info.parsed_addresses(),
                    port=info.port,
                )
            )
    finally:
        zc.close()

    return results
