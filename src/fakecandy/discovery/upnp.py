"""
UPnP/SSDP discovery.

Two cooperating parts:

- An HTTP server (FastAPI on uvicorn) serving the device description
  document at the configured path.
- An SSDP responder on 239.255.255.250:1900 answering M-SEARCH requests
  for its USNs and announcing them with NOTIFY ssdp:alive/ssdp:byebye.

Description document::

    <root xmlns="urn:schemas-upnp-org:device-1-0">
      <specVersion><major>1</major><minor>1</minor></specVersion>
      <device>
        <deviceType>urn:sample:device:strand:1</deviceType>
        <friendlyName>Virtual Light Device</friendlyName>
        <UDN>uuid:dev1</UDN>
        <modelName>fakecandy</modelName>
        <modelNumber>evt-1</modelNumber>
        <firmwareVersion>v1-beta</firmwareVersion>
        <serviceList>
          <service>
            <serviceType>urn:sample:service:strand:1</serviceType>
            <serviceId>urn:sample:serviceId:strand-1</serviceId>
          </service>
        </serviceList>
      </device>
    </root>
"""

import logging
import re
import socket
import struct
import threading
import time
import xml.etree.ElementTree as ET
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import Response

from fakecandy import __version__
from fakecandy.exceptions import MissingScanDataError
from fakecandy.models import DiscoveryRecord, UpnpScanData
from fakecandy.protocols import DiscoveryEvent
from fakecandy.utils import BackgroundHttpServer

from .base import DiscoveryResponder, route_local_ip

logger = logging.getLogger(__name__)

SSDP_GROUP = "239.255.255.250"
SSDP_PORT = 1900
SSDP_ALL = "ssdp:all"
ROOT_DEVICE = "upnp:rootdevice"
MAX_AGE = 1800

DEVICE_NAMESPACE = "urn:schemas-upnp-org:device-1-0"
FRIENDLY_NAME = "Virtual Light Device"
SERVICE_ID_PREFIX = "urn:sample:serviceId:strand-"

SERVER_HEADER = f"Python/3 UPnP/1.1 fakecandy/{__version__}"

_UDN_PATTERN = re.compile(r"^uuid:(\S+)$")
_SERVICE_ID_PATTERN = re.compile(rf"^{re.escape(SERVICE_ID_PREFIX)}([0-9]+)$")

DESCRIPTION_SOURCE = "UPnP description"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


# =================================================================
# Description document
# =================================================================


def build_device_description(
    record: DiscoveryRecord,
    device_type: str = "urn:sample:device:strand:1",
    service_type: str = "urn:sample:service:strand:1",
    friendly_name: str = FRIENDLY_NAME,
) -> str:
    """Render the device description XML, one service per channel."""
    root = ET.Element("root", xmlns=DEVICE_NAMESPACE)
    spec_version = ET.SubElement(root, "specVersion")
    ET.SubElement(spec_version, "major").text = "1"
    ET.SubElement(spec_version, "minor").text = "1"

    device = ET.SubElement(root, "device")
    ET.SubElement(device, "deviceType").text = device_type
    ET.SubElement(device, "friendlyName").text = friendly_name
    ET.SubElement(device, "UDN").text = f"uuid:{record.id}"
    ET.SubElement(device, "modelName").text = record.model
    ET.SubElement(device, "modelNumber").text = record.hw_rev
    ET.SubElement(device, "firmwareVersion").text = record.fw_rev

    service_list = ET.SubElement(device, "serviceList")
    for channel in record.channels:
        service = ET.SubElement(service_list, "service")
        ET.SubElement(service, "serviceType").text = service_type
        ET.SubElement(service, "serviceId").text = f"{SERVICE_ID_PREFIX}{channel}"

    ET.indent(root)
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(parent: ET.Element, name: str) -> Optional[ET.Element]:
    for element in parent:
        if _local_name(element.tag) == name:
            return element
    return None


def _children(parent: ET.Element, name: str) -> list[ET.Element]:
    return [element for element in parent if _local_name(element.tag) == name]


def _required_text(parent: ET.Element, name: str) -> str:
    element = _child(parent, name)
    if element is None or not (element.text or "").strip():
        raise MissingScanDataError(f"<{name}> element", DESCRIPTION_SOURCE)
    return element.text.strip()


def parse_device_description(xml: str | bytes) -> DiscoveryRecord:
    """
    Recover the record from a description document.

    Raises:
        MissingScanDataError: If the document is not XML, or a required
            element is missing or malformed
    """
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise MissingScanDataError(f"well-formed XML ({e})", DESCRIPTION_SOURCE) from e

    device = root if _local_name(root.tag) == "device" else _child(root, "device")
    if device is None:
        raise MissingScanDataError("<device> element", DESCRIPTION_SOURCE)

    udn = _UDN_PATTERN.match(_required_text(device, "UDN"))
    if udn is None:
        raise MissingScanDataError("<UDN> uuid", DESCRIPTION_SOURCE)

    service_list = _child(device, "serviceList")
    services = _children(service_list, "service") if service_list is not None else []
    if not services:
        raise MissingScanDataError("<service> element", DESCRIPTION_SOURCE)

    channels = []
    for service in services:
        match = _SERVICE_ID_PATTERN.match(_required_text(service, "serviceId"))
        if match is None:
            raise MissingScanDataError("<serviceId> strand channel", DESCRIPTION_SOURCE)
        channels.append(int(match.group(1)))

    return DiscoveryRecord(
        id=udn.group(1),
        model=_required_text(device, "modelName"),
        hw_rev=_required_text(device, "modelNumber"),
        fw_rev=_required_text(device, "firmwareVersion"),
        channels=tuple(channels),
    )


def create_description_app(description: str, path: str = "/device.xml") -> FastAPI:
    """FastAPI app serving the description document at `path`."""
    app = FastAPI(title="fakecandy UPnP description", version=__version__)

    @app.get(path)
    def device_description() -> Response:
        logger.debug("UPnP: received device description request")
        return Response(content=description, media_type="text/xml")

    return app


# =================================================================
# SSDP messages
# =================================================================


def usn_for(udn: str, target: str) -> str:
    """USN header for one notification/search target."""
    if target == udn:
        return udn
    return f"{udn}::{target}"


def parse_ssdp_message(data: bytes) -> tuple[str, dict[str, str]]:
    """
    Split an SSDP datagram into its start line and headers.

    Header names are upper-cased. Raises ValueError for non-text data.
    """
    text = data.decode("utf-8")
    lines = text.split("\r\n") if "\r\n" in text else text.split("\n")
    start_line = lines[0].strip()
    headers: dict[str, str] = {}
    for line in lines[1:]:
        if not line.strip():
            break
        name, sep, value = line.partition(":")
        if sep:
            headers[name.strip().upper()] = value.strip()
    return start_line, headers


def _format_message(start_line: str, headers: list[tuple[str, str]]) -> bytes:
    lines = [start_line] + [f"{name}: {value}" for name, value in headers]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


def build_search_response(target: str, udn: str, location: str) -> bytes:
    """Unicast reply to an M-SEARCH."""
    return _format_message(
        "HTTP/1.1 200 OK",
        [
            ("CACHE-CONTROL", f"max-age={MAX_AGE}"),
            ("EXT", ""),
            ("LOCATION", location),
            ("SERVER", SERVER_HEADER),
            ("ST", target),
            ("USN", usn_for(udn, target)),
        ],
    )


def build_notify(nts: str, target: str, udn: str, location: str) -> bytes:
    """Multicast NOTIFY for `ssdp:alive` or `ssdp:byebye`."""
    headers = [("HOST", f"{SSDP_GROUP}:{SSDP_PORT}"), ("NT", target), ("NTS", nts), ("USN", usn_for(udn, target))]
    if nts == "ssdp:alive":
        headers[1:1] = [("CACHE-CONTROL", f"max-age={MAX_AGE}"), ("LOCATION", location), ("SERVER", SERVER_HEADER)]
    return _format_message("NOTIFY * HTTP/1.1", headers)


def build_search_request(target: str = SSDP_ALL, mx: int = 1) -> bytes:
    """Multicast M-SEARCH as sent by a controller."""
    return _format_message(
        "M-SEARCH * HTTP/1.1",
        [
            ("HOST", f"{SSDP_GROUP}:{SSDP_PORT}"),
            ("MAN", '"ssdp:discover"'),
            ("MX", str(mx)),
            ("ST", target),
        ],
    )


class SsdpResponder:
    """
    Answers SSDP searches for a fixed set of USNs.

    `responses_for()` is the pure part: given one datagram it returns the
    replies to send. `start()` binds the multicast socket and runs the
    receive loop on a daemon thread.
    """

    def __init__(self, udn: str, location: str, usns: list[str], interface: str = "0.0.0.0"):
        """
        Initialize responder.

        Args:
            udn: Unique device name (uuid:<id>)
            location: Absolute URL of the description document
            usns: Search targets to answer for and announce
            interface: IPv4 address of the interface joining the group
        """
        self.udn = udn
        self.location = location
        self.usns = list(usns)
        self.interface = interface
        self._socket: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self.on_search = None

    def responses_for(self, data: bytes) -> list[bytes]:
        """Replies owed to one datagram (empty unless it is a matching M-SEARCH)."""
        try:
            start_line, headers = parse_ssdp_message(data)
        except UnicodeDecodeError:
            return []

        if not start_line.upper().startswith("M-SEARCH"):
            return []
        if headers.get("MAN", "").strip('"') != "ssdp:discover":
            return []

        target = headers.get("ST", "")
        if target == SSDP_ALL:
            targets = [self.udn] + self.usns
        elif target == self.udn or target in self.usns:
            targets = [target]
        else:
            return []
        return [build_search_response(t, self.udn, self.location) for t in targets]

    def notifications(self, nts: str) -> list[bytes]:
        return [build_notify(nts, target, self.udn, self.location) for target in [self.udn] + self.usns]

    def _send_notifications(self, nts: str) -> None:
        for message in self.notifications(nts):
            try:
                self._socket.sendto(message, (SSDP_GROUP, SSDP_PORT))
            except OSError as e:
                logger.error(f"SSDP: failed to send {nts}: {e}")
                return
        logger.debug(f"SSDP: sent {nts} for {len(self.usns) + 1} targets")

    def start(self) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        if hasattr(socket, "SO_REUSEPORT"):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        try:
            sock.bind(("", SSDP_PORT))
            membership = struct.pack("4s4s", socket.inet_aton(SSDP_GROUP), socket.inet_aton(self.interface))
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
        except OSError:
            sock.close()
            raise
        sock.settimeout(0.2)

        self._socket = sock
        self._running = True
        self._thread = threading.Thread(target=self._receive_loop, name="ssdp", daemon=True)
        self._thread.start()
        self._send_notifications("ssdp:alive")
        logger.info(f"SSDP responder advertising {', '.join(self.usns)}")

    def _receive_loop(self) -> None:
        while self._running:
            try:
                data, peer = self._socket.recvfrom(8192)
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"SSDP: receive failed: {e}")
                break

            responses = self.responses_for(data)
            if not responses:
                continue
            peer_name = "{}:{}".format(*peer[:2])
            logger.debug(f"SSDP: answering M-SEARCH from {peer_name}")
            for response in responses:
                try:
                    self._socket.sendto(response, peer)
                except OSError as e:
                    logger.error(f"SSDP: failed to reply to {peer_name}: {e}")
                    break
            if self.on_search is not None:
                self.on_search(peer_name)

    def stop(self) -> None:
        if not self._running:
            return
        self._send_notifications("ssdp:byebye")
        self._running = False
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        self._socket.close()
        self._socket = None
        self._thread = None


class UpnpAdvertiser(DiscoveryResponder):
    """Description server plus SSDP responder for one record."""

    protocol_name = "UPnP"

    def __init__(
        self,
        record: DiscoveryRecord,
        server_port: int = 8080,
        description_path: str = "/device.xml",
        device_type: str = "urn:sample:device:strand:1",
        service_type: str = "urn:sample:service:strand:1",
        address: Optional[str] = None,
    ):
        super().__init__(record)
        self.description_path = description_path
        self.device_type = device_type
        self.service_type = service_type
        self.address = address
        self.description = build_device_description(record, device_type, service_type)
        self.app = create_description_app(self.description, description_path)
        self._http = BackgroundHttpServer(self.app, "0.0.0.0", server_port, name="upnp-description")
        self._ssdp: Optional[SsdpResponder] = None

    @property
    def usns(self) -> list[str]:
        return [ROOT_DEVICE, self.device_type, self.service_type]

    def _start(self) -> None:
        self._http.start()
        address = self.address or route_local_ip()
        _, port = self._http.address
        location = f"http://{address}:{port}{self.description_path}"
        logger.info(f"UPnP: description served at {location}")

        self._ssdp = SsdpResponder(f"uuid:{self.record.id}", location, self.usns, interface=address)
        self._ssdp.on_search = lambda peer: self._notify(DiscoveryEvent.PROBED, peer)
        try:
            self._ssdp.start()
        except OSError:
            self._http.shutdown()
            raise
        self._notify(DiscoveryEvent.ADVERTISED, location)
        logger.info(f"UPnP discovery advertising {self.service_type}")

    def _stop(self) -> None:
        try:
            self._ssdp.stop()
        finally:
            self._http.shutdown()
            self._ssdp = None


def search(target: str = SSDP_ALL, timeout: float = 2.0) -> list[UpnpScanData]:
    """
    Multicast one M-SEARCH and collect responses until `timeout` elapses.

    Responses are de-duplicated by USN.
    """
    results: dict[str, UpnpScanData] = {}
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
        sock.sendto(build_search_request(target, mx=max(1, int(timeout))), (SSDP_GROUP, SSDP_PORT))

        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            sock.settimeout(remaining)
            try:
                data, peer = sock.recvfrom(8192)
            except socket.timeout:
                break
            try:
                start_line, headers = parse_ssdp_message(data)
            except UnicodeDecodeError:
                continue
            if start_line.split()[1:2] != ["200"] or "LOCATION" not in headers:
                continue
            usn = headers.get("USN", headers["LOCATION"])
            results.setdefault(
                usn,
                UpnpScanData(
                    location=headers["LOCATION"],
                    host=peer[0],
                    device_type=headers.get("ST"),
                    usn=headers.get("USN"),
                ),
            )
    finally:
        sock.close()

    return list(results.values())
