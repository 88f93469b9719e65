"""
UDP broadcast discovery.

A controller broadcasts a fixed probe packet (hex configured, default
A5A5A5A5) to the discovery port. The device compares the payload byte
for byte and, on a match, replies to the sender with its record encoded
as a CBOR map::

    {"id": "dev1", "model": "fakecandy", "hw_rev": "evt-1",
     "fw_rev": "v1-beta", "channels": [1, 2]}
"""

import logging
import socket
import socketserver
import threading
import time
from typing import Optional

import cbor2

from fakecandy.exceptions import MissingDiscoveryDataError
from fakecandy.models import DiscoveryRecord, UdpScanData
from fakecandy.protocols import DiscoveryEvent

from .base import DiscoveryResponder, record_from_mapping

logger = logging.getLogger(__name__)

DEFAULT_PROBE_PACKET = bytes.fromhex("A5A5A5A5")
DEFAULT_DISCOVERY_PORT = 3311


def encode_discovery_response(record: DiscoveryRecord) -> bytes:
    """CBOR map of the record, as sent in reply to a probe."""
    return cbor2.dumps(record.to_payload())


def decode_discovery_response(data: bytes) -> DiscoveryRecord:
    """
    Decode a probe reply.

    Raises:
        MissingDiscoveryDataError: If the payload is not a CBOR map holding
            every record field
    """
    try:
        payload = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, TypeError) as e:
        raise MissingDiscoveryDataError("record", "CBOR", detail=f"invalid CBOR: {e}") from e

    if not isinstance(payload, dict):
        raise MissingDiscoveryDataError(
            "record", "CBOR", detail=f"expected a map, got {type(payload).__name__}"
        )
    return record_from_mapping(payload, "CBOR")


class _ProbeHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        data, sock = self.request
        self.server.responder.answer(data, sock, self.client_address)


class _DiscoveryUDPServer(socketserver.UDPServer):
    allow_reuse_address = True


class UdpDiscoveryResponder(DiscoveryResponder):
    """Answers matching broadcast probes with the CBOR encoded record."""

    protocol_name = "UDP"

    def __init__(
        self,
        record: DiscoveryRecord,
        port: int = DEFAULT_DISCOVERY_PORT,
        packet: bytes = DEFAULT_PROBE_PACKET,
        host: str = "0.0.0.0",
    ):
        """
        Initialize responder.

        Args:
            record: Record to advertise
            port: Discovery port to listen on (0 = any free port)
            packet: Exact probe payload to answer
            host: Address to bind
        """
        super().__init__(record)
        self.host = host
        self.port = port
        self.packet = bytes(packet)
        self._response = encode_discovery_response(record)
        self._server: Optional[_DiscoveryUDPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> tuple[str, int]:
        if self._server is None:
            return (self.host, self.port)
        host, port = self._server.server_address[:2]
        return (host, port)

    def answer(self, data: bytes, sock: socket.socket, peer: tuple) -> bool:
        """
        Reply to one datagram if it is a probe.

        Returns:
            True if a reply was sent
        """
        peer_name = "{}:{}".format(*peer[:2])
        if data != self.packet:
            logger.warning(f"UDP discovery: unknown payload {data[:32].hex()} from {peer_name}")
            return False

        logger.debug(f"UDP discovery: probe from {peer_name}")
        try:
            sock.sendto(self._response, peer)
        except OSError as e:
            logger.error(f"UDP discovery: failed to reply to {peer_name}: {e}")
            return False

        self._notify(DiscoveryEvent.PROBED, peer_name)
        return True

    def _start(self) -> None:
        self._server = _DiscoveryUDPServer((self.host, self.port), _ProbeHandler)
        self._server.responder = self
        self._thread = threading.Thread(
            target=self._server.serve_forever, kwargs={"poll_interval": 0.2},
            name="udp-discovery", daemon=True,
        )
        self._thread.start()
        host, port = self.address
        logger.info(f"UDP discovery listening on {host}:{port}")

    def _stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self._server = None
        self._thread = None


def probe(
    address: str = "255.255.255.255",
    port: int = DEFAULT_DISCOVERY_PORT,
    packet: bytes = DEFAULT_PROBE_PACKET,
    timeout: float = 1.0,
) -> list[UdpScanData]:
    """
    Broadcast one probe and collect every reply until `timeout` elapses.

    No retries; an empty list means nothing answered in time.
    """
    replies: list[UdpScanData] = []
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.sendto(packet, (address, port))
        logger.debug(f"UDP discovery: probe sent to {address}:{port}")

        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            sock.settimeout(remaining)
            try:
                data, peer = sock.recvfrom(65535)
            except socket.timeout:
                break
            replies.append(UdpScanData(data=data, address=peer[0], port=peer[1]))
    finally:
        sock.close()

    logger.debug(f"UDP discovery: {len(replies)} replies")
    return replies
