"""UDP control listener: one frame per datagram."""

import logging
import socketserver

from fakecandy.device.handler import OpcHandler
from fakecandy.exceptions import MalformedFrameError
from fakecandy.opc import decode

from .base import SocketControlServer, dispatch_frame

logger = logging.getLogger(__name__)

# Largest OPC frame: 4 byte header + 65535 byte payload
MAX_DATAGRAM = 4 + 0xFFFF


class _ThreadingUDPServer(socketserver.ThreadingUDPServer):
    allow_reuse_address = True
    daemon_threads = True
    block_on_close = False
    max_packet_size = MAX_DATAGRAM


class OpcDatagramHandler(socketserver.BaseRequestHandler):
    """Decode one datagram, apply it and answer the sender if needed."""

    def handle(self) -> None:
        data, sock = self.request
        peer = "{}:{}".format(*self.client_address[:2])
        opc_handler: OpcHandler = self.server.opc_handler
        logger.debug(f"UDP: {len(data)} bytes from {peer}")

        try:
            frame = decode(data)
        except MalformedFrameError as e:
            logger.warning(f"UDP: {peer}: {e.technical_message}")
            return

        response = dispatch_frame(opc_handler, frame, peer)
        if response is None:
            return

        try:
            sock.sendto(response.encode(), self.client_address)
            logger.debug(f"UDP: sent {response.length} byte response to {peer}")
        except OSError as e:
            logger.error(f"UDP: failed to send response to {peer}: {e}")


class UdpControlServer(SocketControlServer):
    """OPC over UDP. No retries: lost datagrams are lost."""

    protocol_name = "UDP"
    server_class = _ThreadingUDPServer
    request_handler_class = OpcDatagramHandler
