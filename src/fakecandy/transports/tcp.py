"""TCP control listener: one session per connection."""

import logging
import socket
import socketserver

from fakecandy.device.handler import OpcHandler
from fakecandy.exceptions import MalformedFrameError
from fakecandy.opc import FrameDecoder

from .base import SocketControlServer, dispatch_frame

logger = logging.getLogger(__name__)

READ_SIZE = 4096


class _ThreadingTCPServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True
    block_on_close = False


class OpcStreamHandler(socketserver.BaseRequestHandler):
    """
    One TCP session.

    Incoming bytes are re-segmented with a per-connection `FrameDecoder`;
    responses are written back on the same connection in request order.
    """

    def handle(self) -> None:
        peer = "{}:{}".format(*self.client_address[:2])
        opc_handler: OpcHandler = self.server.opc_handler
        self.request.settimeout(self.server.read_timeout)
        decoder = FrameDecoder()
        logger.debug(f"TCP: {peer} connected")

        try:
            while True:
                chunk = self.request.recv(READ_SIZE)
                if not chunk:
                    break
                for frame in decoder.feed(chunk):
                    response = dispatch_frame(opc_handler, frame, peer)
                    if response is not None:
                        self.request.sendall(response.encode())
                        logger.debug(f"TCP: sent {response.length} byte response to {peer}")
        except socket.timeout:
            logger.info(f"TCP: {peer} idle for {self.server.read_timeout}s, closing")
        except OSError as e:
            logger.error(f"TCP: connection with {peer} failed: {e}")

        try:
            decoder.close()
        except MalformedFrameError as e:
            logger.warning(f"TCP: {peer}: {e.technical_message}")
        logger.debug(f"TCP: {peer} disconnected")


class TcpControlServer(SocketControlServer):
    """OPC over TCP, one thread per connection."""

    protocol_name = "TCP"
    server_class = _ThreadingTCPServer
    request_handler_class = OpcStreamHandler

    def __init__(
        self,
        handler: OpcHandler,
        host: str = "0.0.0.0",
        port: int = 7890,
        read_timeout: float | None = 30.0,
    ):
        """
        Initialize TCP listener.

        Args:
            handler: Device handler shared by all connections
            host: Address to bind
            port: Port to bind
            read_timeout: Idle seconds before a connection is closed (None = never)
        """
        super().__init__(handler, host, port)
        self.read_timeout = read_timeout

    def _configure(self, server: socketserver.BaseServer) -> None:
        server.read_timeout = self.read_timeout
