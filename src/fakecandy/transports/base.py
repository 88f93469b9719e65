"""Base class and shared dispatch for OPC control listeners."""

import logging
import socketserver
import threading
from abc import ABC, abstractmethod
from typing import Optional

from fakecandy.device.handler import OpcHandler
from fakecandy.exceptions import ProtocolError
from fakecandy.opc import Frame

logger = logging.getLogger(__name__)


def dispatch_frame(handler: OpcHandler, frame: Frame, peer: str) -> Optional[Frame]:
    """
    Hand one decoded frame to the device handler.

    Protocol errors are reported against the peer and swallowed so that
    one bad request never stops the listener.

    Returns:
        The response frame to send back, or None
    """
    logger.debug(f"{peer}: channel {frame.channel} command 0x{frame.command:02x} ({frame.length} bytes)")
    try:
        return handler.handle(frame)
    except ProtocolError as e:
        logger.warning(f"{peer}: {e.technical_message}")
        return None


class ControlServer(ABC):
    """
    One OPC control listener bound to a host and port.

    Subclasses create the listening server; this class owns the
    serving thread and the start/stop lifecycle.
    """

    protocol_name = "OPC"

    def __init__(self, handler: OpcHandler, host: str = "0.0.0.0", port: int = 7890):
        """
        Initialize listener.

        Args:
            handler: Device handler shared by all listeners
            host: Address to bind
            port: Port to bind (0 = any free port)
        """
        self.handler = handler
        self.host = host
        self.port = port
        self._running = False
        self._thread: Optional[threading.Thread] = None

    @abstractmethod
    def _serve(self) -> None:
        """Serve until `_shutdown` is called."""
        pass

    @abstractmethod
    def _bind(self) -> None:
        """Create and bind the listening socket."""
        pass

    @abstractmethod
    def _shutdown(self) -> None:
        """Stop serving and release the socket."""
        pass

    @property
    @abstractmethod
    def address(self) -> tuple[str, int]:
        """Bound (host, port); the real port when 0 was requested."""
        pass

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Bind and start serving in a daemon thread."""
        if self._running:
            logger.warning(f"{self.protocol_name} control is already running")
            return

        self._bind()
        self._running = True
        self._thread = threading.Thread(
            target=self._serve, name=f"{self.protocol_name.lower()}-control", daemon=True
        )
        self._thread.start()
        host, port = self.address
        logger.info(f"{self.protocol_name} control listening on {host}:{port}")

    def stop(self) -> None:
        """Stop serving and close the listening socket."""
        if not self._running:
            return

        self._running = False
        self._shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self._thread = None
        logger.info(f"{self.protocol_name} control stopped")

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
        return False


class SocketControlServer(ControlServer):
    """ControlServer backed by a `socketserver` server class."""

    server_class: type[socketserver.BaseServer]
    request_handler_class: type[socketserver.BaseRequestHandler]

    def __init__(self, handler: OpcHandler, host: str = "0.0.0.0", port: int = 7890):
        super().__init__(handler, host, port)
        self._server: Optional[socketserver.BaseServer] = None

    def _bind(self) -> None:
        self._server = self.server_class((self.host, self.port), self.request_handler_class)
        self._server.opc_handler = self.handler
        self._configure(self._server)

    def _configure(self, server: socketserver.BaseServer) -> None:
        """Hook for per-protocol server attributes."""
        pass

    def _serve(self) -> None:
        self._server.serve_forever(poll_interval=0.2)

    def _shutdown(self) -> None:
        self._server.shutdown()
        self._server.server_close()

    @property
    def address(self) -> tuple[str, int]:
        if self._server is None:
            return (self.host, self.port)
        host, port = self._server.server_address[:2]
        return (host, port)
