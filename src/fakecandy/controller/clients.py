"""Controller-side OPC clients, one per control transport."""

import base64
import binascii
import logging
import socket
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from fakecandy.exceptions import ControlTransportError, MalformedFrameError, UnsupportedCommandError
from fakecandy.models import ControlKind
from fakecandy.opc import Frame, FrameDecoder, OpcCommand, decode, parse_sysex

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
READ_SIZE = 4096


class ControlClient(ABC):
    """
    Sends OPC frames to one device.

    No retries: an I/O failure raises ControlTransportError and the
    caller decides what to do.
    """

    protocol: ControlKind

    def __init__(self, host: str, port: int, timeout: float = DEFAULT_TIMEOUT):
        self.host = host
        self.port = port
        self.timeout = timeout

    @abstractmethod
    def send(self, frame: Frame, expect_response: bool = False) -> Optional[Frame]:
        """
        Send one frame.

        Args:
            frame: Frame to send
            expect_response: Wait for and return the device's reply frame

        Raises:
            ControlTransportError: If sending or receiving fails
        """
        pass

    def close(self) -> None:
        pass

    def _error(self, error: Exception | str, error_code: str = "transientError") -> ControlTransportError:
        return ControlTransportError(self.protocol.value, self.host, self.port, str(error), error_code)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False


class TcpControlClient(ControlClient):
    """OPC over one persistent TCP connection, opened on first use."""

    protocol = ControlKind.TCP

    def __init__(self, host: str, port: int, timeout: float = DEFAULT_TIMEOUT):
        super().__init__(host, port, timeout)
        self._socket: Optional[socket.socket] = None
        self._decoder = FrameDecoder()
        self._pending: list[Frame] = []

    def _connect(self) -> socket.socket:
        if self._socket is None:
            self._socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            logger.debug(f"TCP: connected to {self.host}:{self.port}")
        return self._socket

    def send(self, frame: Frame, expect_response: bool = False) -> Optional[Frame]:
        try:
            sock = self._connect()
            sock.sendall(frame.encode())
            if not expect_response:
                return None
            return self._read_frame(sock)
        except socket.timeout as e:
            self.close()
            raise self._error(f"timed out: {e}", "deviceOffline") from e
        except OSError as e:
            self.close()
            raise self._error(e) from e

    def _read_frame(self, sock: socket.socket) -> Frame:
        while not self._pending:
            chunk = sock.recv(READ_SIZE)
            if not chunk:
                raise self._error("connection closed before a response arrived")
            self._pending.extend(self._decoder.feed(chunk))
        return self._pending.pop(0)

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._decoder.reset()
        self._pending.clear()


class UdpControlClient(ControlClient):
    """OPC over UDP, one datagram per frame."""

    protocol = ControlKind.UDP

    def __init__(self, host: str, port: int, timeout: float = DEFAULT_TIMEOUT):
        super().__init__(host, port, timeout)
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._socket.settimeout(timeout)

    def send(self, frame: Frame, expect_response: bool = False) -> Optional[Frame]:
        try:
            self._socket.sendto(frame.encode(), (self.host, self.port))
            if not expect_response:
                return None
            data, _ = self._socket.recvfrom(4 + 0xFFFF)
        except socket.timeout as e:
            raise self._error(f"no response within {self.timeout}s", "deviceOffline") from e
        except OSError as e:
            raise self._error(e) from e

        try:
            return decode(data)
        except MalformedFrameError as e:
            raise self._error(e.technical_message) from e

    def close(self) -> None:
        self._socket.close()


class HttpControlClient(ControlClient):
    """
    OPC over HTTP.

    Only set-pixel-colors (POST) and get-pixel-colors queries (GET) have an
    HTTP mapping; other frames raise UnsupportedCommandError.
    """

    protocol = ControlKind.HTTP

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__(host, port, timeout)
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=f"http://{host}:{port}", timeout=timeout)

    def send(self, frame: Frame, expect_response: bool = False) -> Optional[Frame]:
        if frame.command == OpcCommand.SET_PIXEL_COLORS:
            self._request(
                "POST",
                f"/{frame.channel}",
                content=base64.b64encode(frame.data),
                headers={"Content-Type": "application/octet-stream"},
            )
            return None

        if frame.is_sysex and parse_sysex(frame.data).is_get_pixel_colors:
            response = self._request("GET", f"/{frame.channel}")
            try:
                return decode(base64.b64decode(response.text, validate=True))
            except (binascii.Error, MalformedFrameError) as e:
                raise self._error(f"invalid response body: {e}") from e

        raise UnsupportedCommandError(
            frame.command, channel=frame.channel, detail="no HTTP mapping for this frame"
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise self._error(f"timed out: {e}", "deviceOffline") from e
        except httpx.HTTPError as e:
            raise self._error(e) from e

        if response.status_code == 404:
            raise self._error(f"{method} {path}: {response.text}", "deviceNotFound")
        if response.is_error:
            raise self._error(f"{method} {path}: HTTP {response.status_code} {response.text}")
        logger.debug(f"HTTP {method} {path}: {response.status_code}")
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


_CLIENT_TYPES: dict[ControlKind, type[ControlClient]] = {
    ControlKind.TCP: TcpControlClient,
    ControlKind.UDP: UdpControlClient,
    ControlKind.HTTP: HttpControlClient,
}


def create_client(kind: ControlKind, host: str, port: int, timeout: float = DEFAULT_TIMEOUT) -> ControlClient:
    """Build the client for a control protocol."""
    try:
        client_type = _CLIENT_TYPES[ControlKind(kind)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unsupported control protocol: {kind}") from e
    return client_type(host, port, timeout)
