"""Fulfil EXECUTE and QUERY requests locally over the control transports."""

import logging
from collections.abc import Callable, Iterable
from threading import Lock

from fakecandy.exceptions import ControlTransportError, MalformedFrameError, ProtocolError
from fakecandy.models import (
    Color,
    CommandResult,
    CommandStatus,
    ControlKind,
    ControlTarget,
    LightState,
    LogicalCommand,
)
from fakecandy.opc import get_pixel_colors_query

from .clients import DEFAULT_TIMEOUT, ControlClient, create_client
from .translator import translate

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ControlKind, str, int, float], ControlClient]


class LocalController:
    """
    Drives devices directly, without a cloud round trip.

    One client is kept per (protocol, host, port) and reused across
    requests. Nothing is retried; failures become ERROR results.

    Example:
        ```python
        with LocalController() as controller:
            results = controller.execute(ColorAbsolute(spectrum_rgb=0xFF00FF), targets)
            state = controller.query(targets[0])
        ```
    """

    def __init__(self, client_factory: ClientFactory = create_client, timeout: float = DEFAULT_TIMEOUT):
        self._client_factory = client_factory
        self._timeout = timeout
        self._clients: dict[tuple[ControlKind, str, int], ControlClient] = {}
        self._lock = Lock()

    def _client_for(self, target: ControlTarget) -> ControlClient:
        key = (target.control_protocol, target.host, target.port)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = self._client_factory(target.control_protocol, target.host, target.port, self._timeout)
                self._clients[key] = client
            return client

    def _discard_client(self, target: ControlTarget) -> None:
        key = (target.control_protocol, target.host, target.port)
        with self._lock:
            client = self._clients.pop(key, None)
        if client is not None:
            client.close()

    def execute(self, command: LogicalCommand, targets: Iterable[ControlTarget]) -> list[CommandResult]:
        """
        Send one logical command to every target.

        Returns:
            One CommandResult per target, in order. Successful results carry
            the command params plus `online: True` as state.
        """
        results = []
        for target in targets:
            frame = translate(command, target.channel, target.leds)
            try:
                self._client_for(target).send(frame)
            except ControlTransportError as e:
                logger.error(f"{command.command_name} failed for {target.id}: {e.technical_message}")
                self._discard_client(target)
                results.append(CommandResult(ids=[target.id], status=CommandStatus.ERROR, error_code=e.error_code))
                continue
            except ProtocolError as e:
                logger.warning(f"{command.command_name} not supported for {target.id}: {e.technical_message}")
                results.append(
                    CommandResult(ids=[target.id], status=CommandStatus.ERROR, error_code="functionNotSupported")
                )
                continue

            states = {**command.to_state(), "online": True}
            results.append(CommandResult(ids=[target.id], status=CommandStatus.SUCCESS, states=states))
        return results

    def query(self, target: ControlTarget) -> LightState:
        """
        Read the target's current color (its first pixel).

        Raises:
            ControlTransportError: If the device cannot be reached
            MalformedFrameError: If the response is not a pixel buffer for
                the queried channel
        """
        try:
            response = self._client_for(target).send(get_pixel_colors_query(target.channel), expect_response=True)
        except ControlTransportError:
            self._discard_client(target)
            raise

        if not response.is_sysex or response.channel != target.channel:
            raise MalformedFrameError(
                f"expected SYSEX response on channel {target.channel}, "
                f"got command 0x{response.command:02x} on channel {response.channel}",
                response.encode(),
            )
        if response.length < 3:
            raise MalformedFrameError(f"response holds {response.length} bytes, need one pixel", response.encode())

        first = Color(r=response.data[0], g=response.data[1], b=response.data[2])
        return LightState(id=target.id, online=True, spectrum_rgb=first.to_spectrum_rgb())

    def close(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
