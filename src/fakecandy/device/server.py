"""Device process: strand store, one control listener, one discovery responder."""

import logging
import threading
from typing import Optional

from fakecandy.discovery import DiscoveryResponder, create_discovery_responder
from fakecandy.exceptions import ErrorContext
from fakecandy.models import AppConfig, DiscoveryRecord
from fakecandy.protocols import DiscoveryEvent
from fakecandy.transports import ControlServer, create_control_server

from .handler import OpcHandler
from .renderer import ConsoleStrandRenderer
from .strand import StrandStore

logger = logging.getLogger(__name__)


class DeviceServer:
    """
    Orchestrates a simulated device from an AppConfig.

    Start order is store, control listener, then discovery, so a
    controller that discovers the device can reach it immediately.
    Stop runs in reverse.

    Example:
        ```python
        with DeviceServer(config) as device:
            device.wait()
        ```
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.record: DiscoveryRecord = config.device.to_discovery_record()
        self.store = StrandStore(config.device.channels, config.device.led_count)
        self.handler = OpcHandler(self.store)
        self.renderer: Optional[ConsoleStrandRenderer] = None
        if config.display:
            self.renderer = ConsoleStrandRenderer(self.store, config.device.led_char)
            self.store.register_observer(self.renderer)

        self.control: ControlServer = create_control_server(config.control, self.handler)
        self.discovery: DiscoveryResponder = create_discovery_responder(
            config.discovery, self.record, config.control.port
        )
        self.discovery.register_observer(self)
        self._stopped = threading.Event()

    def on_discovery_event(self, event: DiscoveryEvent, peer: str) -> None:
        logger.info(f"Discovery {event.value}: {peer}")

    def start(self) -> None:
        """Start listening and advertising; stops anything started on failure."""
        self._stopped.clear()
        with ErrorContext(f"start {self.config.control.protocol.value} control", logger):
            self.control.start()
        try:
            with ErrorContext(f"start {self.config.discovery.protocol.value} discovery", logger):
                self.discovery.start()
        except BaseException:
            self.control.stop()
            raise

        logger.info(
            f"Device {self.record.id} ready: channels {list(self.record.channels)}, "
            f"{self.config.device.led_count} LEDs each"
        )
        if self.renderer is not None:
            self.renderer.draw()

    def stop(self) -> None:
        try:
            self.discovery.stop()
        finally:
            self.control.stop()
            self._stopped.set()
        logger.info(f"Device {self.record.id} stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until `stop()` is called (or timeout). Returns True if stopped."""
        return self._stopped.wait(timeout)

    def run(self) -> None:
        """Start and serve until interrupted."""
        self.start()
        try:
            while not self.wait(0.5):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            self.stop()

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
        return False
