"""Shared pieces of the discovery responders."""

import logging
import socket
from abc import ABC, abstractmethod
from collections.abc import Mapping

from pydantic import ValidationError

from fakecandy.exceptions import MissingDiscoveryDataError
from fakecandy.models import DiscoveryRecord
from fakecandy.protocols import DiscoveryEvent, DiscoveryObserver
from fakecandy.utils import ObserverManager

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("id", "model", "hw_rev", "fw_rev", "channels")


def route_local_ip(peer_ip: str = "8.8.8.8") -> str:
    """
    IPv4 address of the interface used to reach `peer_ip`.

    No packet is sent; connecting a UDP socket only selects a route.
    Falls back to loopback when there is no route.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect((peer_ip, 80))
        return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"
    finally:
        s.close()


def record_from_mapping(mapping: Mapping, encoding: str) -> DiscoveryRecord:
    """
    Build a DiscoveryRecord from a decoded payload.

    Raises:
        MissingDiscoveryDataError: If fields are absent or fail validation
    """
    missing = [name for name in RECORD_FIELDS if mapping.get(name) is None]
    if missing:
        raise MissingDiscoveryDataError(missing, encoding)

    try:
        return DiscoveryRecord(**{name: mapping[name] for name in RECORD_FIELDS})
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")}) or ["record"]
        raise MissingDiscoveryDataError(fields, encoding, detail=str(e)) from e


class DiscoveryResponder(ABC):
    """
    Advertises one DiscoveryRecord until stopped.

    Observers are told when the device is probed or advertised.
    """

    protocol_name = "discovery"

    def __init__(self, record: DiscoveryRecord):
        self.record = record
        self._running = False
        self._observers = ObserverManager[DiscoveryObserver](observer_type_name="discovery")

    @abstractmethod
    def _start(self) -> None:
        pass

    @abstractmethod
    def _stop(self) -> None:
        pass

    @property
    def is_running(self) -> bool:
        return self._running

    def register_observer(self, observer: DiscoveryObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: DiscoveryObserver) -> None:
        self._observers.unregister(observer)

    def _notify(self, event: DiscoveryEvent, peer: str) -> None:
        self._observers.notify("on_discovery_event", event, peer)

    def start(self) -> None:
        if self._running:
            logger.warning(f"{self.protocol_name} discovery is already running")
            return
        self._start()
        self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._stop()
        logger.info(f"{self.protocol_name} discovery stopped")

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
        return False
