"""Pytest fixtures for tests."""

import pytest

from fakecandy.device import OpcHandler, StrandStore
from fakecandy.models import AppConfig, ControlConfig, DeviceConfig, DiscoveryConfig, DiscoveryRecord


@pytest.fixture
def record():
    """Two-channel proxy record used across discovery tests."""
    return DiscoveryRecord(id="dev1", model="m", hw_rev="r1", fw_rev="f1", channels=(1, 2))


@pytest.fixture
def single_record():
    """Single-channel device record."""
    return DiscoveryRecord(id="strand1", model="fakecandy", hw_rev="evt-1", fw_rev="v1-beta", channels=(1,))


@pytest.fixture
def store():
    """Strand store with channels 1 and 2, 8 LEDs each."""
    return StrandStore([1, 2], led_count=8)


@pytest.fixture
def handler(store):
    """OPC handler bound to the store fixture."""
    return OpcHandler(store)


@pytest.fixture
def app_config():
    """Config for a local device on ephemeral ports with no console output."""
    return AppConfig(
        device=DeviceConfig(device_id="strand1", channels=[1], led_count=8),
        control=ControlConfig(host="127.0.0.1", port=0, read_timeout=5.0),
        discovery=DiscoveryConfig(udp_port=0),
        display=False,
    )
