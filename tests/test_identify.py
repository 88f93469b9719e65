"""Tests for device identification and proxy sub-devices."""

import pytest

from fakecandy.controller import expand_sub_devices, identify, reachable_devices
from fakecandy.models import ControlKind, ControlTarget


class TestIdentify:
    """Test IDENTIFY results."""

    @pytest.mark.unit
    def test_single_channel_device(self, single_record):
        result = identify(single_record)

        assert not result.is_proxy
        assert result.verification_id == "strand1"
        assert result.to_payload() == {
            "id": "strand1",
            "deviceInfo": {
                "manufacturer": "fakecandy corp",
                "model": "fakecandy",
                "hwVersion": "evt-1",
                "swVersion": "v1-beta",
            },
            "verificationId": "strand1",
        }

    @pytest.mark.unit
    def test_proxy(self, record):
        result = identify(record)
        payload = result.to_payload()

        assert result.is_proxy
        assert payload["isProxy"] is True
        assert payload["isLocalOnly"] is True
        assert "verificationId" not in payload


class TestSubDevices:
    """Test proxy expansion."""

    @pytest.mark.unit
    def test_expand_proxy(self, record):
        targets = expand_sub_devices(record, "10.0.0.5", 7890, ControlKind.UDP, leds=8)

        assert [t.id for t in targets] == ["dev1-1", "dev1-2"]
        assert [t.channel for t in targets] == [1, 2]
        assert all(t.proxy == "dev1" for t in targets)
        assert all(t.control_protocol == ControlKind.UDP for t in targets)

    @pytest.mark.unit
    def test_expand_single(self, single_record):
        targets = expand_sub_devices(single_record, "10.0.0.5", 7890)

        assert len(targets) == 1
        assert targets[0].id == "strand1"
        assert targets[0].proxy is None

    @pytest.mark.unit
    def test_reachable_devices(self, record):
        candidates = expand_sub_devices(record, "10.0.0.5", 7890) + [
            ControlTarget(id="other-1", channel=1, proxy="other"),
            ControlTarget(id="lamp", channel=1),
        ]

        assert reachable_devices("dev1", candidates) == ["dev1-1", "dev1-2"]

    @pytest.mark.unit
    def test_reachable_devices_none(self, record):
        assert reachable_devices("dev1", [ControlTarget(id="lamp", channel=1)]) == []
