"""Unit tests for Pydantic models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from fakecandy.models import (
    AppConfig,
    BrightnessAbsolute,
    Color,
    ColorAbsolute,
    ControlConfig,
    ControlKind,
    ControlTarget,
    DeviceConfig,
    DiscoveryConfig,
    DiscoveryRecord,
    MdnsScanData,
    ScanData,
    UdpScanData,
    UpnpScanData,
)


class TestColor:
    """Test Color model."""

    @pytest.mark.unit
    def test_rgb_range_validation(self):
        """Test that RGB values must be 0-255."""
        with pytest.raises(ValueError):
            Color(r=256, g=0, b=0)

        with pytest.raises(ValueError):
            Color(r=0, g=-1, b=0)

    @pytest.mark.unit
    def test_spectrum_rgb(self):
        color = Color.from_spectrum_rgb(0xFF8001)
        assert color.to_rgb_tuple() == (255, 128, 1)
        assert color.to_spectrum_rgb() == 0xFF8001
        assert color.to_hex() == "#FF8001"

    @pytest.mark.unit
    def test_spectrum_rgb_out_of_range(self):
        with pytest.raises(ValueError):
            Color.from_spectrum_rgb(0x1000000)

    @pytest.mark.unit
    def test_to_bytes(self):
        assert Color(r=1, g=2, b=3).to_bytes() == b"\x01\x02\x03"
        assert Color.white().to_bytes() == b"\xff\xff\xff"
        assert Color.off().to_bytes() == b"\x00\x00\x00"


class TestDiscoveryRecord:
    """Test DiscoveryRecord model."""

    @pytest.mark.unit
    def test_proxy(self, record, single_record):
        assert record.is_proxy
        assert not single_record.is_proxy
        assert record.sub_device_id(2) == "dev1-2"

    @pytest.mark.unit
    def test_requires_channel(self):
        with pytest.raises(ValidationError):
            DiscoveryRecord(id="d", model="m", hw_rev="r", fw_rev="f", channels=())

    @pytest.mark.unit
    def test_id_without_whitespace(self):
        with pytest.raises(ValidationError):
            DiscoveryRecord(id="dev 1", model="m", hw_rev="r", fw_rev="f", channels=(1,))

    @pytest.mark.unit
    def test_frozen(self, record):
        with pytest.raises(ValidationError):
            record.id = "other"

    @pytest.mark.unit
    def test_payload(self, record):
        assert record.to_payload()["channels"] == [1, 2]


class TestCommands:
    """Test logical command models."""

    @pytest.mark.unit
    def test_brightness_range(self):
        BrightnessAbsolute(brightness=0)
        BrightnessAbsolute(brightness=100)
        with pytest.raises(ValidationError):
            BrightnessAbsolute(brightness=101)

    @pytest.mark.unit
    def test_color_state(self):
        assert ColorAbsolute(spectrum_rgb=255).to_state() == {"color": {"spectrumRGB": 255}}

    @pytest.mark.unit
    def test_color_range(self):
        with pytest.raises(ValidationError):
            ColorAbsolute(spectrum_rgb=0x1000000)


class TestScanData:
    """Test the scan data union."""

    @pytest.mark.unit
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(ScanData)

        assert isinstance(adapter.validate_python({"kind": "udp", "data": b"\xa0"}), UdpScanData)
        assert isinstance(
            adapter.validate_python({"kind": "mdns", "service_name": "_s._tcp.local.", "txt": {}}),
            MdnsScanData,
        )
        assert isinstance(adapter.validate_python({"kind": "upnp", "location": "/d.xml"}), UpnpScanData)

    @pytest.mark.unit
    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            TypeAdapter(ScanData).validate_python({"kind": "bluetooth"})

    @pytest.mark.unit
    def test_description_url(self):
        assert UpnpScanData(location="http://a:1/d.xml").description_url == "http://a:1/d.xml"
        assert UpnpScanData(location="/d.xml", host="a", port=2).description_url == "http://a:2/d.xml"


class TestConfig:
    """Test configuration models."""

    @pytest.mark.unit
    def test_defaults(self):
        config = AppConfig(device=DeviceConfig(device_id="strand1"))

        assert config.device.channels == [1]
        assert config.device.led_count == 16
        assert config.control.protocol == ControlKind.TCP
        assert config.control.port == 7890
        assert config.discovery.udp_port == 3311
        assert config.discovery.udp_packet_bytes == b"\xa5\xa5\xa5\xa5"
        assert config.display

    @pytest.mark.unit
    def test_to_discovery_record(self):
        device = DeviceConfig(device_id="proxy1", channels=[2, 1])
        assert device.to_discovery_record() == DiscoveryRecord(
            id="proxy1", model="fakecandy", hw_rev="evt-1", fw_rev="v1-beta", channels=(2, 1)
        )

    @pytest.mark.unit
    @pytest.mark.parametrize("channels", [[], [0], [256], [1, 1]])
    def test_invalid_channels(self, channels):
        with pytest.raises(ValidationError):
            DeviceConfig(device_id="d", channels=channels)

    @pytest.mark.unit
    def test_strand_fits_one_frame(self):
        DeviceConfig(device_id="d", led_count=21845)
        with pytest.raises(ValidationError):
            DeviceConfig(device_id="d", led_count=21846)

    @pytest.mark.unit
    def test_udp_strand_fits_one_datagram(self):
        device = DeviceConfig(device_id="d", led_count=21835)
        AppConfig(device=device)
        AppConfig(device=device.model_copy(update={"led_count": 21834}), control=ControlConfig(protocol="UDP"))
        with pytest.raises(ValidationError, match="UDP"):
            AppConfig(device=device, control=ControlConfig(protocol="UDP"))

    @pytest.mark.unit
    @pytest.mark.parametrize("packet", ["", "xyz", "A5A"])
    def test_invalid_packet(self, packet):
        with pytest.raises(ValidationError):
            DiscoveryConfig(udp_packet=packet)

    @pytest.mark.unit
    def test_description_path(self):
        with pytest.raises(ValidationError):
            DiscoveryConfig(upnp_description_path="device.xml")

    @pytest.mark.unit
    @pytest.mark.parametrize("device_id", ["", "dev 1", " dev1", "dev1\n"])
    def test_device_id_is_one_token(self, device_id):
        with pytest.raises(ValidationError):
            DeviceConfig(device_id=device_id)

    @pytest.mark.unit
    def test_device_id_may_hold_punctuation(self):
        assert DeviceConfig(device_id="lamp:kitchen").to_discovery_record().id == "lamp:kitchen"


class TestControlTarget:
    """Test controller-side target bounds."""

    @pytest.mark.unit
    def test_full_strand_must_fit_one_frame(self):
        ControlTarget(id="t", channel=1, leds=21845)
        with pytest.raises(ValidationError):
            ControlTarget(id="t", channel=1, leds=30000)

    @pytest.mark.unit
    @pytest.mark.parametrize("protocol, leds", [("TCP", 21845), ("HTTP", 21845), ("UDP", 21834)])
    def test_largest_strand_per_protocol(self, protocol, leds):
        assert ControlTarget(id="t", channel=1, leds=leds, control_protocol=protocol).leds == leds

    @pytest.mark.unit
    def test_udp_limit(self):
        with pytest.raises(ValidationError, match="UDP"):
            ControlTarget(id="t", channel=1, leds=21835, control_protocol=ControlKind.UDP)
