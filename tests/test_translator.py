"""Tests for logical command translation."""

import pytest

from fakecandy.controller import parse_command, translate
from fakecandy.exceptions import UnsupportedCommandError
from fakecandy.models import BrightnessAbsolute, ColorAbsolute, OnOff
from fakecandy.opc import OpcCommand, decode_color_correction, parse_sysex


class TestTranslate:
    """Test command to frame translation."""

    @pytest.mark.unit
    def test_color_fills_strand(self):
        frame = translate(ColorAbsolute(spectrum_rgb=0xFF00FF), channel=1, led_count=8)

        assert frame.channel == 1
        assert frame.command == OpcCommand.SET_PIXEL_COLORS
        assert frame.data == bytes.fromhex("ff00ff") * 8

    @pytest.mark.unit
    def test_brightness_is_whitepoint(self):
        """BrightnessAbsolute(50) scales each channel by exactly 0.5."""
        frame = translate(BrightnessAbsolute(brightness=50), channel=2, led_count=8)
        message = parse_sysex(frame.data)

        assert frame.channel == 2
        assert message.is_color_correction
        assert decode_color_correction(message.body) == (0.5, 0.5, 0.5)

    @pytest.mark.unit
    @pytest.mark.parametrize("on,level", [(True, 1.0), (False, 0.0)])
    def test_on_off_is_whitepoint(self, on, level):
        frame = translate(OnOff(on=on), channel=1, led_count=8)
        whitepoint = decode_color_correction(parse_sysex(frame.data).body)
        assert whitepoint == (level, level, level)


class TestParseCommand:
    """Test Smart Home command parsing."""

    @pytest.mark.unit
    def test_on_off(self):
        assert parse_command("action.devices.commands.OnOff", {"on": False}) == OnOff(on=False)

    @pytest.mark.unit
    def test_color_params_shape(self):
        command = parse_command(
            "action.devices.commands.ColorAbsolute",
            {"color": {"spectrumRGB": 16711935, "name": "magenta"}},
        )
        assert command == ColorAbsolute(spectrum_rgb=0xFF00FF, name="magenta")
        assert command.to_state() == {"color": {"spectrumRGB": 16711935, "name": "magenta"}}

    @pytest.mark.unit
    def test_unknown_command(self):
        with pytest.raises(UnsupportedCommandError):
            parse_command("action.devices.commands.ThermostatSetMode", {})

    @pytest.mark.unit
    def test_invalid_params(self):
        with pytest.raises(UnsupportedCommandError) as exc_info:
            parse_command("action.devices.commands.BrightnessAbsolute", {"brightness": 150})
        assert "invalid params" in exc_info.value.technical_message
