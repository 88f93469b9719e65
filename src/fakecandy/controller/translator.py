"""Translate logical light commands into OPC frames."""

from collections.abc import Mapping

from pydantic import ValidationError

from fakecandy.exceptions import UnsupportedCommandError
from fakecandy.models import COMMAND_TYPES, BrightnessAbsolute, Color, ColorAbsolute, LogicalCommand, OnOff
from fakecandy.opc import Frame, OpcCommand, color_correction_frame


def parse_command(name: str, params: Mapping) -> LogicalCommand:
    """
    Build a logical command from its Smart Home name and params.

    Accepts the Smart Home params shape, e.g.
    ``{"color": {"spectrumRGB": 16711935}}`` for ColorAbsolute.

    Raises:
        UnsupportedCommandError: If the name is unknown or params are invalid
    """
    command_type = COMMAND_TYPES.get(name)
    if command_type is None:
        raise UnsupportedCommandError(name)

    fields = dict(params)
    if command_type is ColorAbsolute and isinstance(fields.get("color"), Mapping):
        color = fields.pop("color")
        fields["spectrum_rgb"] = color.get("spectrumRGB", color.get("spectrum_rgb"))
        if "name" in color:
            fields["name"] = color["name"]

    try:
        return command_type(**fields)
    except ValidationError as e:
        raise UnsupportedCommandError(name, detail=f"invalid params: {e}") from e


def translate(command: LogicalCommand, channel: int, led_count: int) -> Frame:
    """
    Encode a logical command for one channel.

    OnOff and BrightnessAbsolute become color correction SYSEX frames
    (the whitepoint scales every pixel); ColorAbsolute fills the strand.
    """
    if isinstance(command, OnOff):
        level = 1.0 if command.on else 0.0
        return color_correction_frame(channel, [level] * 3)
    if isinstance(command, BrightnessAbsolute):
        return color_correction_frame(channel, [command.brightness / 100.0] * 3)
    if isinstance(command, ColorAbsolute):
        pixel = Color.from_spectrum_rgb(command.spectrum_rgb).to_bytes()
        return Frame(channel=channel, command=OpcCommand.SET_PIXEL_COLORS, data=pixel * led_count)
    raise UnsupportedCommandError(type(command).__name__, channel=channel)
