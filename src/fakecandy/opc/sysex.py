"""
SYSEX sub-encodings carried by OPC command 0xFF.

SYSEX Payload
=============

The data of a SYSEX frame starts with two big-endian 16-bit fields::

    [system id hi] [system id lo] [command hi] [command lo] [body ...]

Supported messages
------------------

| System id | Command | Meaning                                          |
|-----------|---------|--------------------------------------------------|
| 0x0001    | 0x0001  | Set global color correction (Fadecandy), JSON    |
| 0x0003    | 0x0001  | Get pixel colors query, empty body               |

Color correction body is compact UTF-8 JSON::

    {"whitepoint":[0.5,0.5,0.5]}

The get-pixel-colors response is a SYSEX frame on the queried channel
whose data is the raw pixel buffer, without a system id prefix.
"""

import json
import math
import struct
from typing import NamedTuple

from fakecandy.exceptions import MalformedFrameError

from .frame import Frame, OpcCommand

SYSEX_HEADER = struct.Struct(">HH")

SYSTEM_ID_FADECANDY = 0x0001
SYSTEM_ID_APPLICATION = 0x0003

COLOR_CORRECTION = 0x0001
GET_PIXEL_COLORS = 0x0001

Whitepoint = tuple[float, float, float]


class SysExMessage(NamedTuple):
    """Parsed SYSEX payload."""

    system_id: int
    command: int
    body: bytes

    @property
    def is_color_correction(self) -> bool:
        return self.system_id == SYSTEM_ID_FADECANDY and self.command == COLOR_CORRECTION

    @property
    def is_get_pixel_colors(self) -> bool:
        return self.system_id == SYSTEM_ID_APPLICATION and self.command == GET_PIXEL_COLORS


def encode_sysex(system_id: int, command: int, body: bytes = b"") -> bytes:
    """Prefix a SYSEX body with its system id and sub-command."""
    return SYSEX_HEADER.pack(system_id, command) + bytes(body)


def parse_sysex(data: bytes) -> SysExMessage:
    """
    Split SYSEX frame data into system id, sub-command and body.

    Raises:
        MalformedFrameError: If fewer than 4 bytes are available
    """
    if len(data) < SYSEX_HEADER.size:
        raise MalformedFrameError(
            f"SYSEX data needs {SYSEX_HEADER.size} bytes, got {len(data)}", bytes(data)
        )
    system_id, command = SYSEX_HEADER.unpack_from(data)
    return SysExMessage(system_id, command, bytes(data[SYSEX_HEADER.size:]))


def encode_color_correction(whitepoint) -> bytes:
    """
    Serialize a whitepoint as the Fadecandy color correction JSON body.

    Args:
        whitepoint: Three channel scale factors in [0, 1]

    Raises:
        ValueError: If the whitepoint does not have three values in [0, 1]
    """
    values = [float(v) for v in whitepoint]
    if len(values) != 3 or not all(0.0 <= v <= 1.0 for v in values):
        raise ValueError(f"whitepoint must be three values in [0, 1], got {list(whitepoint)}")
    return json.dumps({"whitepoint": values}, separators=(",", ":")).encode("utf-8")


def decode_color_correction(body: bytes) -> Whitepoint:
    """
    Read the whitepoint out of a color correction JSON body.

    Raises:
        MalformedFrameError: If the body is not valid JSON or the whitepoint
            is not three finite numbers in [0, 1]
    """
    try:
        document = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedFrameError(f"color correction body is not JSON ({e})", bytes(body)) from e

    whitepoint = document.get("whitepoint") if isinstance(document, dict) else None
    if not isinstance(whitepoint, list) or len(whitepoint) != 3:
        raise MalformedFrameError("color correction needs a 3-element whitepoint", bytes(body))

    values = []
    for value in whitepoint:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise MalformedFrameError(f"whitepoint value is not a number: {value!r}", bytes(body))
        if not 0.0 <= value <= 1.0:
            raise MalformedFrameError(f"whitepoint value out of range [0, 1]: {value}", bytes(body))
        values.append(float(value))

    return (values[0], values[1], values[2])


def color_correction_frame(channel: int, whitepoint) -> Frame:
    """Build the SYSEX frame that sets the global whitepoint."""
    data = encode_sysex(SYSTEM_ID_FADECANDY, COLOR_CORRECTION, encode_color_correction(whitepoint))
    return Frame(channel=channel, command=OpcCommand.SYSEX, data=data)


def get_pixel_colors_query(channel: int) -> Frame:
    """Build the query asking the device for a channel's pixel buffer."""
    return Frame(
        channel=channel,
        command=OpcCommand.SYSEX,
        data=encode_sysex(SYSTEM_ID_APPLICATION, GET_PIXEL_COLORS),
    )


def get_pixel_colors_response(channel: int, buffer: bytes) -> Frame:
    """Build the device's answer to a get-pixel-colors query."""
    return Frame(channel=channel, command=OpcCommand.SYSEX, data=bytes(buffer))
