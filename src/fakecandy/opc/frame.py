"""
Open Pixel Control frame encoding and decoding.

OPC Frames
==========

Every OPC message is a 4-byte header followed by a payload::

    [channel] [command] [length hi] [length lo] [data ...]
     uint8     uint8     └──── uint16 BE ────┘   length bytes

Commands
--------

- **0x00** set-pixel-colors: data is a run of 3-byte pixels (R, G, B)
- **0xFF** SYSEX: data starts with a 2-byte system id and a 2-byte
  sub-command (see `fakecandy.opc.sysex`)

Channel 0 is reserved for broadcast. It is not implemented by the device
and is handled like any other channel that was not configured.

Example
-------

Two red pixels on channel 1::

    encode(1, 0x00, bytes([255, 0, 0, 255, 0, 0]))
    -> 01 00 00 06 ff 00 00 ff 00 00

This module is pure: no I/O, no state. Stream re-segmentation for TCP
lives in `fakecandy.opc.decoder`.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum

from fakecandy.exceptions import MalformedFrameError

HEADER = struct.Struct(">BBH")
HEADER_SIZE = HEADER.size
MAX_DATA_LENGTH = 0xFFFF
BROADCAST_CHANNEL = 0


class OpcCommand(IntEnum):
    """Top-level OPC commands understood by the device."""

    SET_PIXEL_COLORS = 0x00
    SYSEX = 0xFF


@dataclass(frozen=True, slots=True)
class Frame:
    """One decoded OPC message."""

    channel: int
    command: int
    data: bytes = b""

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def is_sysex(self) -> bool:
        return self.command == OpcCommand.SYSEX

    def encode(self) -> bytes:
        """Serialize header and payload."""
        return encode(self.channel, self.command, self.data)


def encode(channel: int, command: int, data: bytes = b"") -> bytes:
    """
    Build the wire bytes for one OPC message.

    Args:
        channel: Channel number (0-255)
        command: Command byte (0-255)
        data: Payload, at most 65535 bytes

    Raises:
        ValueError: If a header field is out of range
    """
    if not 0 <= channel <= 0xFF:
        raise ValueError(f"channel out of range (0-255): {channel}")
    if not 0 <= command <= 0xFF:
        raise ValueError(f"command out of range (0-255): {command}")
    if len(data) > MAX_DATA_LENGTH:
        raise ValueError(f"payload too long: {len(data)} bytes (max {MAX_DATA_LENGTH})")
    return HEADER.pack(channel, command, len(data)) + bytes(data)


def decode_header(data: bytes) -> tuple[int, int, int]:
    """
    Read (channel, command, length) from the first 4 bytes.

    Raises:
        MalformedFrameError: If fewer than 4 bytes are available
    """
    if len(data) < HEADER_SIZE:
        raise MalformedFrameError(
            f"need {HEADER_SIZE} header bytes, got {len(data)}", bytes(data)
        )
    return HEADER.unpack_from(data)


def decode(data: bytes) -> Frame:
    """
    Decode exactly one OPC message.

    Used where the transport delivers whole messages (UDP datagrams,
    controller responses).

    Raises:
        MalformedFrameError: If the header is truncated or the length field
            does not match the payload that follows it
    """
    channel, command, length = decode_header(data)
    payload = bytes(data[HEADER_SIZE:])
    if length != len(payload):
        raise MalformedFrameError(
            f"length field says {length} bytes, payload has {len(payload)}", bytes(data)
        )
    return Frame(channel=channel, command=command, data=payload)
