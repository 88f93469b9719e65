"""Open Pixel Control message codec."""

from .decoder import FrameDecoder
from .frame import BROADCAST_CHANNEL, HEADER_SIZE, MAX_DATA_LENGTH, Frame, OpcCommand, decode, encode
from .sysex import (
    COLOR_CORRECTION,
    GET_PIXEL_COLORS,
    SYSTEM_ID_APPLICATION,
    SYSTEM_ID_FADECANDY,
    SysExMessage,
    Whitepoint,
    color_correction_frame,
    decode_color_correction,
    encode_color_correction,
    get_pixel_colors_query,
    get_pixel_colors_response,
    parse_sysex,
)

__all__ = [
    "BROADCAST_CHANNEL",
    "COLOR_CORRECTION",
    "Frame",
    "FrameDecoder",
    "GET_PIXEL_COLORS",
    "HEADER_SIZE",
    "MAX_DATA_LENGTH",
    "OpcCommand",
    "SYSTEM_ID_APPLICATION",
    "SYSTEM_ID_FADECANDY",
    "SysExMessage",
    "Whitepoint",
    "color_correction_frame",
    "decode",
    "decode_color_correction",
    "encode",
    "encode_color_correction",
    "get_pixel_colors_query",
    "get_pixel_colors_response",
    "parse_sysex",
]
