"""Tests for SYSEX sub-encodings."""

import json

import pytest

from fakecandy.exceptions import MalformedFrameError
from fakecandy.opc import (
    COLOR_CORRECTION,
    GET_PIXEL_COLORS,
    SYSTEM_ID_APPLICATION,
    SYSTEM_ID_FADECANDY,
    OpcCommand,
    color_correction_frame,
    decode_color_correction,
    encode_color_correction,
    get_pixel_colors_query,
    get_pixel_colors_response,
    parse_sysex,
)


class TestGetPixelColors:
    """Test the get-pixel-colors query and response."""

    @pytest.mark.unit
    def test_query_bytes(self):
        """Query is SYSEX with system id 0x0003, command 0x0001 and no body."""
        frame = get_pixel_colors_query(1)
        assert frame.encode() == bytes([1, 0xFF, 0, 4, 0x00, 0x03, 0x00, 0x01])

    @pytest.mark.unit
    def test_query_parses(self):
        message = parse_sysex(get_pixel_colors_query(4).data)
        assert message.system_id == SYSTEM_ID_APPLICATION
        assert message.command == GET_PIXEL_COLORS
        assert message.body == b""
        assert message.is_get_pixel_colors
        assert not message.is_color_correction

    @pytest.mark.unit
    def test_response_is_raw_buffer(self):
        """Response data is the pixel buffer without a system id prefix."""
        buffer = bytes.fromhex("ff00ff") * 8
        frame = get_pixel_colors_response(1, buffer)
        assert frame.command == OpcCommand.SYSEX
        assert frame.channel == 1
        assert frame.data == buffer


class TestColorCorrection:
    """Test the Fadecandy color correction message."""

    @pytest.mark.unit
    def test_body_is_compact_json(self):
        assert encode_color_correction([0.5, 0.5, 0.5]) == b'{"whitepoint":[0.5,0.5,0.5]}'

    @pytest.mark.unit
    def test_frame_header(self):
        frame = color_correction_frame(2, (1.0, 1.0, 1.0))
        message = parse_sysex(frame.data)
        assert frame.channel == 2
        assert frame.is_sysex
        assert (message.system_id, message.command) == (SYSTEM_ID_FADECANDY, COLOR_CORRECTION)
        assert json.loads(message.body) == {"whitepoint": [1.0, 1.0, 1.0]}

    @pytest.mark.unit
    def test_decode(self):
        assert decode_color_correction(b'{"whitepoint":[0.25,0.5,1]}') == (0.25, 0.5, 1.0)

    @pytest.mark.unit
    @pytest.mark.parametrize("values", [[0.5, 0.5], [1.5, 0, 0], [-0.1, 0, 0]])
    def test_encode_rejects_invalid_whitepoint(self, values):
        with pytest.raises(ValueError):
            encode_color_correction(values)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"\xff\xfe",
            b"[]",
            b'{"gamma": 2.2}',
            b'{"whitepoint": [1, 1]}',
            b'{"whitepoint": [1, 1, "x"]}',
            b'{"whitepoint": [1, 1, true]}',
            b'{"whitepoint": [1, 1, 2]}',
        ],
    )
    def test_decode_rejects_invalid_body(self, body):
        with pytest.raises(MalformedFrameError):
            decode_color_correction(body)


class TestParseSysex:
    """Test SYSEX header parsing."""

    @pytest.mark.unit
    def test_short_data(self):
        with pytest.raises(MalformedFrameError):
            parse_sysex(b"\x00\x03\x00")

    @pytest.mark.unit
    def test_unknown_message(self):
        message = parse_sysex(b"\x12\x34\x56\x78body")
        assert message.system_id == 0x1234
        assert message.command == 0x5678
        assert message.body == b"body"
        assert not message.is_get_pixel_colors
        assert not message.is_color_correction
