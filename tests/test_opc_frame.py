"""Tests for OPC frame encoding, decoding and stream re-segmentation."""

import pytest

from fakecandy.exceptions import MalformedFrameError
from fakecandy.opc import Frame, FrameDecoder, OpcCommand, decode, encode


class TestEncode:
    """Test the one-shot encoder."""

    @pytest.mark.unit
    def test_header_layout(self):
        """Channel, command and big-endian length precede the data."""
        data = bytes([255, 0, 0, 255, 0, 0])
        assert encode(1, 0x00, data) == bytes.fromhex("01000006") + data

    @pytest.mark.unit
    def test_length_is_big_endian(self):
        """Lengths above 255 use both length bytes."""
        wire = encode(7, 0x00, bytes(300))
        assert wire[:4] == bytes([7, 0, 0x01, 0x2C])
        assert len(wire) == 304

    @pytest.mark.unit
    def test_empty_payload(self):
        assert encode(0, 0xFF) == bytes([0, 0xFF, 0, 0])

    @pytest.mark.unit
    @pytest.mark.parametrize("channel,command", [(-1, 0), (256, 0), (1, -1), (1, 256)])
    def test_header_out_of_range(self, channel, command):
        with pytest.raises(ValueError):
            encode(channel, command, b"")

    @pytest.mark.unit
    def test_payload_too_long(self):
        with pytest.raises(ValueError, match="too long"):
            encode(1, 0, bytes(0x10000))

    @pytest.mark.unit
    def test_max_payload(self):
        assert len(encode(1, 0, bytes(0xFFFF))) == 4 + 0xFFFF

    @pytest.mark.unit
    def test_frame_encode_matches_function(self):
        frame = Frame(channel=3, command=OpcCommand.SYSEX, data=b"\x00\x03\x00\x01")
        assert frame.encode() == encode(3, 0xFF, b"\x00\x03\x00\x01")


class TestDecode:
    """Test the one-shot decoder."""

    @pytest.mark.unit
    @pytest.mark.parametrize("command", [OpcCommand.SET_PIXEL_COLORS, OpcCommand.SYSEX])
    def test_round_trip(self, command):
        """decode(encode(c, cmd, d)) == Frame(c, cmd, d)."""
        data = bytes(range(30))
        assert decode(encode(5, command, data)) == Frame(5, command, data)

    @pytest.mark.unit
    def test_short_header(self):
        with pytest.raises(MalformedFrameError, match="header"):
            decode(b"\x01\x00\x00")

    @pytest.mark.unit
    def test_length_longer_than_payload(self):
        with pytest.raises(MalformedFrameError):
            decode(bytes.fromhex("01000006") + b"\xff\x00\x00")

    @pytest.mark.unit
    def test_length_shorter_than_payload(self):
        with pytest.raises(MalformedFrameError):
            decode(bytes.fromhex("01000001") + b"\xff\x00\x00")

    @pytest.mark.unit
    def test_is_sysex(self):
        assert decode(bytes([1, 0xFF, 0, 0])).is_sysex
        assert not decode(bytes([1, 0x00, 0, 0])).is_sysex

    @pytest.mark.unit
    def test_error_is_recoverable(self):
        """Malformed input is a per-request error, never fatal."""
        with pytest.raises(MalformedFrameError) as exc_info:
            decode(b"")
        assert exc_info.value.recoverable


class TestFrameDecoder:
    """Test stream re-segmentation."""

    @pytest.mark.unit
    def test_split_frame(self):
        """A frame split across reads is returned once complete."""
        decoder = FrameDecoder()
        wire = encode(1, 0, b"\xff\x00\xff")

        assert decoder.feed(wire[:2]) == []
        assert decoder.pending == 2
        assert decoder.feed(wire[2:5]) == []
        assert decoder.feed(wire[5:]) == [Frame(1, 0, b"\xff\x00\xff")]
        assert decoder.pending == 0

    @pytest.mark.unit
    def test_packed_frames(self):
        """Several frames in one read come back in order."""
        decoder = FrameDecoder()
        wire = encode(1, 0, b"\x01\x02\x03") + encode(2, 0xFF, b"\x00\x03\x00\x01") + encode(3, 0)

        frames = decoder.feed(wire)

        assert [f.channel for f in frames] == [1, 2, 3]
        assert frames[1].data == b"\x00\x03\x00\x01"
        assert frames[2].data == b""

    @pytest.mark.unit
    def test_byte_at_a_time(self):
        decoder = FrameDecoder()
        wire = encode(9, 0, bytes(range(12))) * 2
        frames = []
        for byte in wire:
            frames.extend(decoder.feed(bytes([byte])))
        assert frames == [Frame(9, 0, bytes(range(12)))] * 2

    @pytest.mark.unit
    def test_close_clean(self):
        decoder = FrameDecoder()
        decoder.feed(encode(1, 0, b"\x00\x00\x00"))
        decoder.close()

    @pytest.mark.unit
    def test_close_with_partial_frame(self):
        """Leftover bytes are reported and dropped."""
        decoder = FrameDecoder()
        decoder.feed(bytes.fromhex("01000006") + b"\xff")

        with pytest.raises(MalformedFrameError, match="inside a frame"):
            decoder.close()
        assert decoder.pending == 0

    @pytest.mark.unit
    def test_close_with_partial_header(self):
        decoder = FrameDecoder()
        decoder.feed(b"\x01")
        with pytest.raises(MalformedFrameError, match="inside a header"):
            decoder.close()
