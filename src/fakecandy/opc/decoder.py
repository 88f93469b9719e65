"""Streaming OPC decoder for byte-stream transports."""

from fakecandy.exceptions import MalformedFrameError

from .frame import HEADER, HEADER_SIZE, Frame


class FrameDecoder:
    """
    Re-segment a byte stream into OPC frames.

    TCP may split one frame across several reads or pack several frames
    into one read. Bytes are buffered until a whole frame is available.

    Example:
        ```python
        decoder = FrameDecoder()
        decoder.feed(b"\\x01\\x00\\x00")      # -> []
        decoder.feed(b"\\x03\\xff\\x00\\xff")  # -> [Frame(1, 0, b"\\xff\\x00\\xff")]
        ```

    Not thread-safe: one decoder per connection.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet forming a complete frame."""
        return len(self._buffer)

    def feed(self, data: bytes) -> list[Frame]:
        """
        Append bytes and return every frame completed by them.

        Args:
            data: Next chunk read from the stream

        Returns:
            Completed frames, in stream order
        """
        self._buffer.extend(data)
        frames: list[Frame] = []

        while len(self._buffer) >= HEADER_SIZE:
            channel, command, length = HEADER.unpack_from(self._buffer)
            end = HEADER_SIZE + length
            if len(self._buffer) < end:
                break
            frames.append(Frame(channel=channel, command=command, data=bytes(self._buffer[HEADER_SIZE:end])))
            del self._buffer[:end]

        return frames

    def reset(self) -> None:
        """Drop any buffered partial frame."""
        self._buffer.clear()

    def close(self) -> None:
        """
        Finish the stream.

        Raises:
            MalformedFrameError: If a partial frame is left in the buffer.
                The partial data is dropped either way.
        """
        if not self._buffer:
            return

        leftover = bytes(self._buffer)
        self._buffer.clear()
        if len(leftover) < HEADER_SIZE:
            reason = f"stream ended inside a header ({len(leftover)} bytes)"
        else:
            _, _, length = HEADER.unpack_from(leftover)
            reason = (
                f"stream ended inside a frame: length field says {length} bytes, "
                f"{len(leftover) - HEADER_SIZE} received"
            )
        raise MalformedFrameError(reason, leftover)
