"""Apply decoded OPC frames to the strand store."""

import logging

from fakecandy.exceptions import UnknownChannelError, UnsupportedCommandError
from fakecandy.opc import (
    BROADCAST_CHANNEL,
    Frame,
    OpcCommand,
    decode_color_correction,
    get_pixel_colors_response,
    parse_sysex,
)

from .strand import StrandStore

logger = logging.getLogger(__name__)


class OpcHandler:
    """
    Device-side OPC command dispatch.

    Every transport decodes its wire bytes into `Frame` objects and hands
    them to the same handler; the handler is stateless apart from the
    shared `StrandStore`, so one instance serves all transports and
    connections concurrently.
    """

    def __init__(self, store: StrandStore) -> None:
        self.store = store

    def handle(self, frame: Frame) -> Frame | None:
        """
        Apply one frame.

        Returns:
            The response frame for queries, None for write-only commands

        Raises:
            UnknownChannelError: Frame addressed a channel not configured
                (pixel writes to broadcast channel 0 are not implemented)
            UnsupportedCommandError: Unknown top-level command or SYSEX message
            MalformedFrameError: SYSEX data too short or invalid body
        """
        if frame.command == OpcCommand.SET_PIXEL_COLORS:
            if frame.channel == BROADCAST_CHANNEL:
                raise UnknownChannelError(frame.channel, self.store.channels)
            self.store.set_pixels(frame.channel, frame.data)
            return None

        if frame.command == OpcCommand.SYSEX:
            return self._handle_sysex(frame)

        raise UnsupportedCommandError(frame.command, channel=frame.channel)

    def _handle_sysex(self, frame: Frame) -> Frame | None:
        message = parse_sysex(frame.data)

        if message.is_get_pixel_colors:
            buffer = self.store.get_pixels(frame.channel)
            logger.debug(f"Channel {frame.channel}: returning {len(buffer)} bytes of pixel data")
            return get_pixel_colors_response(frame.channel, buffer)

        if message.is_color_correction:
            # Whitepoint is global; the frame's channel only routes it
            self.store.set_color_correction(decode_color_correction(message.body))
            return None

        raise UnsupportedCommandError(
            OpcCommand.SYSEX,
            channel=frame.channel,
            detail=f"SYSEX system id 0x{message.system_id:04x}, command 0x{message.command:04x}",
        )
