"""OPC protocol exceptions.

This module defines exceptions raised while decoding or applying
Open Pixel Control frames:
- ProtocolError: Base class for protocol errors
- MalformedFrameError: Header or length field does not match the payload
- UnknownChannelError: Frame addressed a channel the device does not have
- UnsupportedCommandError: Top-level OPC or logical command not recognized
"""

from .base import FakecandyError


class ProtocolError(FakecandyError):
    """An OPC frame could not be decoded or applied."""

    def __init__(self, user_message: str, channel: int | None = None, **kwargs):
        super().__init__(user_message, **kwargs)
        self.channel = channel


class MalformedFrameError(ProtocolError):
    """Frame bytes do not form a valid OPC message."""

    def __init__(self, reason: str, data: bytes | None = None):
        """
        Initialize malformed frame error.

        Args:
            reason: Why the frame is invalid
            data: The offending bytes (logged as hex, truncated)
        """
        tech_msg = f"Malformed OPC frame: {reason}"
        if data is not None:
            preview = data[:32].hex()
            if len(data) > 32:
                preview += "..."
            tech_msg += f" (got {len(data)} bytes: {preview})"

        super().__init__(
            user_message=f"Malformed OPC frame: {reason}",
            technical_message=tech_msg,
            recoverable=True,
        )
        self.reason = reason
        self.data = data


class UnknownChannelError(ProtocolError):
    """Frame addressed a channel that was not configured on the device."""

    def __init__(self, channel: int, known_channels: list[int] | tuple[int, ...] = ()):
        """
        Initialize unknown channel error.

        Args:
            channel: The requested channel
            known_channels: Channels the device was configured with
        """
        known = ", ".join(str(c) for c in known_channels) or "none"
        super().__init__(
            user_message=f"Unknown OPC channel: {channel}",
            technical_message=f"Unknown OPC channel {channel} (configured: {known})",
            channel=channel,
            recoverable=True,
            recovery_hint=f"Address one of the configured channels: {known}",
        )
        self.known_channels = tuple(known_channels)


class UnsupportedCommandError(ProtocolError):
    """An OPC command or logical device command is not supported."""

    def __init__(self, command: int | str, channel: int | None = None, detail: str | None = None):
        """
        Initialize unsupported command error.

        Args:
            command: OPC command byte or logical command name
            channel: Channel the command was addressed to, if any
            detail: Extra context (e.g. SYSEX system id)
        """
        if isinstance(command, int):
            label = f"0x{command:02x}"
        else:
            label = command

        user_msg = f"Unsupported command: {label}"
        tech_msg = user_msg
        if detail:
            tech_msg += f" ({detail})"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            channel=channel,
            recoverable=True,
        )
        self.command = command
