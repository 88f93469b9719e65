"""Errors raised while building the device configuration.

Both the JSON config file (`fakecandy serve --config`) and the
command line options end up in `AppConfig`; these errors name the
source so the user knows which one to fix.
"""

from typing import Any

from .base import FakecandyError

SAVE_CONFIG_HINT = "fakecandy serve --device-id <id> [options] --save-config <file>"

# Extra hint lines keyed by the last part of the failing field
FIELD_HINTS = {
    "device_id": "Device ids are a single word without spaces, e.g. strand1 or lamp:kitchen",
    "channels": "Channels must be unique integers between 1 and 255 (0 is the broadcast channel)",
    "led_count": "A strand holds 1 to 21845 LEDs, or up to 21834 with the UDP control protocol",
    "udp_packet": "The discovery packet is hex encoded, e.g. A5A5A5A5",
    "upnp_description_path": "The description path is absolute, e.g. /device.xml",
    "protocol": "Control protocols: TCP, UDP, HTTP. Discovery protocols: UDP, MDNS, UPNP",
}


class ConfigurationError(FakecandyError):
    """The device configuration cannot be used."""


class ConfigFileInvalidError(ConfigurationError):
    """A config file is not readable JSON."""

    def __init__(self, file_path: str, parse_error: str):
        """
        Args:
            file_path: Config file given to --config
            parse_error: What the reader or JSON parser reported
        """
        hint = (
            f"Fix the JSON in {file_path}, or restore {file_path}.bak if a previous "
            "--save-config left one.\n"
            f"To start over, write a fresh file with:\n  {SAVE_CONFIG_HINT}"
        )
        super().__init__(
            user_message=f"Cannot read config file {file_path}: {parse_error}",
            technical_message=f"Config file {file_path} rejected: {parse_error}",
            recoverable=True,
            recovery_hint=hint,
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """A config value is out of range or of the wrong type."""

    def __init__(self, field: str, value: Any, error_msg: str, source: str | None = None):
        """
        Args:
            field: Dotted field path, e.g. device.channels
            value: The rejected input
            error_msg: Validator message
            source: Config file path, or "command line"
        """
        lines = [f"Fix '{field}'" + (f" in {source}" if source else "")]
        hint = FIELD_HINTS.get(field.rsplit(".", 1)[-1])
        if hint:
            lines.append(hint)

        super().__init__(
            user_message=f"Invalid configuration value for '{field}': {error_msg}",
            technical_message=f"{field}={value!r} rejected: {error_msg}",
            recoverable=True,
            recovery_hint="\n".join(lines),
        )
        self.field = field
        self.value = value
        self.source = source
