"""Controller-side transport exceptions."""

from .base import FakecandyError


class ControlTransportError(FakecandyError):
    """Sending a frame to a device, or reading its reply, failed."""

    def __init__(
        self,
        protocol: str,
        host: str,
        port: int,
        original_error: str | None = None,
        error_code: str = "transientError",
    ):
        """
        Initialize control transport error.

        Args:
            protocol: Control protocol name (TCP/UDP/HTTP)
            host: Device host
            port: Device port
            original_error: Message from the socket/HTTP layer
            error_code: Error code reported upstream in command results
        """
        user_msg = f"{protocol} request to {host}:{port} failed"
        tech_msg = user_msg
        if original_error:
            tech_msg += f": {original_error}"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint=(
                "Check that the device is running and listening with the same "
                "control protocol and port. Requests are not retried automatically."
            ),
        )
        self.protocol = protocol
        self.host = host
        self.port = port
        self.error_code = error_code
