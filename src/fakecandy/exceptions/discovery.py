"""Discovery-related exceptions.

This module defines exceptions for discovery decode failures:
- DiscoveryError: Base class for discovery errors
- MissingScanDataError: Scan data (or a required UPnP element) is absent
- MissingDiscoveryDataError: A decoded payload lacks required record fields
"""

from .base import FakecandyError


class DiscoveryError(FakecandyError):
    """A device could not be identified from its discovery data."""

    pass


class MissingScanDataError(DiscoveryError):
    """Scan data is missing, of an unknown kind, or lacks a required element."""

    def __init__(self, what: str, source: str = "scan data"):
        """
        Initialize missing scan data error.

        Args:
            what: The missing element or field
            source: Where it was expected (e.g. "UPnP description")
        """
        super().__init__(
            user_message=f"Missing or incorrect {source}: {what}",
            technical_message=f"Missing or incorrect {source}: {what}",
            recoverable=False,
        )
        self.what = what
        self.source = source


class MissingDiscoveryDataError(DiscoveryError):
    """A discovery payload decoded but does not hold a complete record."""

    def __init__(self, missing: list[str] | str, encoding: str, detail: str | None = None):
        """
        Initialize missing discovery data error.

        Args:
            missing: Field name(s) that could not be read
            encoding: The discovery encoding ("CBOR", "TXT", ...)
            detail: Underlying decode error, if any
        """
        if isinstance(missing, str):
            missing = [missing]
        fields = ", ".join(missing)
        tech_msg = f"{encoding} discovery payload missing {fields}"
        if detail:
            tech_msg += f": {detail}"

        super().__init__(
            user_message=f"Discovery data incomplete: {fields}",
            technical_message=tech_msg,
            recoverable=False,
        )
        self.missing = missing
        self.encoding = encoding
