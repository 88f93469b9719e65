"""
Custom exception hierarchy for fakecandy.

## Exception Hierarchy

```
FakecandyError (base)
├── ProtocolError
│   ├── MalformedFrameError
│   ├── UnknownChannelError
│   └── UnsupportedCommandError
├── DiscoveryError
│   ├── MissingScanDataError
│   └── MissingDiscoveryDataError
├── ControlTransportError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

All custom exceptions inherit from `FakecandyError`, which provides:

- `user_message`: Human-friendly message for display to users
- `technical_message`: Detailed message for logging
- `recoverable`: Whether the error can be recovered from
- `recovery_hint`: Optional suggestion for how to fix the issue

### Example: Unknown Channel

```python
from fakecandy.exceptions import UnknownChannelError

raise UnknownChannelError(channel=99, known_channels=[1, 2])

# User sees: "Unknown OPC channel: 99"
# Recovery hint: "Address one of the configured channels: 1, 2"
```

Device-side transports catch `ProtocolError`, log `technical_message` and
keep serving; the CLI formats `user_message` and `recovery_hint`.
"""

from .base import FakecandyError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .discovery import DiscoveryError, MissingDiscoveryDataError, MissingScanDataError
from .handlers import (
    ErrorContext,
    format_error_for_display,
    handle_errors,
    wrap_pydantic_error,
)
from .protocol import (
    MalformedFrameError,
    ProtocolError,
    UnknownChannelError,
    UnsupportedCommandError,
)
from .transport import ControlTransportError

__all__ = [
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Transport
    "ControlTransportError",
    # Discovery
    "DiscoveryError",
    "ErrorContext",
    # Base
    "FakecandyError",
    # Protocol
    "MalformedFrameError",
    "MissingDiscoveryDataError",
    "MissingScanDataError",
    "ProtocolError",
    "UnknownChannelError",
    "UnsupportedCommandError",
    # Handlers
    "format_error_for_display",
    "handle_errors",
    "wrap_pydantic_error",
]
