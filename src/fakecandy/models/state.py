"""Controller-side records: targets, command results and light state."""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from .config import MAX_LED_COUNT, check_led_count
from .enums import CommandStatus, ControlKind


class ControlTarget(BaseModel):
    """One controllable (sub-)device as seen by a controller.

    For proxied devices each channel is its own target and `proxy`
    holds the physical device id. `leds` is bounded so a full-strand
    color frame can be encoded and sent over `control_protocol`.
    """

    id: str = Field(min_length=1)
    channel: int = Field(ge=0, le=255)
    leds: int = Field(default=16, ge=1, le=MAX_LED_COUNT)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=7890, ge=0, le=65535)
    control_protocol: ControlKind = Field(default=ControlKind.TCP)
    proxy: str | None = None

    @model_validator(mode="after")
    def validate_strand_fits_transport(self) -> "ControlTarget":
        check_led_count(self.control_protocol, self.leds)
        return self


class CommandResult(BaseModel):
    """Outcome of one logical command for one target."""

    ids: list[str]
    status: CommandStatus
    states: dict[str, Any] | None = None
    error_code: str | None = None


class LightState(BaseModel):
    """Queried state of one target."""

    id: str
    online: bool
    spectrum_rgb: int | None = None
