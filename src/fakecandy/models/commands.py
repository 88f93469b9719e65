"""Logical light commands issued by controllers."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class OnOff(BaseModel):
    """Turn the light on or off."""

    model_config = ConfigDict(frozen=True)

    command_name: ClassVar[str] = "action.devices.commands.OnOff"

    on: bool

    def to_state(self) -> dict:
        return {"on": self.on}


class BrightnessAbsolute(BaseModel):
    """Set absolute brightness in percent."""

    model_config = ConfigDict(frozen=True)

    command_name: ClassVar[str] = "action.devices.commands.BrightnessAbsolute"

    brightness: int = Field(ge=0, le=100, description="Brightness percent (0-100)")

    def to_state(self) -> dict:
        return {"brightness": self.brightness}


class ColorAbsolute(BaseModel):
    """Set every pixel of the strand to one 24-bit RGB color."""

    model_config = ConfigDict(frozen=True)

    command_name: ClassVar[str] = "action.devices.commands.ColorAbsolute"

    spectrum_rgb: int = Field(ge=0, le=0xFFFFFF, description="Color as 0xRRGGBB")
    name: str | None = Field(default=None, description="Color name, echoed back in states")

    def to_state(self) -> dict:
        color: dict = {"spectrumRGB": self.spectrum_rgb}
        if self.name is not None:
            color["name"] = self.name
        return {"color": color}


LogicalCommand = OnOff | BrightnessAbsolute | ColorAbsolute

COMMAND_TYPES: dict[str, type[BaseModel]] = {
    cls.command_name: cls for cls in (OnOff, BrightnessAbsolute, ColorAbsolute)
}
