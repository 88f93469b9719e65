"""Color model for LED strands."""

from pydantic import BaseModel, ConfigDict, Field


class Color(BaseModel):
    """Standard 8-bit RGB color model.

    Pixels travel on the wire as 3 bytes (R, G, B). The model is frozen
    so it can be shared as a default fill color.
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255, description="Red (0-255)")
    g: int = Field(ge=0, le=255, description="Green (0-255)")
    b: int = Field(ge=0, le=255, description="Blue (0-255)")

    @classmethod
    def off(cls) -> "Color":
        """Create off (black) color."""
        return cls(r=0, g=0, b=0)

    @classmethod
    def white(cls) -> "Color":
        """Create full white color (the strand power-on state)."""
        return cls(r=255, g=255, b=255)

    @classmethod
    def from_spectrum_rgb(cls, rgb: int) -> "Color":
        """Split a 24-bit 0xRRGGBB integer into its components.

        Example:
            >>> Color.from_spectrum_rgb(0xFF00FF).to_rgb_tuple()
            (255, 0, 255)
        """
        if not 0 <= rgb <= 0xFFFFFF:
            raise ValueError(f"spectrum RGB value out of range: {rgb:#x}")
        return cls(r=(rgb >> 16) & 0xFF, g=(rgb >> 8) & 0xFF, b=rgb & 0xFF)

    def to_spectrum_rgb(self) -> int:
        """Pack into a 24-bit 0xRRGGBB integer."""
        return self.r << 16 | self.g << 8 | self.b

    def to_rgb_tuple(self) -> tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_bytes(self) -> bytes:
        """Wire representation of one pixel."""
        return bytes((self.r, self.g, self.b))

    def to_hex(self) -> str:
        """Convert to CSS hex color string (e.g., '#FF0000')."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"
