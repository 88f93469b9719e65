"""fakecandy: a simulated Open Pixel Control smart light."""

__version__ = "0.1.0"
