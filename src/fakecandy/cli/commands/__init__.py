"""CLI commands for fakecandy."""

from .control import control_group
from .probe import probe
from .serve import serve

__all__ = ["control_group", "probe", "serve"]
