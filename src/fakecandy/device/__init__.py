"""Device side: strand state, OPC handling and process orchestration."""

from .handler import OpcHandler
from .renderer import ConsoleStrandRenderer
from .strand import StrandStore

__all__ = ["ConsoleStrandRenderer", "OpcHandler", "StrandStore"]
