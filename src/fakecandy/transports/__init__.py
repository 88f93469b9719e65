"""OPC control listeners (TCP, UDP, HTTP)."""

from fakecandy.device.handler import OpcHandler
from fakecandy.models import ControlConfig, ControlKind

from .base import ControlServer, dispatch_frame
from .http import HttpControlServer, create_control_app
from .tcp import TcpControlServer
from .udp import UdpControlServer


def create_control_server(config: ControlConfig, handler: OpcHandler) -> ControlServer:
    """Build the listener selected by `config.protocol`."""
    if config.protocol is ControlKind.TCP:
        return TcpControlServer(handler, config.host, config.port, read_timeout=config.read_timeout)
    if config.protocol is ControlKind.UDP:
        return UdpControlServer(handler, config.host, config.port)
    if config.protocol is ControlKind.HTTP:
        return HttpControlServer(handler, config.host, config.port)
    raise ValueError(f"Unsupported control protocol: {config.protocol}")


__all__ = [
    "ControlServer",
    "HttpControlServer",
    "TcpControlServer",
    "UdpControlServer",
    "create_control_app",
    "create_control_server",
    "dispatch_frame",
]
