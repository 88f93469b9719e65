"""
HTTP control listener.

Endpoints:
    POST /{channel}  - Body is the base64 pixel payload; applied as one
                       set-pixel-colors frame. Answers "OK".
    GET  /{channel}  - get-pixel-colors query. Body is the base64 encoding
                       of the encoded SYSEX response frame.

Unknown channels answer 404, undecodable bodies 400. Other methods get
FastAPI's 405.
"""

import base64
import binascii
import logging

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from fakecandy import __version__
from fakecandy.device.handler import OpcHandler
from fakecandy.exceptions import ProtocolError, UnknownChannelError
from fakecandy.opc import Frame, OpcCommand, get_pixel_colors_query
from fakecandy.utils import BackgroundHttpServer

from .base import ControlServer

logger = logging.getLogger(__name__)


def _parse_channel(raw: str, known_channels: tuple[int, ...]) -> int:
    """Path segment to channel number; anything else is an unknown path."""
    if not (raw.isascii() and raw.isdecimal()) or int(raw) > 0xFF:
        raise UnknownChannelError(raw, known_channels)
    return int(raw)


def _error_response(error: ProtocolError) -> PlainTextResponse:
    status = 404 if isinstance(error, UnknownChannelError) else 400
    return PlainTextResponse(error.user_message, status_code=status)


def create_control_app(handler: OpcHandler) -> FastAPI:
    """
    Build the FastAPI app translating HTTP requests into OPC frames.

    Handler calls run in the threadpool since the strand store blocks on
    its lock.
    """
    app = FastAPI(title="fakecandy OPC control", version=__version__)

    @app.post("/{channel}", response_class=PlainTextResponse)
    async def set_pixel_colors(channel: str, request: Request):
        peer = request.client.host if request.client else "unknown"
        logger.debug(f"HTTP: received POST request from {peer}")
        body = await request.body()
        try:
            frame = Frame(
                channel=_parse_channel(channel, handler.store.channels),
                command=OpcCommand.SET_PIXEL_COLORS,
                data=base64.b64decode(body.strip(), validate=True),
            )
            await run_in_threadpool(handler.handle, frame)
        except binascii.Error as e:
            logger.warning(f"HTTP: {peer}: body is not base64: {e}")
            return PlainTextResponse(f"Invalid base64 body: {e}", status_code=400)
        except ProtocolError as e:
            logger.warning(f"HTTP: {peer}: {e.technical_message}")
            return _error_response(e)
        return "OK"

    @app.get("/{channel}", response_class=PlainTextResponse)
    async def get_pixel_colors(channel: str, request: Request):
        peer = request.client.host if request.client else "unknown"
        logger.debug(f"HTTP: received GET request from {peer}")
        try:
            query = get_pixel_colors_query(_parse_channel(channel, handler.store.channels))
            response = await run_in_threadpool(handler.handle, query)
        except ProtocolError as e:
            logger.warning(f"HTTP: {peer}: {e.technical_message}")
            return _error_response(e)
        return base64.b64encode(response.encode()).decode("ascii")

    return app


class HttpControlServer(ControlServer):
    """OPC over HTTP, served by uvicorn."""

    protocol_name = "HTTP"

    def __init__(self, handler: OpcHandler, host: str = "0.0.0.0", port: int = 7890):
        super().__init__(handler, host, port)
        self.app = create_control_app(handler)
        self._http = BackgroundHttpServer(self.app, host, port, name="http-control")

    def _bind(self) -> None:
        self._http.bind()

    def _serve(self) -> None:
        self._http.serve()

    def _shutdown(self) -> None:
        self._http.shutdown()

    def start(self) -> None:
        super().start()
        self._http.wait_started()

    @property
    def address(self) -> tuple[str, int]:
        return self._http.address
