"""Run an ASGI app with uvicorn on a background thread."""

import logging
import socket
import threading
import time
from typing import Optional

import uvicorn

logger = logging.getLogger(__name__)


class BackgroundHttpServer:
    """
    Uvicorn server bound to a pre-created socket.

    Binding the socket before the serving thread starts means the real
    port is known immediately (port 0 requests an ephemeral one) and bind
    errors surface in `start()` rather than inside the thread.
    """

    def __init__(self, app, host: str = "0.0.0.0", port: int = 0, name: str = "http"):
        self.app = app
        self.host = host
        self.port = port
        self.name = name
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    def bind(self) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        sock.listen(128)
        self._socket = sock
        config = uvicorn.Config(self.app, log_config=None, access_log=False, lifespan="off")
        self._server = uvicorn.Server(config)

    @property
    def address(self) -> tuple[str, int]:
        if self._socket is None:
            return (self.host, self.port)
        host, port = self._socket.getsockname()[:2]
        return (host, port)

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    def serve(self) -> None:
        """Serve on the calling thread until `shutdown()`."""
        self._server.run(sockets=[self._socket])

    def start(self, wait: float = 5.0) -> None:
        """Bind and serve on a daemon thread, waiting up to `wait` seconds for start-up."""
        self.bind()
        self._thread = threading.Thread(target=self.serve, name=self.name, daemon=True)
        self._thread.start()
        self.wait_started(wait)

    def wait_started(self, timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while not self.started:
            if time.monotonic() >= deadline:
                logger.warning(f"{self.name} server did not report start-up within {timeout}s")
                return False
            time.sleep(0.01)
        return True

    def shutdown(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self._thread = None
        if self._socket is not None:
            self._socket.close()
            self._socket = None
