"""
Fixture Server

Serves the tests directory over HTTP so chains can load fixture pages
(and their iframes) from a real origin.

Usage:
    from pagechain.server import FixtureServer
    with FixtureServer(Path("tests/ui"), port=8080) as server:
        print(server.url)
"""

import logging
import threading
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class FixtureRequestHandler(SimpleHTTPRequestHandler):
    """Static file handler that logs through `logging` instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} - {format % args}")

    def end_headers(self) -> None:
        # Fixtures change between runs; never let the browser cache them
        self.send_header("Cache-Control", "no-store")
        super().end_headers()


class FixtureServer:
    """Static HTTP server for fixture pages, running on a daemon thread."""

    def __init__(self, root: Path, port: int = 8080, host: str = "127.0.0.1"):
        """
        Args:
            root: Directory to serve
            port: Port to listen on (0 picks a free port)
            host: Interface to bind
        """
        self.root = Path(root)
        self.host = host
        self._port = port
        self._httpd: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        """Bound port (the actual one once started with port 0)."""
        if self._httpd is not None:
            return self._httpd.server_address[1]
        return self._port

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def is_running(self) -> bool:
        return self._httpd is not None

    def start(self) -> None:
        """
        Start serving in a background daemon thread.

        Raises:
            RuntimeError: If the server is already running
            OSError: If the port is already in use
        """
        if self._httpd is not None:
            raise RuntimeError(f"FixtureServer already running on port {self.port}")

        handler_class = partial(FixtureRequestHandler, directory=str(self.root))
        self._httpd = ThreadingHTTPServer((self.host, self._port), handler_class)
        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="pagechain-fixtures",
            daemon=True,
        )
        self._thread.start()

        logger.info(f"Serving {self.root} at {self.url}")

    def stop(self) -> None:
        """Shut down the server and join its thread. Safe to call repeatedly."""
        if self._httpd is None:
            return

        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            if self._thread.is_alive():
                logger.warning("Fixture server thread did not exit within 5s")

        self._httpd = None
        self._thread = None
        logger.info("Fixture server stopped")

    def __enter__(self) -> "FixtureServer":
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()
