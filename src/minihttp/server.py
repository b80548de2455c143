"""
=============================================================================
HTTPServer
=============================================================================

Ties the layers together. SocketServer accepts, each connection gets a
thread, and that thread reads one request, routes it, writes the answer
and closes.

=============================================================================
ONE CONNECTION, START TO FINISH
=============================================================================

    accept thread                      conn-<id> thread (daemon)
    ─────────────                      ─────────────────────────
    SocketServer._serve()
      accept() ─► Connection ─► _handle_connection()
                                   └─► Thread(_process_connection)
      accept() ...                          │
                                            ▼
                                   RequestParser.read(conn)
                                      │ None          → close
                                      │ HTTPParseError → warn, close
                                      ▼
                                   LoggingMiddleware
                                      └─► Router.handle
                                             └─► EchoHandler / UserAgentHandler
                                                 / FileHandler / 404
                                      │ exception     → empty 500
                                      ▼
                                   conn.send_response(response.to_bytes())
                                   conn.close()

Threads are not pooled or capped. The only state they share is the
route table and the config, and neither changes after __init__.

=============================================================================
"""

import logging
import threading
from types import MappingProxyType
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .handlers import EchoHandler, UserAgentHandler, FileHandler
from .http import (
    HTTPRequest, HTTPResponse, HTTPParseError,
    RequestParser, Router, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware, LoggingMiddleware


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class HTTPServer:
    """
    The server, configured and ready to run().

        /                 200, empty body
        /echo/{text}      200 text/plain {text}, gzip if accepted
        /user-agent       200 text/plain User-Agent
        /files/{name}     GET 200 bytes or 404; POST 201 or 500
        anything else     404

    Example:
        server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
        server.run()   # until SIGINT/SIGTERM or server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Raises:
            ValueError: The config does not validate.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()

        # Frozen: connection threads read it concurrently
        self.routes = MappingProxyType({
            "echo": EchoHandler(),
            "user-agent": UserAgentHandler(),
            "files": FileHandler(self.config.directory),
        })
        self._router = Router(self.routes)

        self._middleware = MiddlewarePipeline()
        if self.config.access_log:
            self._middleware.add(LoggingMiddleware())

        # Set by run(): the middleware chain wrapped around the router
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Append a middleware. Only takes effect if called before run()."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) actually bound once listening; the configured pair before."""
        return self._socket_server.address

    # =========================================================================
    # RUNNING
    # =========================================================================

    def run(self):
        """
        Serve until shutdown() or a signal. Blocks.

        Raises:
            OSError: The listening socket could not be bound.
        """
        self._configure_logging()
        self._handler = self._middleware.wrap(self._router.handle)

        logger.info(
            f"Serving {self.config.host}:{self.config.port}, "
            f"files under {self.routes['files'].root}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting; run() returns within about a second."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False if `timeout` expires first."""
        return self._socket_server.wait_until_ready(timeout)

    def _configure_logging(self):
        # basicConfig does nothing if the root logger already has handlers
        logging.basicConfig(
            level=self.config.log_level_value,
            format=LOG_FORMAT,
            datefmt=LOG_DATEFMT,
        )
        logging.getLogger("minihttp").setLevel(self.config.log_level_value)

    # =========================================================================
    # PER CONNECTION
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Runs on the accept thread: start the worker and return at once."""
        threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        ).start()

    def _process_connection(self, conn: Connection):
        """Read one request from `conn`, answer it and close, whatever happens."""
        with conn:
            try:
                request = self._parser.read(conn, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Unparseable request from {conn.client_ip} ({e.status_code}): {e}")
                return

            if request is None:
                logger.debug(f"[{conn.id}] {conn.client_ip} closed without sending a request")
                return

            conn.state = ConnectionState.PROCESSING

            try:
                response = self._handler(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Unhandled error serving {request.method} {request.path}: {e}")
                response = internal_error()

            conn.send_response(response.to_bytes())


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Build a server without running it.

        app = create_app(ServerConfig(port=0)).use(MyMiddleware())
        app.run()
    """
    return HTTPServer(config)
