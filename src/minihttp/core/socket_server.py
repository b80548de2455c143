"""
=============================================================================
LISTENER: THE ACCEPTING HALF OF THE SERVER
=============================================================================

SocketServer binds one TCP socket and turns every client that connects
into a Connection, which it passes to a callback. Parsing, routing and
threads all live above this layer; nothing here knows about HTTP.

=============================================================================
STARTUP SEQUENCE
=============================================================================

    start(on_connection)
        │
        ├── _listen()
        │     socket(AF_INET, SOCK_STREAM)
        │     SO_REUSEADDR, TCP_NODELAY, 1s accept timeout
        │     bind((host, port))        ← OSError propagates to the caller
        │     listen(backlog)
        │     getsockname()             ← real port when port=0
        │
        ├── _install_signal_handlers()  (main thread only)
        ├── ready event set             ← wait_until_ready() returns True
        │
        ├── _serve(on_connection)       ← blocks here
        │
        └── _teardown()                 ← always, even if _serve raised

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR
    A restarted server can bind its port while connections from the
    previous run sit in TIME_WAIT.

TCP_NODELAY
    Every response is written with a single sendall(). Nagle's delay
    would only hold back the tail of it.

=============================================================================
STOPPING
=============================================================================

shutdown() only clears a flag. accept() wakes up at least once a second
(the socket timeout), sees the flag and returns; _teardown() then closes
the listening socket. Requests already handed off keep running on their
own threads.

SIGINT and SIGTERM call shutdown() too, but signal.signal() is only
legal on the main thread. A server started from a test fixture or any
other thread runs without them.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Accepts TCP clients and hands each one to a callback as a Connection.

        listener = SocketServer(ServerConfig(port=0))
        listener.start(lambda conn: conn.close())   # blocks

    From another thread:

        listener.wait_until_ready(5.0)
        host, port = listener.address
        listener.shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None
        self._running = False

        self._ready_event = threading.Event()
        self._stopped_event = threading.Event()

        # Handlers that were in place before ours, by signal number
        self._previous_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The (host, port) being listened on.

        Before start() this is just the configured pair. Afterwards it
        comes from getsockname(), so port 0 reads back as the port the
        OS picked.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, on_connection: Callable[[Connection], None]):
        """
        Listen and accept until shutdown() is called.

        Args:
            on_connection: Receives every accepted Connection. It runs on
                           the accept thread and must return promptly.

        Raises:
            OSError: The address could not be bound.
        """
        self._socket = self._listen()
        self._running = True
        self._stopped_event.clear()

        self._install_signal_handlers()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._serve(on_connection)
        finally:
            self._teardown()

    def shutdown(self):
        """Ask the accept loop to stop. Idempotent, and safe from any thread."""
        if self._running:
            logger.info("Shutting down listener...")
        self._running = False

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """True once the socket is listening, False if `timeout` ran out first."""
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """True once the listening socket has been closed, False on timeout."""
        return self._stopped_event.wait(timeout)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _listen(self) -> socket.socket:
        """Create, bind and listen. On a bind error the socket is closed first."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(ACCEPT_POLL_INTERVAL)

        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            # EADDRINUSE: something else has the port
            # EACCES: ports below 1024 without privileges
            logger.error(f"Cannot bind {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        sock.listen(self.config.backlog)
        self._bound_address = sock.getsockname()[:2]
        return sock

    def _serve(self, on_connection: Callable[[Connection], None]):
        """
        The accept loop.

            accept() ── timeout ─────────────► re-check _running
                     ── OSError, running ────► log it, keep going
                     ── OSError, stopping ───► leave
                     ── (sock, addr) ────────► on_connection(Connection)
                                                 raises → log, drop that client
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                # EMFILE, ECONNABORTED and friends affect one client only
                logger.error(f"accept() failed: {e}")
                continue

            logger.debug(f"Accepted {client_address[0]}:{client_address[1]}")
            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )

            try:
                on_connection(conn)
            except Exception:
                # e.g. "can't start new thread" under load
                logger.exception(f"[{conn.id}] Could not hand off {conn.client_ip}:{conn.client_port}")
                conn.close()

    def _teardown(self):
        self._running = False
        self._restore_signal_handlers()

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._stopped_event.set()
        logger.info("Listener closed")

    def _install_signal_handlers(self):
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, leaving signal handlers alone")
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, shutting down")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._previous_handlers[sig] = signal.signal(sig, on_signal)

    def _restore_signal_handlers(self):
        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous)
        self._previous_handlers.clear()
