"""
=============================================================================
CLIENT CONNECTION
=============================================================================

One accepted socket, dressed up as a readable/writable stream:

    conn.readline()        → bytes up to and including b"\\n"
    conn.read(n)           → at most n bytes
    conn.send_response(b)  → the whole response, or False if the peer left
    conn.close()           → half-close, drain, release

=============================================================================
WHY A BUFFER
=============================================================================

recv() hands back whatever happens to have arrived. A request line can
be split over two calls, and one call can carry the end of the headers
together with the start of the body:

    recv #1   b"POST /files/a HTTP/1.1\\r\\nContent-Le"
    recv #2   b"ngth: 5\\r\\n\\r\\nhel"
    recv #3   b"lo"

Chunks are appended to `_buffer`. readline() cuts at the first newline
and keeps the remainder; read(n) drains the remainder before calling
recv() again. The request parser sees a plain file.

=============================================================================
LIFE OF A CONNECTION
=============================================================================

Exactly one request, then the socket is closed:

    NEW ─► READING ─► PROCESSING ─► WRITING ─► CLOSING ─► CLOSED
              │                                   ▲
              └── nothing / garbage arrived ──────┘

`state` is informational (logs, tests) except for CLOSED, which makes
close() safe to call twice.

=============================================================================
"""

import socket
import time
import uuid
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)

DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    An accepted client socket plus its read buffer.

    Attributes:
        socket: The accepted socket.
        address: Peer (ip, port).
        id: Eight hex characters, used to tag log lines.
        state: Where in its single request the connection is.
        created_at: time.time() at accept.
        buffer_size: Bytes asked for per recv().
        timeout: Seconds a recv()/send() may block; None blocks forever.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = None

    _buffer: bytes = field(default=b"", repr=False)
    _eof: bool = field(default=False, repr=False)

    def __post_init__(self):
        # None switches the socket back to fully blocking mode
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Seconds since accept."""
        return time.time() - self.created_at

    # =========================================================================
    # INPUT
    # =========================================================================

    def readline(self) -> bytes:
        """
        Bytes up to and including the next newline.

        At EOF without a newline, whatever was buffered is returned
        (b"" if nothing was).
        """
        self.state = ConnectionState.READING

        while b"\n" not in self._buffer:
            chunk = self._recv()
            if not chunk:
                line, self._buffer = self._buffer, b""
                return line
            self._buffer += chunk

        line, sep, self._buffer = self._buffer.partition(b"\n")
        return line + sep

    def read(self, n: int) -> bytes:
        """
        At most `n` bytes: from the buffer if it holds any, else from a
        single recv(). b"" means EOF.
        """
        self.state = ConnectionState.READING

        if n <= 0:
            return b""

        if not self._buffer:
            self._buffer = self._recv()

        data, self._buffer = self._buffer[:n], self._buffer[n:]
        return data

    def _recv(self) -> bytes:
        """
        One recv() call. Timeouts and resets read as EOF, and once EOF is
        seen the socket is not asked again.
        """
        if self._eof:
            return b""

        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout:
            logger.debug(f"[{self.id}] Timed out waiting for data")
            data = b""
        except OSError as e:
            logger.debug(f"[{self.id}] recv() failed: {e}")
            data = b""

        if not data:
            self._eof = True
        return data

    # =========================================================================
    # OUTPUT
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write all of `data`.

        Returns:
            False if the peer went away mid-write, True otherwise.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Could not send response to {self.client_ip}: {e}")
            return False
        return True

    # =========================================================================
    # TEARDOWN
    # =========================================================================

    def close(self):
        """
        Orderly close.

            shutdown(SHUT_WR)   peer sees EOF after the response
            recv() until EOF    unread request bytes are consumed, at
                                most DRAIN_TIMEOUT seconds per call
            close()             descriptor released

        Closing with unread input still queued makes the kernel send RST,
        which can destroy a response the peer has not read yet.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(DRAIN_TIMEOUT)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
