"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request off a byte stream and turns it into an
immutable HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ────────┬─────── ───┬────                               │ │
    │  │   Method      Target     Version                               │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                     │ │
    │  │    Content-Length: 5\r\n                                        │ │
    │  │    \r\n                      ← empty line ends the headers     │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello                     ← exactly Content-Length bytes    │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LINE-BUFFERED READING
=============================================================================

The parser does not need the whole request up front. It pulls from any
object that behaves like a binary file:

    stream.readline()  → one line, including its line ending ('' at EOF)
    stream.read(n)     → up to n bytes ('' at EOF)

In production that object is a Connection (core/connection.py), which
buffers recv() chunks from the socket. In tests it is just io.BytesIO.

    readline() ──► request line
    readline() ──► header ... header ... ""   (blank line ends headers)
    read(N)    ──► body, N taken from Content-Length

The parser never reads past the body, so it never blocks waiting for
bytes the client will not send.

=============================================================================
"""

import io
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    The status code is what a stricter server would answer with. This
    server never answers a malformed request at all (the connection is
    just closed), so the code only ends up in the logs.
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A fully parsed HTTP request.

    Frozen: a request is built once per connection and handlers only
    ever read it. Headers are stored with LOWERCASE names in a read-only
    mapping, so `get_header("User-Agent")` and `get_header("user-agent")`
    find the same value.

        HTTPRequest(
            method="GET",
            path="/echo/abc",
            version="HTTP/1.1",
            headers={"host": "localhost:4221", "accept-encoding": "gzip"},
            body=b"",
        )
    """

    method: str                          # GET, POST, or anything else (opaque)
    path: str                            # Raw request target, e.g. /echo/abc
    version: str = "HTTP/1.1"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    client_address: tuple[str, int] = ("", 0)

    def __post_init__(self):
        # Normalize names and freeze the mapping, however the caller built it
        normalized = {name.lower(): value for name, value in self.headers.items()}
        object.__setattr__(self, "headers", MappingProxyType(normalized))

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def user_agent(self) -> str:
        """The User-Agent header, or "" if the client did not send one."""
        return self.headers.get("user-agent", "")

    @property
    def accept_encoding(self) -> str:
        """The raw Accept-Encoding header value ("" if absent)."""
        return self.headers.get("accept-encoding", "")

    @property
    def content_length(self) -> int:
        """
        The declared body length.

        Returns 0 if the header is missing, negative or not a number.
        """
        return _parse_content_length(self.headers.get("content-length", ""))

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            request.get_header("Content-Length")
            request.get_header("content-length")   # same thing
        """
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Reads a single request from a byte stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        stream
          │
          ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Request line                                                  │
        │     │  empty / EOF        → None (client sent nothing)            │
        │     │  < 3 tokens         → HTTPParseError                        │
        │     ▼                                                             │
        │  2. Header lines until the blank line                             │
        │     │  "Name: Value"      → headers["name"] = "Value"            │
        │     │  no colon           → skipped                               │
        │     │  repeated name      → last one wins                        │
        │     ▼                                                             │
        │  3. Body                                                          │
        │     │  Content-Length > 0 → read exactly that many bytes         │
        │     │  EOF first          → keep what arrived                    │
        │     ▼                                                             │
        │  4. HTTPRequest                                                   │
        └───────────────────────────────────────────────────────────────────┘

    ==========================================================================
    """

    def __init__(self, max_header_lines: int = 100):
        """
        Args:
            max_header_lines: Upper bound on header lines per request.
                              A client streaming headers forever gets an
                              HTTPParseError instead of unbounded memory.
        """
        self.max_header_lines = max_header_lines

    def read(self, stream, client_address: tuple[str, int] = ("", 0)) -> Optional[HTTPRequest]:
        """
        Read and parse one request from `stream`.

        Args:
            stream: Binary file-like object with readline() and read(n).
            client_address: Client (ip, port), carried along for logging.

        Returns:
            The parsed HTTPRequest, or None if the client closed the
            connection (or sent an empty first line) before a request.

        Raises:
            HTTPParseError: If the request line is malformed or the
                            header block is too long.
        """
        # =====================================================================
        # STEP 1: Request line
        # =====================================================================
        request_line = self._readline(stream)
        if not request_line:
            return None

        method, target, version = self._parse_request_line(request_line)

        # =====================================================================
        # STEP 2: Headers
        # =====================================================================
        headers = self._read_headers(stream)

        # =====================================================================
        # STEP 3: Body
        # =====================================================================
        # Only a positive Content-Length makes us read; the method does not
        # matter. A POST without the header simply has an empty body.
        content_length = _parse_content_length(headers.get("content-length", ""))
        body = self._read_body(stream, content_length) if content_length > 0 else b""

        return HTTPRequest(
            method=method,
            path=target,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _readline(self, stream) -> str:
        """Read one line and strip its CRLF (or bare LF)."""
        raw = stream.readline()
        if not raw:
            return ""
        if raw.endswith(b"\r\n"):
            raw = raw[:-2]
        elif raw.endswith(b"\n"):
            raw = raw[:-1]
        return raw.decode("utf-8", errors="replace")

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION" on single spaces.

        Extra tokens after the third are ignored; fewer than three is an
        error. The method is not validated: unknown verbs flow through to
        the router as opaque strings.
        """
        parts = line.split(" ")
        if len(parts) < 3:
            raise HTTPParseError(f"Invalid request line: {line!r}")
        return parts[0], parts[1], parts[2]

    def _read_headers(self, stream) -> dict[str, str]:
        headers: dict[str, str] = {}
        for _ in range(self.max_header_lines):
            line = self._readline(stream)
            if not line:
                return headers  # Blank line (or EOF) ends the header block

            name, sep, value = line.partition(":")
            name = name.strip()
            if not sep or not name:
                continue  # Lenient: no colon, or nothing before it

            headers[name.lower()] = value.strip()

        raise HTTPParseError(
            f"Too many header lines (> {self.max_header_lines})",
            status_code=HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE,
        )

    def _read_body(self, stream, content_length: int) -> bytes:
        """
        Read up to `content_length` bytes.

        Socket streams can return fewer bytes than asked for, so keep
        reading until we have everything or hit EOF.
        """
        chunks = []
        remaining = content_length
        while remaining > 0:
            chunk = stream.read(remaining)
            if not chunk:
                logger.debug(
                    f"Body truncated at EOF: got {content_length - remaining} "
                    f"of {content_length} bytes"
                )
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)


def _parse_content_length(value: str) -> int:
    try:
        length = int(value.strip())
    except ValueError:
        return 0
    return length if length > 0 else 0


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> Optional[HTTPRequest]:
    """
    Parse a request from raw bytes.

    Wraps the bytes in io.BytesIO and runs RequestParser over it. Handy
    in tests and anywhere the whole request is already in memory.
    """
    return RequestParser().read(io.BytesIO(data), client_address)
