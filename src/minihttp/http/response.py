"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  │    ────┬─── ─┬─ ─┬─                                            │ │
    │  │    Version  Code Phrase                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Encoding: gzip\r\n        (only when encoded)       │ │
    │  │    Content-Length: 23\r\n            (always computed)         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  \r\n                                 ← blank line                  │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    [23 bytes]                                                   │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONTENT-LENGTH IS NEVER TRUSTED FROM THE CALLER
=============================================================================

to_bytes() always writes Content-Length as len(body). When the body was
gzip-encoded, `body` already holds the compressed bytes, so the header
carries the compressed length. A handler cannot get this wrong because a
handler never sets it.

=============================================================================
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from .encoding import encode_body
from .status_codes import HTTPStatus


TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"

CRLF = "\r\n"


@dataclass(frozen=True)
class HTTPResponse:
    """
    An HTTP response ready to be written to a socket.

    Immutable once built. Use ResponseBuilder (or the shortcuts at the
    bottom of this module) to make one.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
                                                         then closes

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        """Length the Content-Length header will carry."""
        return len(self.body)

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

            HTTP/1.1 200 OK\r\n
            Content-Type: text/plain\r\n
            Content-Length: 3\r\n      ← always len(body)
            \r\n
            abc
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            if name.lower() == "content-length":
                continue  # Recomputed below
            lines.append(f"{name}: {value}")

        lines.append(f"Content-Length: {len(self.body)}")

        # Trailing "" + join gives the blank line that ends the headers
        lines.append("")
        header_bytes = (CRLF.join(lines) + CRLF).encode("utf-8")

        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Each method returns `self`, so calls chain:

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("abc")
            .encode("gzip")
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the raw body. Strings are encoded as UTF-8.
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str, content_type: str = TEXT_PLAIN) -> "ResponseBuilder":
        """Plain text body (Content-Type: text/plain)."""
        self.body(text)
        return self.content_type(content_type)

    def octet_stream(self, data: bytes) -> "ResponseBuilder":
        """Binary body (Content-Type: application/octet-stream)."""
        self.body(data)
        return self.content_type(OCTET_STREAM)

    def encode(self, encoding: str) -> "ResponseBuilder":
        """
        Content-encode the body set so far and add Content-Encoding.

        Call this after the body is set. The length written on the wire
        is the encoded one.
        """
        self._body = encode_body(self._body, encoding)
        return self.header("Content-Encoding", encoding)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Error shortcuts carry an EMPTY body: no file paths, no
# exception text, nothing about the server's internals reaches the client.
#
# =============================================================================

def ok(body: Union[str, bytes] = b"", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    With no arguments this is the bare "HTTP/1.1 200 OK" with an empty
    body that the root path returns.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK).body(body)
    if content_type:
        builder.content_type(content_type)
    return builder.build()


def created() -> HTTPResponse:
    """201 Created, no body. Returned after a successful file upload."""
    return ResponseBuilder().status(HTTPStatus.CREATED).build()


def not_found() -> HTTPResponse:
    """404 Not Found, no body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def internal_error() -> HTTPResponse:
    """500 Internal Server Error, no body."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).build()
