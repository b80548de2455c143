"""
=============================================================================
CONTENT ENCODING
=============================================================================

gzip compression of response bodies, negotiated through Accept-Encoding.

=============================================================================
CONTENT NEGOTIATION
=============================================================================

The client tells us what encodings it can decode:

    Request:
    ┌───────────────────────────────────────────────────────────────┐
    │ GET /echo/abc HTTP/1.1                                        │
    │ Accept-Encoding: gzip, deflate, br                            │
    └───────────────────────────────────────────────────────────────┘

    Response:
    ┌───────────────────────────────────────────────────────────────┐
    │ HTTP/1.1 200 OK                                               │
    │ Content-Type: text/plain                                      │
    │ Content-Encoding: gzip                                        │
    │ Content-Length: 23      (compressed size, not the plain text) │
    │                                                               │
    │ [gzip compressed body]                                        │
    └───────────────────────────────────────────────────────────────┘

Matching is a plain substring test ("gzip" in the header value), not a
full q-value parse. "gzip;q=0" therefore still counts as gzip. Clients in
practice only send the header when they mean it.

=============================================================================
DETERMINISM
=============================================================================

A gzip member header carries an MTIME field. gzip.compress() fills it
with the current time by default, which would make two identical
requests produce different bytes. We pin it to 0.

=============================================================================
"""

import gzip
from typing import Callable, Dict

from .request import HTTPRequest


GZIP = "gzip"

# Encoding name → compressor. Only gzip is offered.
ENCODERS: Dict[str, Callable[[bytes], bytes]] = {}


def gzip_compress(data: bytes, level: int = 6) -> bytes:
    """
    Compress `data` as a single gzip member.

    Args:
        data: Raw body bytes.
        level: 1 (fastest) .. 9 (smallest). 6 is the usual balance.

    Returns:
        gzip bytes with a zeroed MTIME, identical for identical input.
    """
    return gzip.compress(data, compresslevel=level, mtime=0)


ENCODERS[GZIP] = gzip_compress


def accepts_encoding(request: HTTPRequest, encoding: str) -> bool:
    """
    Check whether the client advertised `encoding` in Accept-Encoding.

    Case-insensitive substring match.
    """
    return encoding.lower() in request.accept_encoding.lower()


def encode_body(body: bytes, encoding: str) -> bytes:
    """
    Apply the named content encoding to `body`.

    Raises:
        ValueError: If the encoding is not registered.
    """
    try:
        encoder = ENCODERS[encoding]
    except KeyError:
        raise ValueError(f"Unsupported content encoding: {encoding}") from None
    return encoder(body)
