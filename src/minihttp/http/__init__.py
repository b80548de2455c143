"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The application layer of the server: raw bytes from TCP in, structured
HTTP messages through the router, raw bytes back out.

=============================================================================
MODULE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Reads one request from a byte stream into an HTTPRequest            │
    │                                                                      │
    │ Input:   b"GET /echo/abc HTTP/1.1\r\nHost: ...\r\n\r\n"             │
    │ Output:  HTTPRequest(method="GET", path="/echo/abc", ...)           │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE BUILDER (response.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Builds HTTPResponse objects and serializes them to bytes            │
    │                                                                      │
    │ Input:   ResponseBuilder().text("abc").encode("gzip")               │
    │ Output:  b"HTTP/1.1 200 OK\r\nContent-Type: ...\r\n\r\n<gzip>"      │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Picks a handler by the first path segment                           │
    │                                                                      │
    │ Input:   GET /files/a.txt                                           │
    │ Output:  FileHandler.handle(request, ["files", "a.txt"])            │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ CONTENT ENCODING (encoding.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Accept-Encoding negotiation and deterministic gzip                  │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ STATUS CODES (status_codes.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ HTTPStatus.OK → 200, phrase="OK"                                    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,             # 200 OK
    created,        # 201 Created
    not_found,      # 404 Not Found
    internal_error, # 500 Internal Server Error
)
from .router import Router, split_path
from .status_codes import HTTPStatus
from .encoding import GZIP, accepts_encoding, encode_body, gzip_compress

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "split_path",

    # Status codes
    "HTTPStatus",

    # Content encoding
    "GZIP",
    "accepts_encoding",
    "encode_body",
    "gzip_compress",
]
