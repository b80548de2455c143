"""
Echo handler: GET /echo/{text} answers with {text}.

    Request:                                Response:
    ┌──────────────────────────────────┐    ┌──────────────────────────────────┐
    │ GET /echo/abc HTTP/1.1           │    │ HTTP/1.1 200 OK                  │
    │ Accept-Encoding: gzip            │ →  │ Content-Type: text/plain         │
    │                                  │    │ Content-Encoding: gzip           │
    │                                  │    │ Content-Length: 23               │
    │                                  │    │                                  │
    │                                  │    │ <gzip("abc")>                    │
    └──────────────────────────────────┘    └──────────────────────────────────┘

The segment is echoed exactly as it appeared on the request line. No
percent-decoding.
"""

from typing import List

from ..http.encoding import GZIP, accepts_encoding
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, not_found
from .base import RequestHandler


class EchoHandler(RequestHandler):
    """Reflects the second path segment, gzip-encoded when the client allows."""

    def handle(self, request: HTTPRequest, segments: List[str]) -> HTTPResponse:
        if len(segments) < 2:
            return not_found()

        builder = ResponseBuilder().text(segments[1])

        if accepts_encoding(request, GZIP):
            builder.encode(GZIP)

        return builder.build()
