"""
Handler interface.

Every route in the table maps to a RequestHandler. The router has already
split the path, so a handler receives the segment list alongside the
request:

    GET /echo/abc   →   EchoHandler().handle(request, ["echo", "abc"])
                                                       ──┬─── ──┬──
                                                         │      └── argument
                                                         └── route key

Handlers never touch the socket. They take a request and return a
response; the server writes it.
"""

from abc import ABC, abstractmethod
from typing import List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


class RequestHandler(ABC):
    """Base class for everything the router can dispatch to."""

    @abstractmethod
    def handle(self, request: HTTPRequest, segments: List[str]) -> HTTPResponse:
        """
        Produce the response for `request`.

        Args:
            request: The fully parsed request.
            segments: Non-empty path segments. segments[0] is the route key.
        """
        ...

    @property
    def name(self) -> str:
        """Handler name, used in debug logs."""
        return self.__class__.__name__
