"""User-Agent handler: GET /user-agent answers with the User-Agent header."""

from typing import List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from .base import RequestHandler


class UserAgentHandler(RequestHandler):
    """Reflects the User-Agent header (empty body if there is none)."""

    def handle(self, request: HTTPRequest, segments: List[str]) -> HTTPResponse:
        return ResponseBuilder().text(request.user_agent).build()
