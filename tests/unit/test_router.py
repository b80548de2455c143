"""
Unit tests for URL router.
"""

from typing import List

import pytest

from minihttp.handlers.base import RequestHandler
from minihttp.http.router import Router, split_path
from minihttp.http.request import HTTPRequest
from minihttp.http.response import HTTPResponse, ResponseBuilder
from minihttp.http.status_codes import HTTPStatus


def make_request(method: str, path: str) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path)


class RecordingHandler(RequestHandler):
    """Handler that answers with the segments it was given."""

    def __init__(self):
        self.calls = []

    def handle(self, request: HTTPRequest, segments: List[str]) -> HTTPResponse:
        self.calls.append(segments)
        return ResponseBuilder().text("|".join(segments)).build()


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def router(handler: RecordingHandler) -> Router:
    return Router({"echo": handler, "user-agent": handler})


class TestSplitPath:
    """Tests for split_path."""

    @pytest.mark.parametrize("path,expected", [
        ("/", []),
        ("", []),
        ("/echo", ["echo"]),
        ("/echo/abc", ["echo", "abc"]),
        ("/echo/abc/", ["echo", "abc"]),
        ("//echo//abc", ["echo", "abc"]),
        ("/files/a/b", ["files", "a", "b"]),
    ])
    def test_split(self, path: str, expected: List[str]):
        assert split_path(path) == expected


class TestRouter:
    """Tests for Router class."""

    def test_root_is_bare_ok(self, router: Router, handler: RecordingHandler):
        """Test that / answers 200 without touching any handler."""
        response = router.handle(make_request("GET", "/"))

        assert response.status == HTTPStatus.OK
        assert response.body == b""
        assert handler.calls == []

    def test_empty_path_is_bare_ok(self, router: Router):
        response = router.handle(make_request("GET", ""))

        assert response.status == HTTPStatus.OK

    @pytest.mark.parametrize("path", ["//", "///"])
    def test_slashes_only_404(self, router: Router, handler: RecordingHandler, path: str):
        """Test that only "/" and "" count as the root path."""
        response = router.handle(make_request("GET", path))

        assert response.status == HTTPStatus.NOT_FOUND
        assert handler.calls == []

    def test_dispatch_by_first_segment(self, router: Router, handler: RecordingHandler):
        response = router.handle(make_request("GET", "/echo/abc"))

        assert response.body == b"echo|abc"
        assert handler.calls == [["echo", "abc"]]

    def test_method_does_not_affect_routing(self, router: Router):
        response = router.handle(make_request("DELETE", "/user-agent"))

        assert response.status == HTTPStatus.OK

    def test_unknown_segment_404(self, router: Router, handler: RecordingHandler):
        response = router.handle(make_request("GET", "/nope"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""
        assert handler.calls == []

    def test_prefix_is_not_a_match(self, router: Router):
        """Test that 'echoes' does not route to 'echo'."""
        response = router.handle(make_request("GET", "/echoes/abc"))

        assert response.status == HTTPStatus.NOT_FOUND

    def test_routes_are_read_only(self, router: Router):
        with pytest.raises(TypeError):
            router.routes["files"] = RecordingHandler()

    def test_routes_copied_at_construction(self, handler: RecordingHandler):
        """Test that mutating the source dict afterwards has no effect."""
        table = {"echo": handler}
        router = Router(table)
        table["late"] = handler

        response = router.handle(make_request("GET", "/late"))

        assert response.status == HTTPStatus.NOT_FOUND
