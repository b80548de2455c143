"""
End-to-end tests: a real server on a loopback port, raw bytes over TCP.
"""

import gzip
import socket
import threading
import time

import pytest

import conftest
from conftest import send_raw, split_response
from minihttp import ServerConfig
from minihttp.middleware import Middleware
from minihttp.server import create_app


def get(path: str, **headers) -> bytes:
    lines = [f"GET {path} HTTP/1.1", "Host: localhost"]
    lines += [f"{name.replace('_', '-')}: {value}" for name, value in headers.items()]
    return ("\r\n".join(lines) + "\r\n\r\n").encode()


def post(path: str, body: bytes) -> bytes:
    head = (
        f"POST {path} HTTP/1.1\r\n"
        f"Host: localhost\r\n"
        f"Content-Type: application/octet-stream\r\n"
        f"Content-Length: {len(body)}\r\n"
        f"\r\n"
    )
    return head.encode() + body


class TestRoutes:
    """One request per route, checked byte for byte where it matters."""

    def test_root(self, test_server):
        raw = test_server.request(get("/"))

        assert raw == b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"

    def test_echo(self, test_server):
        raw = test_server.request(get("/echo/abc"))

        assert raw == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_echo_gzip(self, test_server):
        raw = test_server.request(get("/echo/abc", accept_encoding="gzip"))
        status, headers, body = split_response(raw)

        assert status == "HTTP/1.1 200 OK"
        assert headers["content-encoding"] == "gzip"
        assert int(headers["content-length"]) == len(body)
        assert gzip.decompress(body) == b"abc"

    def test_echo_other_encoding(self, test_server):
        status, headers, body = split_response(
            test_server.request(get("/echo/abc", accept_encoding="invalid-encoding"))
        )

        assert "content-encoding" not in headers
        assert body == b"abc"

    def test_user_agent(self, test_server):
        status, headers, body = split_response(
            test_server.request(get("/user-agent", user_agent="foobar/1.2.3"))
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "text/plain"
        assert headers["content-length"] == "12"
        assert body == b"foobar/1.2.3"

    def test_unknown_route(self, test_server):
        raw = test_server.request(get("/nope"))

        assert raw == b"HTTP/1.1 404 Not Found\r\nContent-Length: 0\r\n\r\n"


class TestFiles:
    """Tests for the /files/{name} round trip."""

    def test_post_then_get(self, test_server):
        created = test_server.request(post("/files/notes.txt", b"hello world"))
        assert created == b"HTTP/1.1 201 Created\r\nContent-Length: 0\r\n\r\n"
        assert (test_server.directory / "notes.txt").read_bytes() == b"hello world"

        status, headers, body = split_response(test_server.request(get("/files/notes.txt")))

        assert status == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "application/octet-stream"
        assert body == b"hello world"

    def test_binary_content(self, test_server):
        payload = bytes(range(256)) * 4
        test_server.request(post("/files/blob", payload))

        _, _, body = split_response(test_server.request(get("/files/blob")))

        assert body == payload

    def test_empty_post(self, test_server):
        raw = test_server.request(post("/files/empty", b""))

        assert raw.startswith(b"HTTP/1.1 201 Created\r\n")
        assert (test_server.directory / "empty").read_bytes() == b""

    def test_missing_file(self, test_server):
        status, _, body = split_response(test_server.request(get("/files/missing")))

        assert status == "HTTP/1.1 404 Not Found"
        assert body == b""

    def test_parent_directory_404(self, test_server):
        status, _, _ = split_response(test_server.request(get("/files/..")))

        assert status == "HTTP/1.1 404 Not Found"

    def test_unsupported_method_404(self, test_server):
        (test_server.directory / "keep").write_bytes(b"data")

        raw = test_server.request(b"DELETE /files/keep HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 404 Not Found\r\n")
        assert (test_server.directory / "keep").read_bytes() == b"data"

    def test_truncated_body_keeps_what_arrived(self, test_server):
        """Test that a body cut short by EOF is written as received."""
        request = (
            b"POST /files/short HTTP/1.1\r\n"
            b"Content-Length: 10\r\n"
            b"\r\n"
            b"abc"
        )
        raw = test_server.request(request)

        assert raw.startswith(b"HTTP/1.1 201 Created\r\n")
        assert (test_server.directory / "short").read_bytes() == b"abc"


class TestConnectionHandling:
    """Tests for the one-request-per-connection lifecycle."""

    def test_same_request_same_bytes(self, test_server):
        request = get("/echo/hello", accept_encoding="gzip")

        assert test_server.request(request) == test_server.request(request)

    def test_empty_connection_gets_nothing(self, test_server):
        assert test_server.request(b"") == b""

    @pytest.mark.parametrize("data", [
        b"garbage\r\n\r\n",
        b"GET /\r\n\r\n",
    ])
    def test_malformed_request_line_gets_nothing(self, test_server, data: bytes):
        assert test_server.request(data) == b""

    def test_server_survives_bad_request(self, test_server):
        test_server.request(b"garbage\r\n\r\n")

        assert test_server.request(get("/")).startswith(b"HTTP/1.1 200 OK\r\n")

    def test_request_in_pieces(self, test_server):
        """Test that a request split across several sends is reassembled."""
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as s:
            for piece in (b"GET /echo/sl", b"ow HTTP/1.1\r\nHo", b"st: x\r\n", b"\r\n"):
                s.sendall(piece)
                time.sleep(0.05)

            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)

        _, _, body = split_response(b"".join(chunks))
        assert body == b"slow"

    def test_connection_closed_after_response(self, test_server):
        """Test that the server closes even if the client keeps its side open."""
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as s:
            s.sendall(get("/echo/abc"))

            data = b""
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                data += chunk

        assert data.endswith(b"abc")

    def test_slow_client_does_not_block_others(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as idle:
            idle.sendall(b"GET /echo/late HTTP/1.1\r\n")

            raw = send_raw(test_server.port, get("/echo/fast"), timeout=2.0)
            assert raw.endswith(b"fast")

    def test_concurrent_requests(self, test_server):
        results = {}

        def worker(i: int):
            results[i] = send_raw(test_server.port, get(f"/echo/{i}"))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert len(results) == 20
        for i, raw in results.items():
            _, _, body = split_response(raw)
            assert body == str(i).encode()


class TestLifecycle:
    """Tests for startup and shutdown."""

    def test_port_zero_reports_real_port(self, test_server):
        assert test_server.port != 0

    def test_shutdown_stops_accepting(self, test_server):
        port = test_server.port
        test_server.stop()

        with pytest.raises(OSError):
            send_raw(port, get("/"), timeout=1.0)

    def test_custom_middleware(self, tmp_path):
        seen = []

        class Recorder(Middleware):
            def __call__(self, request, next):
                seen.append(request.path)
                return next(request)

        app = create_app(ServerConfig(
            port=0,
            directory=str(tmp_path),
            log_level="WARNING",
            access_log=False,
        )).use(Recorder())

        server = conftest.TestServer(app)
        server.start()
        try:
            raw = server.request(get("/echo/hi"))
        finally:
            server.stop()

        assert raw.endswith(b"hi")
        assert seen == ["/echo/hi"]
