"""
Unit tests for the buffered client connection.
"""

import socket

import pytest

from minihttp.core.connection import Connection, ConnectionState
from minihttp.http.request import RequestParser


@pytest.fixture
def pair():
    """A connected (server side, client side) socket pair."""
    server_sock, client_sock = socket.socketpair()
    yield server_sock, client_sock
    client_sock.close()
    server_sock.close()


def make_conn(server_sock: socket.socket, **kwargs) -> Connection:
    return Connection(socket=server_sock, address=("127.0.0.1", 5555), **kwargs)


class TestConnectionReading:
    """Tests for readline() and read()."""

    def test_readline_across_chunks(self, pair):
        server_sock, client_sock = pair
        client_sock.sendall(b"GET / HT")
        client_sock.sendall(b"TP/1.1\r\nrest")
        client_sock.shutdown(socket.SHUT_WR)

        conn = make_conn(server_sock, buffer_size=4)

        assert conn.readline() == b"GET / HTTP/1.1\r\n"
        assert conn.readline() == b"rest"
        assert conn.readline() == b""
        assert conn.state == ConnectionState.READING

    def test_read_returns_buffered_first(self, pair):
        server_sock, client_sock = pair
        client_sock.sendall(b"line\nbody")
        client_sock.shutdown(socket.SHUT_WR)

        conn = make_conn(server_sock)
        conn.readline()

        assert conn.read(2) == b"bo"
        assert conn.read(10) == b"dy"
        assert conn.read(10) == b""

    def test_read_zero(self, pair):
        server_sock, _ = pair

        assert make_conn(server_sock).read(0) == b""

    def test_timeout_reads_as_eof(self, pair):
        server_sock, _ = pair
        conn = make_conn(server_sock, timeout=0.1)

        assert conn.readline() == b""

    def test_parser_reads_from_connection(self, pair):
        server_sock, client_sock = pair
        client_sock.sendall(
            b"POST /files/a HTTP/1.1\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

        request = RequestParser().read(make_conn(server_sock, timeout=1.0), ("127.0.0.1", 5555))

        assert request.method == "POST"
        assert request.body == b"hello"
        assert request.client_address == ("127.0.0.1", 5555)


class TestConnectionLifecycle:
    """Tests for sending and closing."""

    def test_send_response(self, pair):
        server_sock, client_sock = pair
        conn = make_conn(server_sock)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert conn.state == ConnectionState.WRITING
        assert client_sock.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_send_after_peer_closed(self, pair):
        server_sock, client_sock = pair
        client_sock.close()

        assert make_conn(server_sock).send_response(b"x" * 1024 * 1024) is False

    def test_context_manager_closes(self, pair):
        server_sock, client_sock = pair
        client_sock.shutdown(socket.SHUT_WR)

        with make_conn(server_sock) as conn:
            conn.send_response(b"bye")

        assert conn.state == ConnectionState.CLOSED
        assert client_sock.recv(1024) == b"bye"
        assert client_sock.recv(1024) == b""

    def test_close_is_idempotent(self, pair):
        server_sock, client_sock = pair
        client_sock.shutdown(socket.SHUT_WR)
        conn = make_conn(server_sock)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_client_details(self, pair):
        server_sock, _ = pair
        conn = make_conn(server_sock)

        assert (conn.client_ip, conn.client_port) == ("127.0.0.1", 5555)
        assert conn.age >= 0
        conn.close()
