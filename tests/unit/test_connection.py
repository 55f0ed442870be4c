"""
Unit tests for the Connection wrapper, using socket pairs.
"""

import socket
import time
from typing import Generator

import pytest

from minihttp.core.connection import DRAIN_TIMEOUT, Connection, ConnectionState
from minihttp.errors import DecodeError, StreamFlushError, StreamReadError, StreamWriteError
from minihttp.http.response import ResponseBuilder


@pytest.fixture
def pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for s in (server_side, client_side):
        try:
            s.close()
        except OSError:
            pass


def make_conn(sock: socket.socket, buffer_size: int = 1024) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 40000), buffer_size=buffer_size)


class TestReading:

    def test_reads_request(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET / HTTP/1.1\r\n\r\n")

        conn = make_conn(server_side)
        assert conn.read_request() == b"GET / HTTP/1.1\r\n\r\n"
        assert conn.state is ConnectionState.READING

    def test_read_is_bounded(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"A" * 3000)

        conn = make_conn(server_side)
        assert len(conn.read_request()) <= 1024

    def test_zero_bytes_returned_as_is(self, pair):
        server_side, client_side = pair
        client_side.shutdown(socket.SHUT_WR)

        assert make_conn(server_side).read_request() == b""

    def test_read_failure(self, pair):
        server_side, _ = pair
        conn = make_conn(server_side)
        server_side.close()

        with pytest.raises(StreamReadError):
            conn.read_request()

    def test_decode(self, pair):
        server_side, _ = pair
        conn = make_conn(server_side)

        assert conn.decode("GET /é".encode("utf-8")) == "GET /é"
        assert conn.state is ConnectionState.PROCESSING

    def test_decode_failure(self, pair):
        server_side, _ = pair
        with pytest.raises(DecodeError):
            make_conn(server_side).decode(b"GET /\xff\xfe")


class TestWriting:

    def test_send_response(self, pair):
        server_side, client_side = pair
        response = ResponseBuilder().body(b"hello").build()

        conn = make_conn(server_side)
        conn.send_response(response)
        conn.close()

        received = b""
        while chunk := client_side.recv(4096):
            received += chunk
        assert received == response.to_bytes()
        assert conn.state is ConnectionState.CLOSED

    def test_send_on_closed_socket(self, pair):
        server_side, _ = pair
        conn = make_conn(server_side)
        server_side.close()

        with pytest.raises((StreamWriteError, StreamFlushError)):
            conn.send_response(ResponseBuilder().build())

    def test_close_is_idempotent(self, pair):
        server_side, _ = pair
        conn = make_conn(server_side)
        conn.close()
        conn.close()
        assert conn.state is ConnectionState.CLOSED

    def test_context_manager_closes(self, pair):
        server_side, _ = pair
        with make_conn(server_side) as conn:
            pass
        assert conn.state is ConnectionState.CLOSED

    def test_peer(self, pair):
        server_side, _ = pair
        conn = make_conn(server_side)
        assert conn.peer == "127.0.0.1:40000"
        assert conn.client_ip == "127.0.0.1"
        assert conn.client_port == 40000


class TestClosing:
    """close() only waits on clients whose request overflowed the buffer."""

    def test_short_request_closes_without_draining(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET /index.html HTTP/1.1\r\n\r\n")

        conn = make_conn(server_side)
        conn.read_request()
        assert not conn.truncated

        started = time.monotonic()
        conn.close()
        assert time.monotonic() - started < 0.2

    def test_full_buffer_drain_is_bounded(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"A" * 32)

        conn = make_conn(server_side, buffer_size=16)
        assert len(conn.read_request()) == 16
        assert conn.truncated

        # Client keeps its end open and sends nothing more
        started = time.monotonic()
        conn.close()
        assert time.monotonic() - started < DRAIN_TIMEOUT + 0.5
        assert conn.state is ConnectionState.CLOSED
