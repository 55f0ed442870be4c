"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response exchange.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Lifecycle                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   NEW ──► read_request() ──► READING                                │
    │                │                                                    │
    │                ▼                                                    │
    │           decode() ─────────► PROCESSING                            │
    │                │                                                    │
    │                ▼                                                    │
    │           send_response() ──► WRITING                               │
    │                │                                                    │
    │                ▼                                                    │
    │           close() ──────────► CLOSED                                │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive: after one exchange, or after any error, the
connection is closed.

=============================================================================
READING
=============================================================================

The request is read with a SINGLE recv() of at most buffer_size bytes
(1024 by default). No buffering loop, no Content-Length handling. A request
longer than the buffer is truncated, and a truncation that splits a UTF-8
sequence makes decode() fail. Zero bytes is returned as-is; what it means
is the server's decision.

close() drains leftover input only after a read that filled the buffer,
bounded by DRAIN_TIMEOUT seconds and DRAIN_LIMIT bytes in total.

=============================================================================
WRITING
=============================================================================

Headers are written, then the body, then the stream is flushed. Each step
maps its failure to its own error so the log says which one broke.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from ..errors import DecodeError, StreamFlushError, StreamReadError, StreamWriteError
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 1024

# Bound the drain on close; reads and writes never time out
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A single client connection.

    Attributes:
        socket: The client socket returned by accept().
        address: Client's (ip, port) tuple.
        buffer_size: Maximum bytes read for the request.
        id: Short identifier for log lines.
        state: Where in the exchange this connection is.
        truncated: The last read filled the whole buffer.
    """

    socket: socket.socket
    address: tuple[str, int]
    buffer_size: int = DEFAULT_BUFFER_SIZE
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    truncated: bool = False

    def __post_init__(self):
        # Client sockets block without a timeout
        self.socket.settimeout(None)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def peer(self) -> str:
        return f"{self.client_ip}:{self.client_port}"

    def read_request(self) -> bytes:
        """
        Read the raw request, at most buffer_size bytes, in one call.

        Returns:
            The bytes read. May be empty.

        Raises:
            StreamReadError: The socket read failed.
        """
        self.state = ConnectionState.READING
        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            raise StreamReadError(str(e)) from e
        self.truncated = len(data) >= self.buffer_size
        return data

    def decode(self, data: bytes) -> str:
        """
        Decode request bytes as strict UTF-8.

        Raises:
            DecodeError: The bytes are not valid UTF-8.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError() from e
        self.state = ConnectionState.PROCESSING
        return text

    def send_response(self, response: HTTPResponse) -> None:
        """
        Write headers, then body, then flush.

        Raises:
            StreamWriteError: A write failed.
            StreamFlushError: The final flush failed.
        """
        self.state = ConnectionState.WRITING
        try:
            stream = self.socket.makefile("wb")
        except OSError as e:
            raise StreamWriteError(str(e)) from e

        try:
            try:
                stream.write(response.headers)
                stream.write(response.body)
            except OSError as e:
                raise StreamWriteError(str(e)) from e

            try:
                stream.flush()
            except OSError as e:
                raise StreamFlushError(str(e)) from e
        finally:
            try:
                stream.close()
            except OSError:
                pass  # Already reported by write/flush

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR): client sees end-of-stream right after the body
        2. Drain, only if the request filled the read buffer: read what the
           client sent past our single recv(). Closing with unread data
           makes the kernel send RST, and the client may lose the response.
           At most DRAIN_LIMIT bytes within DRAIN_TIMEOUT seconds in total.
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Client already gone

        if self.truncated:
            self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed")

    def _drain(self):
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    break
                drained += len(chunk)
        except (socket.timeout, OSError):
            pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
