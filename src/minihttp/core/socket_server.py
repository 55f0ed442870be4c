"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Everything HTTP-specific is
delegated to a connection handler callback.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a TCP socket
    2. bind()      Associate it with host:port   ── failure → BindError
    3. listen()    Start queueing incoming connections
    4. accept()    Wait for a client, get a NEW socket for it
    5. close()     Release the listening socket on shutdown

=============================================================================
ACCEPT LOOP
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │   while running:                                                │
    │       accept()          ── OSError → log AcceptError, continue  │
    │       Connection(...)   wrap the client socket                  │
    │       handler(conn)     ── exceptions propagate and END loop    │
    └─────────────────────────────────────────────────────────────────┘

The handler is expected to deal with every per-connection error itself.
Anything it lets escape is fatal to the loop on purpose: that is how a
zero-byte read terminates the server.

accept() on the listening socket polls with a one second timeout, only so
that shutdown() is noticed. Client sockets have no timeout.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM trigger shutdown() when the server runs on the
main thread. Signal handlers cannot be installed from other threads, so a
server started from a background thread (tests, embedding) skips them.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional

from ..errors import AcceptError, BindError
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer("127.0.0.1", 8080)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8080,
        backlog: int = 128,
        buffer_size: int = 1024,
    ):
        """
        Note: This does NOT create the socket. The socket is created in
        start().
        """
        self.host = host
        self.port = port
        self.backlog = backlog
        self.buffer_size = buffer_size

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_port: Optional[int] = None

        # Set once the socket is listening, for callers on other threads
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> tuple[str, int]:
        """The bound (host, port). The port is the real one once listening."""
        return (self.host, self._bound_port if self._bound_port is not None else self.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" while an old socket sits in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses go out in two writes; don't let Nagle hold the body back
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until shutdown() is called or the handler raises.

        Raises:
            BindError: The address could not be bound.
            Exception: Whatever the connection handler lets escape.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.host, self.port))
        except OSError as e:
            self._socket.close()
            self._socket = None
            logger.error(f"Failed to bind to {self.host}:{self.port}: {e}")
            raise BindError(self.port, str(e)) from e

        self._socket.listen(self.backlog)
        self._bound_port = self._socket.getsockname()[1]

        self._running = True
        self._setup_signals()

        logger.info(f"HTTP server online, open for connections on {self.host}:{self._bound_port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us re-check self._running
                continue
            except OSError as e:
                if not self._running:
                    break
                logger.error(str(AcceptError(str(e))))
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.buffer_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from any thread, and more than once. The loop notices
        within one poll interval.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready_event.wait(timeout)
