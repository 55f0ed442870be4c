"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   SocketServer ──accept──► _handle_connection(conn)                 │
    │                                  │                                  │
    │                                  ├─ read_request()  (≤ 1024 bytes)  │
    │                                  ├─ decode()        (strict UTF-8)  │
    │                                  ├─ zero bytes?  → end serve loop   │
    │                                  │                                  │
    │                                  └─► _respond(conn, text)           │
    │                                        │   (inline, or on a worker) │
    │                                        ├─ RequestDispatcher         │
    │                                        ├─ send_response()           │
    │                                        └─ close()                   │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR POLICY
=============================================================================

Per-connection failures are logged and the connection is dropped; the
server goes back to accept():

    read / decode failure      → drop, no response
    dispatch failure           → drop, no response
    write / flush failure      → logged

Two things end serve_forever():

    bind failure               → BindError raised before serving
    zero bytes read            → see empty_read_action below

=============================================================================
ZERO-BYTE READS
=============================================================================

A client that connects and sends nothing ends the serve loop. How it ends
is chosen by ServerConfig.empty_read_action:

    "error"   serve_forever() raises EmptyReadError (CLI exits with 1)
    "stop"    serve_forever() returns normally (CLI exits with 0)

=============================================================================
WORKERS
=============================================================================

With workers=0 (default) every connection is fully handled before the next
accept(). With workers=N, dispatch and write run on a ThreadPoolExecutor of
N threads. Reading, decoding and the zero-byte check stay on the accept
thread in both modes, so a zero-byte read still ends the loop. Still one
request per connection.

=============================================================================
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from .config import ServerConfig
from .core import Connection, SocketServer
from .errors import EmptyReadError, HTTPServerError
from .handlers import PathResolver, RequestDispatcher
from .http.request import parse_request
from .log import log_access


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    A minimal static-file HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(port=8080, root="./public"))
        server.serve_forever()      # blocks

    Constructible with no arguments: port 8080, serving the current
    working directory.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self.dispatcher = RequestDispatcher(
            resolver=PathResolver(self.config.root),
            unauthorized_status=self.config.unauthorized_status,
            fail_on_unimplemented=self.config.fail_on_unimplemented,
        )

        self._socket_server = SocketServer(
            host=self.config.host,
            port=self.config.port,
            backlog=self.config.backlog,
            buffer_size=self.config.buffer_size,
        )

        self._pool: Optional[ThreadPoolExecutor] = None

    @property
    def address(self) -> tuple[str, int]:
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def serve_forever(self):
        """
        Serve until shutdown(), a signal, or a zero-byte read.

        Raises:
            BindError: Listener could not be bound.
            EmptyReadError: A client sent zero bytes and empty_read_action
                            is "error".
        """
        if self.config.workers > 0:
            self._pool = ThreadPoolExecutor(
                max_workers=self.config.workers,
                thread_name_prefix="minihttp-worker",
            )
            logger.info(f"Dispatching on {self.config.workers} worker threads")

        logger.info(f"Serving files from {self.config.root!r}")

        try:
            self._socket_server.start(self._handle_connection)
        finally:
            if self._pool is not None:
                self._pool.shutdown(wait=True)
                self._pool = None
            logger.info("Server stopped")

    def shutdown(self):
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Read and decode one request, then respond to it.

        Runs on the accept thread. Raises only for zero-byte reads in
        "error" mode; everything else is logged here.
        """
        try:
            data = conn.read_request()
            text = conn.decode(data)
        except HTTPServerError as e:
            logger.error(f"[{conn.id}] {e}")
            conn.close()
            return

        if not data:
            conn.close()
            self._on_empty_read()
            return

        if self._pool is not None:
            future = self._pool.submit(self._respond, conn, text)
            future.add_done_callback(self._log_worker_failure)
        else:
            self._respond(conn, text)

    def _log_worker_failure(self, future: Future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Worker failed: {error!r}", exc_info=error)

    def _on_empty_read(self):
        error = EmptyReadError()
        if self.config.empty_read_action == "stop":
            logger.error(f"{error}; stopping server")
            self._socket_server.shutdown()
            return
        raise error

    def _respond(self, conn: Connection, text: str):
        """Dispatch and write the response. Always closes the connection."""
        started_at = time.time()
        with conn:
            try:
                request = parse_request(text, conn.address)
                response = self.dispatcher.dispatch(request)
            except HTTPServerError as e:
                logger.error(f"[{conn.id}] {e}")
                return

            try:
                conn.send_response(response)
            except HTTPServerError as e:
                logger.error(f"[{conn.id}] {e}")
                return

            logger.info(f"Sent response to {conn.peer}")

            if self.config.access_log:
                log_access(
                    method=request.method,
                    path=request.raw_path,
                    status_code=response.status_code,
                    content_length=response.content_length,
                    started_at=started_at,
                    client_address=conn.address,
                    log_format=self.config.log_format,
                )


def serve(config: Optional[ServerConfig] = None):
    """Build a server from config and serve until it stops."""
    HTTPServer(config).serve_forever()


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# HTTPServer wires SocketServer, Connection and RequestDispatcher together:
#
# 1. Accept → read once → decode → zero-byte check (accept thread)
# 2. Dispatch → write → close (accept thread, or a worker)
# 3. Per-connection errors are logged and the connection dropped
# 4. Bind failure and zero-byte reads end serve_forever()
# =============================================================================
