"""
Socket-level components: the accept loop and the per-client connection
wrapper. Neither knows anything about HTTP beyond sending prepared bytes.
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
]
