"""
=============================================================================
MINIHTTP - Minimal Static-File HTTP/1.1 Server
=============================================================================

Reads one request per connection from a raw socket, maps the request path
onto a served root, and answers with a hand-built response:

    HTTP/1.1 200 OK\r\n
    Content-Type: text/html\r\n
    Content-Length: 10\r\n
    \r\n
    <body bytes>

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer: read, dispatch, respond
    ├── config.py            # ServerConfig dataclass, TOML/env loading
    ├── errors.py            # Error taxonomy
    ├── log.py               # Logging setup and access log
    ├── core/
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # One client socket, one exchange
    ├── http/
    │   ├── request.py       # Request-line parsing
    │   ├── response.py      # Header lines and response builder
    │   ├── status_codes.py  # Closed status registry
    │   └── mime_types.py    # Closed content-type registry
    └── handlers/
        ├── static.py        # Root mapping and traversal guard
        └── dispatcher.py    # Method routing, status selection

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=8080, root="./public"))
    server.serve_forever()

Or from a shell:

    python -m minihttp --root ./public --port 8080

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, serve
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "serve", "__version__"]
