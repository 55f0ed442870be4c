"""
=============================================================================
SERVER ERRORS
=============================================================================

Every failure the server can hit has its own exception class, all rooted at
HTTPServerError. The class tells the caller how to react:

    ┌──────────────────────────────┬────────────────────────────────────────┐
    │ Raised while...              │ What the server does                   │
    ├──────────────────────────────┼────────────────────────────────────────┤
    │ binding the listener         │ BindError: serve_forever() raises      │
    │ accepting a client           │ AcceptError: log, keep listening       │
    │ reading the request          │ StreamReadError / DecodeError: drop    │
    │ reading zero bytes           │ EmptyReadError: serve loop terminates  │
    │ dispatching                  │ InvalidRequest / Unsupported... : drop │
    │ resolving the path           │ Unauthorized / NotFound: error reply   │
    │ reading the file             │ FileReadError: drop                    │
    │ writing the response         │ StreamWrite / StreamFlush: log         │
    │ loading configuration        │ Config*Error: CLI exits with 2         │
    └──────────────────────────────┴────────────────────────────────────────┘

"Drop" means the connection is closed without a response and the server
goes back to accepting.

=============================================================================
"""


class HTTPServerError(Exception):
    """Base class for all server errors."""


# =============================================================================
# SOCKET ERRORS
# =============================================================================

class BindError(HTTPServerError):
    def __init__(self, port, reason: str):
        super().__init__(f"Failed to bind listener to port `{port}`: `{reason}`")
        self.port = port


class AcceptError(HTTPServerError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to accept connection with error: `{reason}`")


class StreamReadError(HTTPServerError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to read stream with error: `{reason}`")


class EmptyReadError(StreamReadError):
    """
    The client connection yielded zero bytes.

    Unlike the other read errors this one is fatal to the whole serve loop.
    """

    def __init__(self):
        super().__init__("Received 0 bytes, unknown")


class StreamWriteError(HTTPServerError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to write stream with error: `{reason}`")


class StreamFlushError(HTTPServerError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to flush stream with error: `{reason}`")


class DecodeError(HTTPServerError):
    def __init__(self):
        super().__init__("Failed to convert request body to UTF-8")


# =============================================================================
# REQUEST ERRORS
# =============================================================================

class InvalidRequestError(HTTPServerError):
    def __init__(self, request: str):
        super().__init__(f"Invalid request: `{request}`")
        self.request = request


class UnsupportedRequestTypeError(HTTPServerError):
    def __init__(self, method: str):
        super().__init__(f"Unsupported request type: `{method}`")
        self.method = method


class MethodNotImplementedError(HTTPServerError):
    def __init__(self, method: str):
        super().__init__(f"Request type not implemented: `{method}`")
        self.method = method


class UnauthorizedPathError(HTTPServerError):
    def __init__(self, path: str):
        super().__init__(
            f"Requester attempted to access path outside authorized root: `{path}`"
        )
        self.path = path


class ResourceNotFoundError(HTTPServerError):
    def __init__(self, path: str):
        super().__init__(f"Server could not locate resource at `{path}`")
        self.path = path


class FileReadError(HTTPServerError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to read file: `{reason}`")


class UnknownStatusError(LookupError):
    """
    A status code outside the registry was used to build a response.

    This is a programming error, so it deliberately does not derive from
    HTTPServerError and is never handled by the request path.
    """

    def __init__(self, code: int):
        super().__init__(f"No registered status code {code}")
        self.code = code


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigReadError(HTTPServerError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to read configuration: `{reason}`")


class ConfigParseError(HTTPServerError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to parse configuration: `{reason}`")


class ConfigValidationError(HTTPServerError, ValueError):
    pass
