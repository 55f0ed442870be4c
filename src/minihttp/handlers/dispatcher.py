"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Turns decoded request text into a complete HTTPResponse.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Dispatch Flow                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   "GET /index.html HTTP/1.1 ..."                                    │
    │        │                                                            │
    │        ▼                                                            │
    │   parse_request()  ── fewer than 2 tokens ──► InvalidRequestError   │
    │        │                                                            │
    │        ▼                                                            │
    │   method lookup    ── unknown method ───► UnsupportedRequestType    │
    │        │                                                            │
    │        ├── GET ──────────────► get()                                │
    │        │                         ├── resolve path                   │
    │        │                         ├── 200 / 404 / unauthorized code  │
    │        │                         └── unsupported extension → 400    │
    │        │                                                            │
    │        └── POST PATCH PUT DELETE ─► 501 Not Implemented             │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
GET STATUS SELECTION
=============================================================================

The status is decided in two passes:

1. From path resolution:
       found           → 200, body = file bytes
       not found       → 404, body = "404 Not found"
       contains ".."   → unauthorized code, body = "<code> Unauthorized"

2. From the REQUESTED extension (not the file's real one). If it has no
   content type, the response becomes 400 "400 Bad Request" as text/plain,
   whatever pass 1 decided. A real, readable file still gets a 400.

The unauthorized code defaults to 504. That is what deployed clients have
always seen, odd as it is; there is no 504 registry entry, so the phrase is
taken from 401 Unauthorized. Configure unauthorized_status=401 to send the
registered code instead.

=============================================================================
"""

import logging
from typing import Callable, Optional

from ..errors import (
    FileReadError,
    MethodNotImplementedError,
    ResourceNotFoundError,
    UnauthorizedPathError,
    UnsupportedRequestTypeError,
)
from ..http.mime_types import DEFAULT_EXTENSION, get_content_type
from ..http.request import HTTPRequest, parse_request
from ..http.response import HTTPResponse, ResponseBuilder, not_implemented
from ..http.status_codes import HTTPStatus
from .static import PathResolver


logger = logging.getLogger(__name__)

DEFAULT_UNAUTHORIZED_STATUS = 504

MethodHandler = Callable[[HTTPRequest], HTTPResponse]


class RequestDispatcher:
    """
    Routes a request by method and builds its response.

    Args:
        resolver: Maps request paths onto the served root.
        unauthorized_status: Code sent for paths rejected by the traversal
                             guard.
        fail_on_unimplemented: Raise MethodNotImplementedError for write
                               methods instead of answering 501.
    """

    def __init__(
        self,
        resolver: Optional[PathResolver] = None,
        unauthorized_status: int = DEFAULT_UNAUTHORIZED_STATUS,
        fail_on_unimplemented: bool = False,
    ):
        self.resolver = resolver or PathResolver()
        self.unauthorized_status = unauthorized_status
        self.fail_on_unimplemented = fail_on_unimplemented

        self._handlers: dict[str, MethodHandler] = {
            "GET": self.get,
            "POST": self.not_implemented,
            "PATCH": self.not_implemented,
            "PUT": self.not_implemented,
            "DELETE": self.not_implemented,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    def handle(
        self,
        raw_request: str,
        client_address: Optional[tuple[str, int]] = None,
    ) -> HTTPResponse:
        """
        Dispatch decoded request text.

        Raises:
            InvalidRequestError: Request line cannot be split.
            UnsupportedRequestTypeError: Method outside GET/POST/PATCH/PUT/DELETE.
            MethodNotImplementedError: Write method with fail_on_unimplemented.
            FileReadError: The resolved file could not be read.
        """
        return self.dispatch(parse_request(raw_request, client_address))

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Route an already parsed request. Raises as handle() does."""
        handler = self._handlers.get(request.method)
        if handler is None:
            raise UnsupportedRequestTypeError(request.method)

        logger.info(f"Received {request.method} request from {_peer(request.client_address)}")
        return handler(request)

    # =========================================================================
    # METHOD HANDLERS
    # =========================================================================

    def get(self, request: HTTPRequest) -> HTTPResponse:
        builder = ResponseBuilder()
        extension = request.extension

        try:
            file = self.resolver.resolve(request.raw_path)
        except ResourceNotFoundError:
            builder.status_body(HTTPStatus.NOT_FOUND)
        except UnauthorizedPathError:
            builder.status_body(self.unauthorized_status, HTTPStatus.UNAUTHORIZED.phrase)
        else:
            with file:
                try:
                    content = file.read()
                except OSError as e:
                    raise FileReadError(str(e)) from e
            builder.status(HTTPStatus.OK).body(content)

        content_type = get_content_type(extension)
        if content_type is None:
            logger.debug(f"Unsupported extension {extension!r} for {request.raw_path}")
            extension = DEFAULT_EXTENSION
            content_type = get_content_type(extension)
            builder.status_body(HTTPStatus.BAD_REQUEST)

        return builder.content_type(content_type).build()

    def not_implemented(self, request: HTTPRequest) -> HTTPResponse:
        if self.fail_on_unimplemented:
            raise MethodNotImplementedError(request.method)
        return not_implemented()


def _peer(address: Optional[tuple[str, int]]) -> str:
    if address is None:
        return "unknown peer"
    return f"{address[0]}:{address[1]}"
