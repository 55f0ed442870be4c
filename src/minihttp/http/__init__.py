"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

Everything that knows about the wire format lives here:

    request.py       Request-line parsing and extension fallback
    response.py      Header lines, response builder
    status_codes.py  Closed status registry
    mime_types.py    Closed extension → content-type registry

Nothing in this package touches sockets or the filesystem.

=============================================================================
"""

from .request import HTTPRequest, parse_request, extension_of
from .response import (
    HTTPResponse,
    ResponseBuilder,
    HeaderKind,
    HeaderLine,
    build_headers,
    not_implemented,
)
from .status_codes import HTTPStatus, lookup, status_for
from .mime_types import ContentType, get_content_type, TEXT_PLAIN

__all__ = [
    # Request parsing
    "HTTPRequest",
    "parse_request",
    "extension_of",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "HeaderKind",
    "HeaderLine",
    "build_headers",
    "not_implemented",

    # Status codes
    "HTTPStatus",
    "lookup",
    "status_for",

    # MIME types
    "ContentType",
    "get_content_type",
    "TEXT_PLAIN",
]
