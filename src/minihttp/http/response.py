"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses byte for byte. Every response this server sends
has exactly the same shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ HTTP/1.1 200 OK\r\n                    ← Status line                │
    │ Content-Type: text/html\r\n            ← Content type               │
    │ Content-Length: 10\r\n                 ← Exact body length          │
    │ \r\n                                   ← Blank line                 │
    │ <html>...                              ← Body bytes                 │
    └─────────────────────────────────────────────────────────────────────┘

No Date, no Server, no Connection header. Line order is fixed and clients
of the original server depend on it.

=============================================================================
HEADER LINES
=============================================================================

Each header line is a HeaderLine value tagged with its kind. One function,
render(), turns any of them into text:

    HeaderLine.status(404, "Not found")     → "HTTP/1.1 404 Not found"
    HeaderLine.content_type(TEXT_PLAIN)     → "Content-Type: text/plain"
    HeaderLine.content_length(13)           → "Content-Length: 13"

build_headers() joins a sequence of lines with CRLF and appends the blank
line terminator.

=============================================================================
BUILDER PATTERN
=============================================================================

ResponseBuilder collects status, content type and body, and computes
Content-Length in build(). Because the length is computed last, it always
matches the body that is actually sent, even after the body is swapped
for an error phrase:

    response = (ResponseBuilder()
        .status(HTTPStatus.NOT_FOUND)
        .content_type(TEXT_PLAIN)
        .body(HTTPStatus.NOT_FOUND.status_string)
        .build())

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from .mime_types import ContentType, TEXT_PLAIN
from .status_codes import HTTPStatus, status_for


HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


class HeaderKind(Enum):
    STATUS = "status"
    CONTENT_TYPE = "content-type"
    CONTENT_LENGTH = "content-length"


@dataclass(frozen=True)
class HeaderLine:
    """
    One response header line.

    `value` depends on `kind`:
        STATUS          (code, phrase) tuple
        CONTENT_TYPE    ContentType
        CONTENT_LENGTH  int
    """

    kind: HeaderKind
    value: object

    @classmethod
    def status(cls, code: int, phrase: str) -> "HeaderLine":
        return cls(HeaderKind.STATUS, (code, phrase))

    @classmethod
    def content_type(cls, content_type: ContentType) -> "HeaderLine":
        return cls(HeaderKind.CONTENT_TYPE, content_type)

    @classmethod
    def content_length(cls, length: int) -> "HeaderLine":
        return cls(HeaderKind.CONTENT_LENGTH, length)

    def render(self) -> str:
        return render(self)


def render(line: HeaderLine) -> str:
    """Serialize a single header line, without its trailing CRLF."""
    if line.kind is HeaderKind.STATUS:
        code, phrase = line.value
        return f"{HTTP_VERSION} {code} {phrase}"
    if line.kind is HeaderKind.CONTENT_TYPE:
        return f"Content-Type: {line.value}"
    if line.kind is HeaderKind.CONTENT_LENGTH:
        return f"Content-Length: {line.value}"
    raise ValueError(f"Unknown header kind: {line.kind}")


def build_headers(lines: Iterable[HeaderLine]) -> str:
    """
    Join header lines into the full header block.

    The block ends with the blank line that separates headers from body:

        "HTTP/1.1 200 OK\\r\\nContent-Length: 0\\r\\n\\r\\n"
    """
    return CRLF.join(render(line) for line in lines) + CRLF + CRLF


@dataclass(frozen=True)
class HTTPResponse:
    """
    A fully serialized response.

    Attributes:
        headers: Header block, already encoded, ending in CRLF CRLF.
        body: Raw body bytes.
        status_code: The code on the status line (kept for logging).
        content_type: The content type sent (kept for logging).
    """

    headers: bytes
    body: bytes
    status_code: int = HTTPStatus.OK
    content_type: ContentType = TEXT_PLAIN

    @property
    def content_length(self) -> int:
        return len(self.body)

    def to_bytes(self) -> bytes:
        """Headers followed by body, exactly as written to the socket."""
        return self.headers + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Each method returns `self`, enabling chaining; build() produces the
    immutable HTTPResponse.
    """

    def __init__(self):
        self._code: int = HTTPStatus.OK
        self._phrase: str = HTTPStatus.OK.phrase
        self._content_type: ContentType = TEXT_PLAIN
        self._body: bytes = b""

    def status(self, code: int, phrase: Optional[str] = None) -> "ResponseBuilder":
        """
        Set the status line.

        Args:
            code: Numeric status code.
            phrase: Reason phrase. When omitted the code must be in the
                    registry; an unregistered code raises UnknownStatusError.
        """
        if phrase is None:
            phrase = status_for(code).phrase
        self._code = int(code)
        self._phrase = phrase
        return self

    def content_type(self, content_type: ContentType) -> "ResponseBuilder":
        self._content_type = content_type
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the body. Strings are UTF-8 encoded."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = bytes(body)
        return self

    def status_body(self, code: int, phrase: Optional[str] = None) -> "ResponseBuilder":
        """Set status and use its "<code> <phrase>" string as the body."""
        self.status(code, phrase)
        return self.body(f"{self._code} {self._phrase}")

    def header_lines(self) -> list[HeaderLine]:
        return [
            HeaderLine.status(self._code, self._phrase),
            HeaderLine.content_type(self._content_type),
            HeaderLine.content_length(len(self._body)),
        ]

    def build(self) -> HTTPResponse:
        headers = build_headers(self.header_lines())
        return HTTPResponse(
            headers=headers.encode("utf-8"),
            body=self._body,
            status_code=self._code,
            content_type=self._content_type,
        )


def not_implemented() -> HTTPResponse:
    """The fixed 501 response for write methods."""
    return (ResponseBuilder()
        .status_body(HTTPStatus.NOT_IMPLEMENTED)
        .content_type(TEXT_PLAIN)
        .build())
