"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Only the request line matters to this server. The decoded request text is
split on whitespace and the first two tokens are kept:

    GET /css/site.css HTTP/1.1\r\nHost: localhost\r\n\r\n
    ─── ─────────────
     │        │
     │        └── tokens[1]: raw path (no decoding, no query parsing)
     └─────────── tokens[0]: method

Headers, the HTTP version and any body are ignored.

=============================================================================
EXTENSION FALLBACK
=============================================================================

The extension is whatever follows the last "." in the raw path. A path
without a "." gets "txt":

    /index.html        → "html"
    /notes             → "txt"
    /archive.tar.gz    → "gz"
    /v1.2/readme       → "2/readme"     (unsupported → 400 later)

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional

from ..errors import InvalidRequestError
from .mime_types import DEFAULT_EXTENSION


@dataclass(frozen=True)
class HTTPRequest:
    """
    The parts of a request line the dispatcher routes on.

    Attributes:
        method: Method token as sent ("GET", "POST", ...). Case-sensitive.
        raw_path: Request target exactly as sent.
        extension: Effective extension, see extension_of().
        client_address: (ip, port) of the peer, when known.
    """

    method: str
    raw_path: str
    extension: str = DEFAULT_EXTENSION
    client_address: Optional[tuple[str, int]] = None


def extension_of(path: str) -> str:
    if "." not in path:
        return DEFAULT_EXTENSION
    return path.rsplit(".", 1)[1]


def parse_request(
    text: str,
    client_address: Optional[tuple[str, int]] = None,
) -> HTTPRequest:
    """
    Parse decoded request text into an HTTPRequest.

    Raises:
        InvalidRequestError: Fewer than two whitespace-separated tokens.
    """
    tokens = text.split()
    if len(tokens) < 2:
        raise InvalidRequestError(text)

    method, raw_path = tokens[0], tokens[1]
    return HTTPRequest(
        method=method,
        raw_path=raw_path,
        extension=extension_of(raw_path),
        client_address=client_address,
    )
