"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with a handful of status codes, so the registry
is a small closed table instead of the full RFC 7231 list.

    ┌────────┬──────────────────┬──────────────────────────────────────────┐
    │  Code  │ Phrase           │ When                                     │
    ├────────┼──────────────────┼──────────────────────────────────────────┤
    │  200   │ OK               │ File found and read                      │
    │  400   │ Bad Request      │ Requested extension has no content type  │
    │  401   │ Unauthorized     │ Phrase used for traversal rejections     │
    │  404   │ Not found        │ Nothing exists at root + path            │
    │  501   │ Not Implemented  │ POST / PUT / PATCH / DELETE              │
    └────────┴──────────────────┴──────────────────────────────────────────┘

Codes outside this table cannot be looked up. The one code that is emitted
without a registry entry is the unauthorized-path code (504 by default),
which always carries the Unauthorized phrase explicitly. See
handlers/dispatcher.py.

The phrase is also used as a tiny body for error responses:

    HTTPStatus.NOT_FOUND.status_string  ->  "404 Not found"

=============================================================================
"""

from enum import IntEnum
from typing import Optional

from ..errors import UnknownStatusError


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not found'
    """

    OK = 200                    # Resource read and returned
    BAD_REQUEST = 400           # Unsupported extension
    UNAUTHORIZED = 401          # Path escaped the root
    NOT_FOUND = 404             # No such resource
    NOT_IMPLEMENTED = 501       # Write methods

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def status_string(self) -> str:
        """The "<code> <phrase>" form used as a placeholder body."""
        return status_string(self.value, self.phrase)


# Note "Not found" is lowercase on purpose; clients see these exact bytes.
_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.NOT_FOUND: "Not found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}


def lookup(code: int) -> Optional[HTTPStatus]:
    """
    Find the registry entry for a numeric code.

    Returns:
        The HTTPStatus member, or None for codes outside the table.
    """
    try:
        return HTTPStatus(code)
    except ValueError:
        return None


def status_for(code: int) -> HTTPStatus:
    """
    Like lookup(), but for codes the server itself picked.

    Raises:
        UnknownStatusError: The code is not registered. This means a bug in
            the caller, not a bad request.
    """
    status = lookup(code)
    if status is None:
        raise UnknownStatusError(code)
    return status


def status_string(code: int, phrase: str) -> str:
    return f"{code} {phrase}"
