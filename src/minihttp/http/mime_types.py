"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

The Content-Type header tells the client how to interpret the body:

    Content-Type: text/html
                  ──── ────
                   │     │
                   │     └── Subtype (specific format)
                   └──────── Type (general category)

Only five extensions are served. Anything else is a Bad Request, decided by
the dispatcher, so get_content_type() simply returns None for it.

    ┌───────────┬─────────────────┐
    │ Extension │ Content-Type    │
    ├───────────┼─────────────────┤
    │ txt       │ text/plain      │
    │ html      │ text/html       │
    │ css       │ text/css        │
    │ png       │ image/png       │
    │ svg       │ image/svg+xml   │
    └───────────┴─────────────────┘

Matching is exact and case-sensitive: "HTML" and ".html" are both unknown.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ContentType:
    """A MIME type split into its two halves."""

    type: str
    subtype: str

    def __str__(self) -> str:
        return f"{self.type}/{self.subtype}"


TEXT_PLAIN = ContentType("text", "plain")

MIME_TYPES = {
    "txt": TEXT_PLAIN,
    "html": ContentType("text", "html"),
    "css": ContentType("text", "css"),
    "png": ContentType("image", "png"),
    "svg": ContentType("image", "svg+xml"),
}

# Used whenever the requested extension is unsupported or absent
DEFAULT_EXTENSION = "txt"


def get_content_type(extension: str) -> Optional[ContentType]:
    """
    Get the content type for a bare file extension.

    Examples:
        >>> str(get_content_type("svg"))
        'image/svg+xml'

        >>> get_content_type("js") is None
        True
    """
    return MIME_TYPES.get(extension)


def is_supported(extension: str) -> bool:
    return extension in MIME_TYPES
