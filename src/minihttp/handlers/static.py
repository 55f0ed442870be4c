"""
=============================================================================
STATIC FILE RESOLUTION
=============================================================================

Maps a request path onto the served root and opens the file behind it.

=============================================================================
PATH TRAVERSAL
=============================================================================

A request like:

    GET /../../etc/passwd HTTP/1.1

must never leave the served root. The guard here is deliberately blunt: any
request path containing the two characters ".." is rejected, before the
filesystem is touched at all.

    /docs/readme.txt        → allowed
    /../secret.txt          → UnauthorizedPathError
    /notes..txt             → UnauthorizedPathError (false positive, accepted)

There is no normalization and no resolve()-and-compare step. A false positive
on a legitimate file name is acceptable; a false negative is not.

=============================================================================
MAPPING
=============================================================================

The filesystem path is the root string followed by the request path, with
nothing in between and nothing after:

    root="."        path="/index.html"   →  "./index.html"
    root="/srv/www" path="/css/a.css"    →  "/srv/www/css/a.css"

No index file for directories and no trailing-slash handling.

=============================================================================
"""

import logging
import os
from typing import BinaryIO

from ..errors import FileReadError, ResourceNotFoundError, UnauthorizedPathError


logger = logging.getLogger(__name__)

TRAVERSAL_MARKER = ".."


class PathResolver:
    """
    Resolves request paths to open file handles under a root.

    Usage:
        resolver = PathResolver("./public")
        with resolver.resolve("/index.html") as f:
            content = f.read()
    """

    def __init__(self, root: str = "."):
        """
        Args:
            root: Directory prefixed onto every request path. Kept as a
                  plain string because the mapping is concatenation.
        """
        self.root = root

    def to_local_path(self, request_path: str) -> str:
        return f"{self.root}{request_path}"

    def resolve(self, request_path: str) -> BinaryIO:
        """
        Open the file a request path points at.

        Returns:
            A binary file object opened for reading. The caller closes it.

        Raises:
            UnauthorizedPathError: The request path contains "..".
            ResourceNotFoundError: Nothing exists at root + path.
            FileReadError: The entry exists but cannot be opened.
        """
        if TRAVERSAL_MARKER in request_path:
            logger.warning(f"Path traversal attempt: {request_path}")
            raise UnauthorizedPathError(request_path)

        local_path = self.to_local_path(request_path)

        if not os.path.exists(local_path):
            raise ResourceNotFoundError(local_path)

        try:
            return open(local_path, "rb")
        except OSError as e:
            raise FileReadError(str(e)) from e
