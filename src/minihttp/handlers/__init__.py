"""
Request handlers: path resolution under the served root and per-method
dispatch.
"""

from .static import PathResolver
from .dispatcher import RequestDispatcher, DEFAULT_UNAUTHORIZED_STATUS

__all__ = [
    "PathResolver",
    "RequestDispatcher",
    "DEFAULT_UNAUTHORIZED_STATUS",
]
