"""
=============================================================================
LOGGING SETUP
=============================================================================

Two kinds of log output:

    ┌─────────────────────┬───────────────────────────────────────────────┐
    │ Logger              │ Content                                       │
    ├─────────────────────┼───────────────────────────────────────────────┤
    │ minihttp.*          │ Server lifecycle and errors (bind, accept,    │
    │                     │ read, decode, dispatch, write failures)       │
    │ minihttp.access     │ One line per response sent                    │
    └─────────────────────┴───────────────────────────────────────────────┘

The level comes from ServerConfig and is passed in explicitly. Nothing here
reads or writes environment variables.

    configure_logging(config)
        ├──► console handler at config.log_level
        └──► file handler at config.log_file_level (only if log_file set)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .config import ServerConfig


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "minihttp"

# Namespaced so it can be routed or silenced on its own:
#   logging.getLogger("minihttp.access").setLevel(logging.WARNING)
access_logger = logging.getLogger("minihttp.access")


def configure_logging(config: ServerConfig) -> logging.Logger:
    """
    Configure the package logger from config.

    Safe to call more than once: handlers installed by a previous call are
    replaced, not stacked.

    Returns:
        The package logger.
    """
    console_level = _level(config.log_level)
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setLevel(console_level)
    handlers.append(console)

    file_level = console_level
    if config.log_file:
        file_level = _level(config.log_file_level)
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        handlers.append(file_handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        logger.addHandler(handler)

    # The logger passes everything either handler wants; handlers filter.
    logger.setLevel(min(console_level, file_level))
    logger.propagate = False
    return logger


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


@dataclass
class AccessLog:
    """
    Structured log entry for one served response.

    client_ip:      Peer IP address ("-" when unknown)
    method:         Request method
    path:           Raw request path
    status_code:    Code on the status line
    content_length: Body size in bytes
    duration_ms:    Dispatch + write time
    timestamp:      When the response was sent
    """

    client_ip: str
    method: str
    path: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "client_ip": self.client_ip,
            "method": self.method,
            "path": self.path,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Apache-style common log line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_access(
    method: str,
    path: str,
    status_code: int,
    content_length: int,
    started_at: float,
    client_address: Optional[tuple[str, int]] = None,
    log_format: str = "text",
) -> AccessLog:
    entry = AccessLog(
        client_ip=client_address[0] if client_address else "-",
        method=method,
        path=path,
        status_code=int(status_code),
        content_length=content_length,
        duration_ms=(time.time() - started_at) * 1000,
        timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
    )

    if log_format == "json":
        access_logger.info(json.dumps(entry.to_dict()))
    else:
        access_logger.info(entry.to_text())
    return entry
