"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration management for the HTTP server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --port 3000                             │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=3000 python -m minihttp                      │
    │                                                                     │
    │   3. Configuration file                                             │
    │      └── ./config.toml                                              │
    │                                                                     │
    │   4. Default values (in this dataclass)                             │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

The defaults alone are enough to run: port 8080, serving the current
working directory.

=============================================================================
CONFIG FILE LAYOUT
=============================================================================

    [server]
    address = "127.0.0.1"
    port = "8080"               # string or integer
    root = "."

    [server.threading]
    enable = false
    max_threads = 4

    [logging]
    default_level = "info"
    log_file_level = "debug"
    log_file = "minihttp.log"

    [extra]
    panic_if_not_impl = false

Every key is optional.

=============================================================================
"""

import os
import tomllib
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from .errors import ConfigParseError, ConfigReadError, ConfigValidationError


CONFIG_FILE_NAME = "config.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
EMPTY_READ_ACTIONS = ("error", "stop")


def _section(data: dict[str, Any], name: str, prefix: str = "") -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigParseError(f"[{prefix}{name}] must be a table, got {type(section).__name__}")
    return section


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    SERVING
    - root, workers

    PROTOCOL QUIRKS
    - empty_read_action, unauthorized_status, fail_on_unimplemented

    LOGGING
    - log_level, log_file, log_file_level, log_format, access_log

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 1024
    """
    Bytes read from each connection. The request is read ONCE; anything
    past this many bytes is never seen.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVING
    # ─────────────────────────────────────────────────────────────────────

    root: str = "."
    """Directory prefixed onto every request path."""

    workers: int = 0
    """
    Worker threads for dispatching and writing responses.
    0 = fully sequential: one connection at a time.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROTOCOL QUIRKS
    # ─────────────────────────────────────────────────────────────────────

    empty_read_action: str = "error"
    """
    What a connection that sends zero bytes does to the serve loop.
    - "error" - serve_forever() raises EmptyReadError
    - "stop"  - serve_forever() returns normally
    Either way the loop ends.
    """

    unauthorized_status: int = 504
    """Status code for paths rejected by the traversal guard."""

    fail_on_unimplemented: bool = False
    """Drop write-method requests instead of answering 501."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_file: Optional[str] = None
    """Optional log file, written in addition to the console."""

    log_file_level: str = "DEBUG"
    """Level for the log file handler."""

    log_format: str = "text"
    """Access log format: 'json' or 'text'."""

    access_log: bool = True
    """Emit one access log line per response sent."""

    @classmethod
    def from_toml(cls, path: str = CONFIG_FILE_NAME) -> "ServerConfig":
        """
        Load configuration from a TOML file.

        Raises:
            ConfigReadError: The file cannot be opened or read.
            ConfigParseError: The file is not valid TOML or has bad values.
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigParseError(str(e)) from e
        except OSError as e:
            raise ConfigReadError(str(e)) from e

        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ServerConfig":
        """
        Build a config from the parsed file layout documented above.

        Raises:
            ConfigParseError: A section is not a table, or a value has the
                              wrong type.
        """
        server = _section(data, "server")
        threading = _section(server, "threading", "server.")
        logging_ = _section(data, "logging")
        extra = _section(data, "extra")

        values: dict[str, Any] = {}
        try:
            if "address" in server:
                values["host"] = str(server["address"])
            if "port" in server:
                values["port"] = int(server["port"])
            if "root" in server:
                values["root"] = str(server["root"])
            if threading.get("enable"):
                values["workers"] = int(threading.get("max_threads", 4))
            if "default_level" in logging_:
                values["log_level"] = str(logging_["default_level"]).upper()
            if "log_file_level" in logging_:
                values["log_file_level"] = str(logging_["log_file_level"]).upper()
            if logging_.get("log_file"):
                values["log_file"] = str(logging_["log_file"])
            if "panic_if_not_impl" in extra:
                values["fail_on_unimplemented"] = bool(extra["panic_if_not_impl"])
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigParseError(str(e)) from e

        return cls(**values)

    @classmethod
    def from_env(cls, base: Optional["ServerConfig"] = None) -> "ServerConfig":
        """
        Overlay environment variables on a base config.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIHTTP_HOST       Server host
        MINIHTTP_PORT       Server port
        MINIHTTP_ROOT       Served root directory
        MINIHTTP_WORKERS    Worker threads (0 = sequential)
        MINIHTTP_LOG_LEVEL  Logging level

        =====================================================================
        """
        config = base or cls()
        overrides: dict[str, Any] = {}
        try:
            if "MINIHTTP_HOST" in os.environ:
                overrides["host"] = os.environ["MINIHTTP_HOST"]
            if "MINIHTTP_PORT" in os.environ:
                overrides["port"] = int(os.environ["MINIHTTP_PORT"])
            if "MINIHTTP_ROOT" in os.environ:
                overrides["root"] = os.environ["MINIHTTP_ROOT"]
            if "MINIHTTP_WORKERS" in os.environ:
                overrides["workers"] = int(os.environ["MINIHTTP_WORKERS"])
            if "MINIHTTP_LOG_LEVEL" in os.environ:
                overrides["log_level"] = os.environ["MINIHTTP_LOG_LEVEL"].upper()
        except ValueError as e:
            raise ConfigParseError(str(e)) from e

        return replace(config, **overrides)

    def merged(self, **overrides: Any) -> "ServerConfig":
        """Copy with the given fields replaced; None values are ignored."""
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if v is not None and k in known}
        return replace(self, **changes)

    def validate(self) -> None:
        """
        Validate configuration values.

        We validate at startup, not at first use, so a bad port or level
        fails before any socket is opened.
        """
        if not 0 <= self.port < 65536:
            raise ConfigValidationError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1:
            raise ConfigValidationError("buffer_size must be >= 1")

        if self.workers < 0:
            raise ConfigValidationError("workers must be >= 0")

        if self.empty_read_action not in EMPTY_READ_ACTIONS:
            raise ConfigValidationError(
                f"empty_read_action must be one of {EMPTY_READ_ACTIONS}"
            )

        if not 100 <= self.unauthorized_status < 600:
            raise ConfigValidationError(
                f"Invalid unauthorized_status: {self.unauthorized_status}"
            )

        for name in ("log_level", "log_file_level"):
            if getattr(self, name).upper() not in LOG_LEVELS:
                raise ConfigValidationError(f"Invalid {name}: {getattr(self, name)}")

        if self.log_format not in ("text", "json"):
            raise ConfigValidationError("log_format must be 'text' or 'json'")
