"""
pytest configuration and fixtures.
"""

import logging
import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig
from minihttp.handlers import PathResolver, RequestDispatcher


INDEX_HTML = b"<b>hi!</b>"  # 10 bytes
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    """A served root with one file per supported type, plus a few extras."""
    (tmp_path / "index.html").write_bytes(INDEX_HTML)
    (tmp_path / "notes.txt").write_text("plain notes\n")
    (tmp_path / "style.css").write_text("body { color: red; }\n")
    (tmp_path / "logo.png").write_bytes(PNG_BYTES)
    (tmp_path / "icon.svg").write_text("<svg></svg>")
    (tmp_path / "script.js").write_text("alert(1);")
    (tmp_path / "README").write_text("no extension here")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.txt").write_text("guide")
    return tmp_path


@pytest.fixture
def dispatcher(web_root: Path) -> RequestDispatcher:
    return RequestDispatcher(PathResolver(str(web_root)))


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def send_raw(port: int, data: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes, then read until the server closes the connection."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        if data:
            s.sendall(data)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> tuple[bytes, bytes]:
    headers, _, body = raw.partition(b"\r\n\r\n")
    return headers + b"\r\n\r\n", body


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def _run(self):
        try:
            self.server.serve_forever()
        except BaseException as e:
            self.error = e

    def start(self):
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def join(self, timeout: float = 5.0) -> bool:
        """Wait for serve_forever() to return. True if it did."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def get(self, data: bytes) -> bytes:
        return send_raw(self.port, data)


def make_server(web_root: Path, **overrides) -> TestServer:
    config = ServerConfig(host="127.0.0.1", port=0, root=str(web_root), **overrides)
    return TestServer(HTTPServer(config))


@pytest.fixture
def test_server(web_root: Path) -> Generator[TestServer, None, None]:
    """A running sequential server on a free port."""
    srv = make_server(web_root)
    srv.start()

    yield srv

    srv.stop()


@pytest.fixture
def server_factory(web_root: Path) -> Generator:
    """Build (but don't start) servers over web_root; stops them afterwards."""
    servers = []

    def factory(**overrides) -> TestServer:
        srv = make_server(web_root, **overrides)
        servers.append(srv)
        return srv

    yield factory

    for srv in servers:
        srv.stop()


@pytest.fixture
def raw_client():
    """send_raw(port, data) helper."""
    return send_raw


@pytest.fixture
def restore_package_logger():
    """configure_logging() mutates the 'minihttp' logger; put it back."""
    logger = logging.getLogger("minihttp")
    saved = (list(logger.handlers), logger.level, logger.propagate)

    yield logger

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
