"""
pytest configuration and fixtures.
"""

import socket
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserve import FileServer, ServerConfig
from fileserve.core import Connection
from fileserve.handlers import FileHandler, ServingRoot
from fileserve.http import ResponseState


INDEX_HTML = b"<!DOCTYPE html><title>index</title>"
APP_HTML = b"<!DOCTYPE html><title>app</title>"
STYLE_CSS = b"body { margin: 0; }\n"
LOGO_PNG = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4
SECRET = b"outside the root"


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """
    A serving root with one file per interesting case.

        tmp_path/
        ├── secret.txt          (outside the root)
        └── site/
            ├── index.html
            ├── app.html
            ├── style.css
            ├── logo.png
            ├── app.wasm
            ├── notes.txt
            ├── LICENSE         (no extension, never served bare)
            └── docs/
                └── guide.html
    """
    (tmp_path / "secret.txt").write_bytes(SECRET)

    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "app.html").write_bytes(APP_HTML)
    (root / "style.css").write_bytes(STYLE_CSS)
    (root / "logo.png").write_bytes(LOGO_PNG)
    (root / "app.wasm").write_bytes(b"\x00asm\x01\x00\x00\x00")
    (root / "notes.txt").write_bytes(b"plain notes\n")
    (root / "LICENSE").write_bytes(b"MIT\n")
    (root / "docs").mkdir()
    (root / "docs" / "guide.html").write_bytes(b"<p>guide</p>")
    return root


@pytest.fixture
def handler(site_root: Path) -> FileHandler:
    """FileHandler over site_root with default settings."""
    return FileHandler(ServingRoot(str(site_root)))


@dataclass
class Exchange:
    """What one request/response round trip produced."""
    response: bytes
    state: Optional[ResponseState] = None
    error: Optional[BaseException] = None


def run_exchange(
    handler: FileHandler,
    request: bytes,
    shutdown_write: bool = False,
) -> Exchange:
    """
    Send ``request`` over a socketpair and serve it with ``handler``.

    The handler runs in a thread (so large bodies don't fill the socket
    buffer and deadlock) and closes its side like FileServer does. The
    client reads until EOF.
    """
    server_sock, client_sock = socket.socketpair()
    conn = Connection(socket=server_sock, address=("127.0.0.1", 0), timeout=5.0)
    result: dict = {}

    def serve():
        with conn:
            try:
                result["state"] = handler.serve(conn)
            except Exception as e:
                result["error"] = e

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    chunks = []
    with client_sock:
        client_sock.settimeout(5.0)
        client_sock.sendall(request)
        if shutdown_write:
            client_sock.shutdown(socket.SHUT_WR)
        while True:
            chunk = client_sock.recv(65536)
            if not chunk:
                break
            chunks.append(chunk)

    thread.join(timeout=5.0)
    return Exchange(b"".join(chunks), result.get("state"), result.get("error"))


@pytest.fixture
def exchange(handler: FileHandler):
    """Callable running one request through the default handler."""
    def _exchange(request: bytes, **kwargs) -> Exchange:
        return run_exchange(handler, request, **kwargs)
    return _exchange


def split_response(response: bytes) -> tuple[bytes, dict[str, str], bytes]:
    """Split a 200 response into (status line, headers, body)."""
    head, _, body = response.partition(b"\r\n\r\n")
    status_line, *header_lines = head.split(b"\r\n")
    headers = {}
    for line in header_lines:
        name, _, value = line.decode("latin-1").partition(": ")
        headers[name] = value
    return status_line, headers, body


@pytest.fixture
def serve_with():
    """run_exchange, for tests that build their own FileHandler."""
    return run_exchange


@pytest.fixture
def parse_response():
    """split_response as a fixture."""
    return split_response


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: FileServer):
        self.server = server
        self.port = server.config.port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.socket_server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes, return everything received until close."""
        chunks = []
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            while True:
                chunk = s.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(site_root: Path, free_port: int) -> Generator[TestServer, None, None]:
    """A running FileServer over site_root."""
    server = FileServer(ServerConfig(
        root_dir=str(site_root),
        host="127.0.0.1",
        port=free_port,
        timeout=5.0,
        buffer_size=1024,
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
