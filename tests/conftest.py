"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig, create_app


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request, as curl sends it."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: curl/8.4.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body no route reads."""
    body = b'{"name": "John"}'
    head = (
        "POST /hello HTTP/1.1\r\n"
        "Host: localhost:4221\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(body)}\r\n"
        "\r\n"
    )
    return head.encode() + body


@pytest.fixture
def served_dir(tmp_path: Path) -> Path:
    """A served directory with a few known files."""
    (tmp_path / "hello.txt").write_bytes(b"hello from disk\n")
    (tmp_path / "page.html").write_bytes(b"<html><p>page</p></html>")
    (tmp_path / "blob").write_bytes(bytes(range(256)) * 64)
    (tmp_path / "empty.txt").write_bytes(b"")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "nested.json").write_bytes(b'{"nested": true}')
    return tmp_path


@pytest.fixture
def config(served_dir: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        directory=str(served_dir),
        log_level="WARNING",
    )


def send_raw(address: tuple[str, int], data: bytes, timeout: float = 5.0) -> bytes:
    """
    Send raw bytes and read until the server closes the connection.

    Returns b"" if the server closed without answering.
    """
    with socket.create_connection(address, timeout=timeout) as sock:
        if data:
            sock.sendall(data)
        chunks = []
        while True:
            chunk = sock.recv(65536)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class RunningServer:
    """A bound server serving from a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> tuple[str, int]:
        return self.server.address

    @property
    def url(self) -> str:
        host, port = self.address
        return f"http://{host}:{port}"

    def start(self):
        # Bound before the thread starts, so connections queue in the backlog
        self.server.bind()
        self._thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes) -> bytes:
        return send_raw(self.address, data)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """The full application on an ephemeral port."""
    srv = RunningServer(create_app(config))
    srv.start()

    yield srv

    srv.stop()
