"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Frames a status, a content type and a body into HTTP/1.1 response bytes.

=============================================================================
RESPONSE ANATOMY
=============================================================================

Every response this server sends has exactly this shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   HTTP/1.1 200 OK\r\n                  ← status line                │
    │   Content-Type: text/plain\r\n         ← from the handler           │
    │   Content-Length: 3\r\n                ← len(body) in BYTES         │
    │   Connection: close\r\n                ← we never keep-alive        │
    │   \r\n                                 ← end of headers             │
    │   abc                                  ← body                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No Date or Server header is added. Two identical requests therefore get
byte-identical responses.

=============================================================================
CONTENT-TYPE SHORT NAMES
=============================================================================

Handlers for text routes name only the subtype:

    text_type("html")        → "text/html"
    text_type("plain")       → "text/plain"
    text_type("image/png")   → "image/png"      (already a MIME type, kept)

File responses pass the MIME table's answer straight through.

=============================================================================
CONTENT-LENGTH IS A BYTE COUNT
=============================================================================

    "héllo"              5 characters
    "héllo".encode()     6 bytes      ← Content-Length: 6

Bodies are encoded BEFORE they are measured, never after.

=============================================================================
"""

from dataclasses import dataclass
from typing import Union

from .status_codes import HTTPStatus


Body = Union[str, bytes]


def text_type(name: str) -> str:
    """Expand a short type name to text/<name>; pass full MIME types through."""
    if "/" in name:
        return name
    return f"text/{name}"


def _to_bytes(body: Body) -> bytes:
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be written.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection
        HTTPResponse    ─────►   frames it      ─────►   sendall()
                                                         then close()

    Built per request, written once, thrown away.

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = "text/plain"
    body: bytes = b""
    version: str = "HTTP/1.1"

    def __post_init__(self):
        self.status = HTTPStatus(self.status)
        self.body = _to_bytes(self.body)

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found"."""
        return f"{self.version} {self.status.status_text}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def headers(self) -> list[tuple[str, str]]:
        """The header lines, in the order they go on the wire."""
        return [
            ("Content-Type", self.content_type),
            ("Content-Length", str(self.content_length)),
            ("Connection", "close"),
        ]

    def to_bytes(self) -> bytes:
        """
        Serialize for socket.sendall().

        Header text is ASCII by construction; the body is appended as-is.
        """
        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in self.headers)
        lines.append("")

        head = "\r\n".join(lines).encode("latin-1") + b"\r\n"
        return head + self.body


def build_response(status: HTTPStatus, content_type: str, body: Body) -> bytes:
    """
    Build complete response bytes in one call.

    Args:
        status: HTTP status.
        content_type: Short text name ("html", "plain") or a full MIME type.
        body: str (encoded as UTF-8) or bytes.
    """
    return HTTPResponse(status, text_type(content_type), _to_bytes(body)).to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def html(body: Body, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """HTML response (Content-Type: text/html)."""
    return HTTPResponse(status, text_type("html"), _to_bytes(body))


def plain(body: Body, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """Plain text response (Content-Type: text/plain)."""
    return HTTPResponse(status, text_type("plain"), _to_bytes(body))


def file_response(content: bytes, mime_type: str) -> HTTPResponse:
    """200 response carrying file bytes with their MIME type verbatim."""
    return HTTPResponse(HTTPStatus.OK, mime_type, content)


def bad_request(message: str = "<html>Bad Request</html>") -> HTTPResponse:
    return html(message, HTTPStatus.BAD_REQUEST)


def not_found(message: str = "<html>Not Found</html>") -> HTTPResponse:
    return html(message, HTTPStatus.NOT_FOUND)


def internal_error(message: str = "<html>Internal Server Error</html>") -> HTTPResponse:
    return html(message, HTTPStatus.INTERNAL_SERVER_ERROR)
