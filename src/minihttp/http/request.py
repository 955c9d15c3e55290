"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the bytes of a single read into a structured HTTPRequest.

=============================================================================
WHAT WE LOOK AT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    GET /echo/abc HTTP/1.1\r\n                                  │ │
    │  │    ─┬─ ────┬──── ────┬───                                      │ │
    │  │   Method  Path   Version (optional)                            │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    User-Agent: curl/8.4.0\r\n                                  │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                          (missing? tolerated)          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    ignored, no route uses it                                   │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TOKENIZING RULES
=============================================================================

1. REQUEST LINE: everything up to the first \r\n (a bare \n is accepted
   when no \r\n exists; with neither, the whole buffer is the line).
   Split on runs of ASCII whitespace, so "GET   /  HTTP/1.1" has three
   tokens and never an empty one.

       0 or 1 token   → MalformedRequestError
       2 tokens       → method, path
       3 tokens       → method, path, version
       4+ tokens      → MalformedRequestError

2. HEADERS: the text between the request line and the blank line.
   If the blank line never arrived we parse whatever we have.
   Each line is split on its FIRST colon only:

       "Host: localhost:4221"  →  ("Host", "localhost:4221")

   No comma lists, no continuation lines. Lines without a colon are
   skipped.

3. ENCODING: bytes are decoded as ISO-8859-1, which maps every byte to
   exactly one character. Encoding back with WIRE_ENCODING gives the
   original bytes, which is how /echo returns its input byte-for-byte.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from ..errors import MalformedRequestError


# Every byte value maps to one code point, so decode/encode is lossless
WIRE_ENCODING = "iso-8859-1"

# ASCII whitespace only. str.split() would also break on \xa0 and \x85,
# which are ordinary path bytes once decoded as ISO-8859-1.
_TOKEN = re.compile(r"[^ \t\r\n\x0b\x0c]+")
_LINE_BREAK = re.compile(r"\r?\n")

Header = tuple[str, str]


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Frozen: built once per connection by the parser, then only read.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         First request-line token ("GET", "POST", ...).
                        Parsed, but no route looks at it.

        path:           Second token, exactly as sent. Query strings and
                        percent escapes are NOT decoded.

        version:        Third token ("HTTP/1.1"), or "" if absent.

        headers:        (name, value) pairs in the order they were sent.
                        Names keep their original case; lookups ignore it.

        client_address: (ip, port) of the peer, for logging.

        raw:            The bytes the request was parsed from.

    =========================================================================
    """

    method: str
    path: str
    version: str = ""
    headers: tuple[Header, ...] = ()
    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value (case-insensitive lookup, first match wins).

        Example:
            request.get_header("user-agent")   # finds "User-Agent: ..."
        """
        wanted = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == wanted:
                return value
        return default

    @property
    def user_agent(self) -> str:
        """User-Agent header value, "" if the client did not send one."""
        return self.get_header("User-Agent", "")

    @property
    def content_type(self) -> Optional[str]:
        return self.get_header("Content-Type")

    @property
    def content_length(self) -> int:
        """Content-Length as an int. 0 if missing or not a number."""
        try:
            return int(self.get_header("Content-Length", "0"))
        except ValueError:
            return 0


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

        Raw bytes
            │
            ▼
        1. Decode (ISO-8859-1, lossless)
            │
            ▼
        2. Split off request line ─────► tokenize ─► method, path[, version]
            │                                │
            │                                └─ wrong token count?
            │                                   MalformedRequestError
            ▼
        3. Header block (up to blank line, or end of data)
            │
            ▼
        4. "Name: Value" pairs, original order
            │
            ▼
        HTTPRequest
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse one request.

        Args:
            data: Bytes from the connection's single read.
            client_address: Peer (ip, port), carried along for logging.

        Returns:
            The parsed HTTPRequest.

        Raises:
            MalformedRequestError: If no method and path can be found.
        """
        text = data.decode(WIRE_ENCODING)

        request_line, header_block = self._split_head(text)
        method, path, version = self._parse_request_line(request_line)
        headers = self._parse_headers(header_block)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            client_address=client_address,
            raw=data,
        )

    def _split_head(self, text: str) -> tuple[str, str]:
        """Separate the request line from the header block."""
        line_end = text.find("\r\n")
        separator_length = 2
        if line_end == -1:
            line_end = text.find("\n")
            separator_length = 1
        if line_end == -1:
            return text, ""

        request_line = text[:line_end]

        # Headers end at the first blank line; without one, take everything.
        # Searching from line_end catches a blank line right after the
        # request line (no headers at all).
        header_end = text.find("\r\n\r\n", line_end)
        if header_end == -1:
            header_end = len(text)
        return request_line, text[line_end + separator_length:header_end]

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        tokens = _TOKEN.findall(line)

        if len(tokens) < 2:
            raise MalformedRequestError(f"Invalid request line: {line!r}")
        if len(tokens) > 3:
            raise MalformedRequestError(f"Too many tokens in request line: {line!r}")

        method, path = tokens[0], tokens[1]
        version = tokens[2] if len(tokens) == 3 else ""
        return method, path, version

    def _parse_headers(self, block: str) -> tuple[Header, ...]:
        headers: list[Header] = []

        for line in _LINE_BREAK.split(block):
            if not line:
                continue

            # Split on the FIRST colon: "Host: a:4221" keeps "a:4221" intact
            name, colon, value = line.partition(":")
            if not colon:
                continue  # Not a header line, skip (lenient parsing)

            name = name.strip(" \t")
            if not name:
                continue

            headers.append((name, value.strip(" \t")))

        return tuple(headers)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(data: bytes, client_address: tuple[str, int] = ("", 0)) -> HTTPRequest:
    """Parse a request in one call with a throwaway RequestParser."""
    return RequestParser().parse(data, client_address)
