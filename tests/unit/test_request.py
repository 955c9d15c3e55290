"""
Unit tests for HTTP request parsing.
"""

import pytest

from minihttp.errors import MalformedRequestError
from minihttp.http.request import (
    HTTPRequest,
    RequestParser,
    WIRE_ENCODING,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/echo/abc"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.raw == sample_get_request

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed in order with original case."""
        request = parse_request(sample_get_request)

        assert request.headers == (
            ("Host", "localhost:4221"),
            ("User-Agent", "curl/8.4.0"),
            ("Accept", "*/*"),
        )

    def test_header_lookup_is_case_insensitive(self, sample_get_request: bytes):
        """Test get_header ignores name case."""
        request = parse_request(sample_get_request)

        assert request.get_header("user-agent") == "curl/8.4.0"
        assert request.get_header("USER-AGENT") == "curl/8.4.0"
        assert request.user_agent == "curl/8.4.0"

    def test_missing_header_returns_default(self):
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.get_header("X-Missing") is None
        assert request.get_header("X-Missing", "fallback") == "fallback"
        assert request.user_agent == ""

    def test_first_duplicate_header_wins(self):
        raw = b"GET / HTTP/1.1\r\nUser-Agent: first\r\nuser-agent: second\r\n\r\n"
        request = parse_request(raw)

        assert request.user_agent == "first"
        assert len(request.headers) == 2

    def test_header_split_on_first_colon(self):
        """Test that values containing colons survive intact."""
        raw = b"GET / HTTP/1.1\r\nHost: example.com:4221\r\n\r\n"
        request = parse_request(raw)

        assert request.get_header("Host") == "example.com:4221"

    def test_header_values_are_trimmed(self):
        raw = b"GET / HTTP/1.1\r\nUser-Agent:    spaced out   \r\n\r\n"
        request = parse_request(raw)

        assert request.user_agent == "spaced out"

    def test_lines_without_colon_are_skipped(self):
        raw = b"GET / HTTP/1.1\r\ngarbage line\r\n: no name\r\nHost: h\r\n\r\n"
        request = parse_request(raw)

        assert request.headers == (("Host", "h"),)

    def test_parse_post_ignores_body(self, sample_post_request: bytes):
        """Test that a body after the blank line is not parsed as headers."""
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/hello"
        assert request.content_type == "application/json"
        assert request.content_length == 16
        assert request.get_header('{"name"') is None

    def test_body_without_headers_is_not_a_header(self):
        request = parse_request(b"POST /hello HTTP/1.1\r\n\r\nkey: value")

        assert request.headers == ()

    def test_lf_only_header_lines(self):
        request = parse_request(b"GET / HTTP/1.1\nHost: a\nUser-Agent: b\n")

        assert request.get_header("Host") == "a"
        assert request.user_agent == "b"

    def test_invalid_content_length_is_zero(self):
        request = parse_request(b"GET / HTTP/1.1\r\nContent-Length: lots\r\n\r\n")

        assert request.content_length == 0

    def test_path_is_not_decoded(self):
        """Test that query strings and percent escapes are kept verbatim."""
        raw = b"GET /echo/a%20b?x=1 HTTP/1.1\r\n\r\n"
        request = parse_request(raw)

        assert request.path == "/echo/a%20b?x=1"


class TestRequestLine:
    """Tests for request-line tokenizing."""

    def test_version_is_optional(self):
        request = parse_request(b"GET /hello\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/hello"
        assert request.version == ""

    def test_repeated_whitespace_yields_no_empty_tokens(self):
        request = parse_request(b"GET    /hello     HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/hello"
        assert request.version == "HTTP/1.1"

    def test_unknown_method_is_accepted(self):
        """Test that routing is method-agnostic, so parsing is too."""
        request = parse_request(b"BREW /hello HTTP/1.1\r\n\r\n")

        assert request.method == "BREW"

    @pytest.mark.parametrize("raw", [
        b"",
        b"\r\n\r\n",
        b"GET\r\nHost: test\r\n\r\n",
        b"   \r\n",
    ])
    def test_too_few_tokens(self, raw: bytes):
        """Test that a line without method and path is malformed."""
        with pytest.raises(MalformedRequestError):
            parse_request(raw)

    def test_too_many_tokens(self):
        with pytest.raises(MalformedRequestError):
            parse_request(b"GET /a b HTTP/1.1\r\n\r\n")

    def test_missing_header_terminator_is_tolerated(self):
        """Test that a request cut off before the blank line still parses."""
        request = parse_request(b"GET /user-agent HTTP/1.1\r\nUser-Agent: partial")

        assert request.path == "/user-agent"
        assert request.user_agent == "partial"

    def test_bare_lf_request_line(self):
        request = parse_request(b"GET /hello HTTP/1.1\n")

        assert request.path == "/hello"
        assert request.headers == ()

    def test_no_line_ending_at_all(self):
        request = parse_request(b"GET /hello")

        assert request.method == "GET"
        assert request.path == "/hello"


class TestWireEncoding:
    """Tests for lossless byte handling."""

    def test_non_ascii_path_round_trips(self):
        """Test that every byte of the path can be recovered exactly."""
        path_bytes = b"/echo/caf\xc3\xa9\xff\x80"
        request = parse_request(b"GET " + path_bytes + b" HTTP/1.1\r\n\r\n")

        assert request.path.encode(WIRE_ENCODING) == path_bytes

    def test_latin1_space_lookalikes_are_not_separators(self):
        """Test that bytes 0xA0 and 0x85 stay inside the path token."""
        request = parse_request(b"GET /echo/a\xa0b\x85c HTTP/1.1\r\n\r\n")

        assert request.path.encode(WIRE_ENCODING) == b"/echo/a\xa0b\x85c"
        assert request.version == "HTTP/1.1"

    def test_request_is_immutable(self):
        request = HTTPRequest(method="GET", path="/")

        with pytest.raises(AttributeError):
            request.path = "/other"
