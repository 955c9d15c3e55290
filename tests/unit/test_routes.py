"""
Unit tests for the fixed route handlers and their registration.
"""

from pathlib import Path

import pytest

from minihttp.handlers import FileResponder, register_routes
from minihttp.handlers.routes import echo, hello, home, page_not_found, user_agent
from minihttp.http.request import HTTPRequest, parse_request
from minihttp.http.router import Router


def make_request(path: str, headers: tuple = ()) -> HTTPRequest:
    return HTTPRequest(method="GET", path=path, headers=headers)


class TestHandlers:

    def test_home(self):
        response = home(make_request("/"))

        assert response.status == 200
        assert response.content_type == "text/html"
        assert response.body == b"<html><h1><b>Hello World!</b></h1></html>"

    def test_hello(self):
        response = hello(make_request("/hello"))

        assert response.body == b"<html>Hello!</html>"
        assert response.content_length == 19

    def test_echo(self):
        response = echo(make_request("/echo/abc"), "abc")

        assert response.status == 200
        assert response.content_type == "text/plain"
        assert response.body == b"abc"

    def test_echo_empty_is_bad_request(self):
        response = echo(make_request("/echo/"), "")

        assert response.status == 400
        assert response.body == b"<html>No body found</html>"

    def test_echo_returns_raw_bytes(self):
        """Test that non-ASCII path bytes come back unchanged."""
        request = parse_request(b"GET /echo/\xe4\xbd\xa0\xff HTTP/1.1\r\n\r\n")

        response = echo(request, request.path[len("/echo/"):])

        assert response.body == b"\xe4\xbd\xa0\xff"

    def test_user_agent(self):
        request = make_request("/user-agent", (("User-Agent", "foobar/1.2.3"),))

        response = user_agent(request)

        assert response.status == 200
        assert response.content_type == "text/plain"
        assert response.body == b"foobar/1.2.3"

    @pytest.mark.parametrize("headers", [(), (("User-Agent", ""),)])
    def test_user_agent_missing(self, headers: tuple):
        response = user_agent(make_request("/user-agent", headers))

        assert response.status == 404
        assert response.body == b"User-Agent header not found"

    def test_not_found(self):
        response = page_not_found(make_request("/nope"))

        assert response.status == 404
        assert response.body == b"<html>Not Found</html>"


class TestRegisterRoutes:

    @pytest.fixture
    def router(self, served_dir: Path) -> Router:
        return register_routes(Router(), FileResponder(served_dir)).freeze()

    def test_route_table(self, router: Router):
        assert [route.pattern for route in router.routes] == [
            "/", "/hello", "/user-agent", "/echo/", "/file/",
        ]

    @pytest.mark.parametrize("path,status", [
        ("/", 200),
        ("/hello", 200),
        ("/echo/x", 200),
        ("/echo/", 400),
        ("/file/hello.txt", 200),
        ("/file/", 400),
        ("/file/missing", 404),
        ("/user-agent", 404),
        ("/hello/", 404),
        ("/echo", 404),
        ("/unknown", 404),
    ])
    def test_dispatch(self, router: Router, path: str, status: int):
        assert router.dispatch(make_request(path)).status == status

    def test_file_route_serves_file(self, router: Router):
        response = router.dispatch(make_request("/file/hello.txt"))

        assert response.body == b"hello from disk\n"
        assert response.content_type == "text/plain"
