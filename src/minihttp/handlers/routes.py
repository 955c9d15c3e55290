"""
The server's fixed route set.

    /              → HTML greeting
    /hello         → short HTML greeting
    /user-agent    → the client's User-Agent header, as text/plain
    /echo/{text}   → {text} back, byte-for-byte, as text/plain
    /file/{name}   → a file from the served directory
    anything else  → 404
"""

from ..http.request import HTTPRequest, WIRE_ENCODING
from ..http.response import HTTPResponse, bad_request, html, not_found, plain
from ..http.router import Router
from ..http.status_codes import HTTPStatus
from .files import FileResponder


HOME_BODY = "<html><h1><b>Hello World!</b></h1></html>"
HELLO_BODY = "<html>Hello!</html>"
NOT_FOUND_BODY = "<html>Not Found</html>"
NO_BODY = "<html>No body found</html>"
NO_USER_AGENT = "User-Agent header not found"


def home(request: HTTPRequest) -> HTTPResponse:
    return html(HOME_BODY)


def hello(request: HTTPRequest) -> HTTPResponse:
    return html(HELLO_BODY)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    agent = request.user_agent
    if not agent:
        return plain(NO_USER_AGENT, HTTPStatus.NOT_FOUND)
    return plain(agent.encode(WIRE_ENCODING))


def echo(request: HTTPRequest, text: str) -> HTTPResponse:
    if not text:
        return bad_request(NO_BODY)
    # Re-encode with the wire encoding so the client gets its exact bytes
    return plain(text.encode(WIRE_ENCODING))


def page_not_found(request: HTTPRequest) -> HTTPResponse:
    return not_found(NOT_FOUND_BODY)


def register_routes(router: Router, files: FileResponder) -> Router:
    """Attach every route to `router`. Does not freeze it."""
    router.exact("/")(home)
    router.exact("/hello")(hello)
    router.exact("/user-agent")(user_agent)
    router.prefix("/echo/")(echo)

    @router.prefix("/file/", name="file")
    def serve_file(request: HTTPRequest, name: str) -> HTTPResponse:
        return files.serve(name)

    router.set_fallback(page_not_found)
    return router
