"""
HTTP protocol layer: parsing, routing, response framing, status codes
and MIME types. Nothing in here touches a socket.
"""

from .request import HTTPRequest, RequestParser, WIRE_ENCODING, parse_request
from .response import HTTPResponse, build_response, text_type
from .router import Route, RouteMatch, Router, RouteType
from .status_codes import HTTPStatus
from .mime_types import DEFAULT_MIME_TYPE, MIME_TYPES, get_mime_type

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "WIRE_ENCODING",
    "parse_request",
    "HTTPResponse",
    "build_response",
    "text_type",
    "Route",
    "RouteMatch",
    "Router",
    "RouteType",
    "HTTPStatus",
    "DEFAULT_MIME_TYPE",
    "MIME_TYPES",
    "get_mime_type",
]
