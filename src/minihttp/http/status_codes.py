"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server actually sends, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK            - Route matched and answered            │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request   - Route matched, argument missing       │
    │        │ 404 Not Found     - No route, no file, no User-Agent      │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Error - Could not stat or read a file        │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.status_text
        '404 Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES[self]

    @property
    def status_text(self) -> str:
        """
        Code and phrase as they appear after "HTTP/1.1 " on the status line.

            HTTP/1.1 404 Not Found
                     ─────────────
                      status_text
        """
        return f"{self.value} {self.phrase}"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
