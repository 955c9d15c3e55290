"""
=============================================================================
SERVER ERROR TAXONOMY
=============================================================================

Every failure the server can meet is one of a small number of kinds, and
each kind has exactly one place where it is handled:

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │  Exception               │  What happens                            │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │  SocketSetupError        │  Fatal. Startup aborts, exit code 1      │
    │  AcceptError             │  Logged. Accept loop keeps running       │
    │  ReadError               │  Connection closed, no response          │
    │  MalformedRequestError   │  Connection closed, no response          │
    │  RouteHandlerError       │  Turned into a 404 / 500 response        │
    │  WriteError              │  Logged. Connection still closed         │
    └──────────────────────────┴──────────────────────────────────────────┘

Only SocketSetupError may end the process. Everything else is confined to
the thread that owns the connection.

=============================================================================
"""

from typing import Optional


class ServerError(Exception):
    """Base class for all errors raised by minihttp."""


class SocketSetupError(ServerError):
    """
    Raised when the listening socket cannot be created, bound or put into
    listening mode.

    Attributes:
        stage: Which step failed: "socket", "bind" or "listen".
        address: The (host, port) we were trying to use.
    """

    def __init__(self, message: str, stage: str, address: tuple[str, int]):
        super().__init__(message)
        self.stage = stage
        self.address = address


class AcceptError(ServerError):
    """A single accept() call failed. Transient."""


class ReadError(ServerError):
    """
    Reading the request from a connection failed.

    Covers both a peer that closed without sending anything (recv returned
    zero bytes) and socket level errors such as resets or timeouts.
    """


class MalformedRequestError(ServerError):
    """
    The request line could not be split into a method and a path.

    These are NOT answered with a 400. Without a path there is no route
    to blame, so the connection is closed without a response.
    """


class RouteHandlerError(ServerError):
    """
    A route handler hit a failure that maps to an HTTP status.

    Carries the status code and body the client should see.
    """

    def __init__(self, message: str, status_code: int = 500, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class WriteError(ServerError):
    """Sending the response failed part way or completely."""
