"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the lifetime of one request.

=============================================================================
ONE READ, ONE RESPONSE, ONE CLOSE
=============================================================================

TCP is a byte stream and a request may in theory arrive in several chunks.
This server does not reassemble them: it performs a SINGLE recv() of up to
buffer_size bytes and treats whatever came back as the whole request.

    Client sends:                     recv(4096) returns:
        GET /hello HTTP/1.1\r\n           GET /hello HTTP/1.1\r\n
        Host: localhost\r\n               Host: localhost\r\n
        \r\n                              \r\n

For the small requests this server answers (no route reads a body) that
is what real clients deliver in practice. Anything past buffer_size is
simply never looked at.

=============================================================================
LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   NEW ──► READING ──► PARSING ──► ROUTING ──► RESPONDING ──► CLOSED │
    │              │           │           │                          ▲   │
    │              └───────────┴───────────┴──► ERRORED ──────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every path ends in CLOSED, and close() runs exactly once. Using the
connection as a context manager guarantees it:

    with Connection(sock, addr) as conn:
        data = conn.read_request()
        ...
    # socket released here, whatever happened inside

No keep-alive: every response carries "Connection: close" and the socket
is shut down right after it is written.

=============================================================================
"""

import itertools
import logging
import socket
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import ReadError, WriteError


logger = logging.getLogger(__name__)

_connection_ids = itertools.count(1)

# Bounds on reading leftover client bytes during close()
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Where a connection is in its single request/response cycle."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Waiting on recv()
    PARSING = "parsing"        # Bytes in hand, building an HTTPRequest
    ROUTING = "routing"        # Handler is running
    RESPONDING = "responding"  # sendall() in progress
    ERRORED = "errored"        # Read, parse or write failed
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    One client connection.

    Attributes:
        socket: The accepted client socket. Owned exclusively by this object.
        address: Client's (ip, port) tuple.
        id: Sequential connection number, used in log lines.
        state: Current ConnectionState.
        buffer_size: Size of the single read.
        timeout: Socket timeout in seconds, None to block forever.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: int = field(default_factory=lambda: next(_connection_ids))
    state: ConnectionState = ConnectionState.NEW

    buffer_size: int = 4096
    timeout: Optional[float] = None

    def __post_init__(self):
        # Accepted sockets can inherit the listener's poll timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def closed(self) -> bool:
        return self.state is ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read the request with a single recv().

        Returns:
            Between 1 and buffer_size bytes.

        Raises:
            ReadError: The peer closed without sending anything, or the
                socket failed (reset, timeout).
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout as e:
            self.state = ConnectionState.ERRORED
            raise ReadError(f"Timed out after {self.timeout}s waiting for request") from e
        except OSError as e:
            self.state = ConnectionState.ERRORED
            raise ReadError(f"recv failed: {e}") from e

        if not data:
            self.state = ConnectionState.ERRORED
            raise ReadError("Peer closed the connection before sending a request")

        logger.debug(f"[{self.id}] Read {len(data)} bytes from {self.client_ip}:{self.client_port}")
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write the whole response with sendall().

        A failed write is logged, not raised: the peer is gone and the only
        thing left to do is close the socket, which the caller does anyway.

        Returns:
            True if every byte was handed to the kernel.
        """
        self.state = ConnectionState.RESPONDING

        try:
            self._write(data)
            return True
        except WriteError as e:
            self.state = ConnectionState.ERRORED
            logger.warning(f"[{self.id}] {e}")
            return False

    def _write(self, data: bytes):
        try:
            self.socket.sendall(data)
        except OSError as e:
            raise WriteError(f"Send failed: {e}") from e

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

            1. shutdown(SHUT_WR)   client sees EOF right after the response
            2. short drain         leftover request bytes don't turn the
                                   close into a reset; capped at
                                   DRAIN_TIMEOUT and DRAIN_LIMIT in total
            3. close()             file descriptor released
        """
        if self.state is ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        finally:
            self.state = ConnectionState.CLOSED
            logger.debug(f"[{self.id}] Connection closed")

    def _drain(self):
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # socket.timeout included; we are closing either way

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
