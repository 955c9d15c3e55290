"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket: create it, bind it, listen, and hand every
accepted client to a callback. It knows nothing about HTTP.

=============================================================================
THE SOCKET LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   bind()                                                             │
    │     1. socket(AF_INET, SOCK_STREAM)                                 │
    │     2. setsockopt(SO_REUSEADDR)      restart without waiting out    │
    │                                      TIME_WAIT                      │
    │     3. bind((host, port))            host "0.0.0.0" = every         │
    │                                      interface                      │
    │     4. listen(backlog)               backlog 5 by default           │
    │                                                                      │
    │   serve(handler)                                                     │
    │     while running:                                                   │
    │         accept()  ──► Connection ──► handler(conn)                  │
    │                                                                      │
    │   shutdown()                                                         │
    │     running = False; the loop notices within one poll interval      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Any failure in steps 1-4 is fatal and raised as SocketSetupError with the
stage that failed. Once listening, a failed accept() is logged and the
loop keeps going: one bad accept must never take the server down.

=============================================================================
WHY accept() HAS A TIMEOUT
=============================================================================

A blocking accept() with no timeout cannot be interrupted from another
thread. With a 1 second timeout the loop wakes up regularly, checks
_running, and goes back to waiting. Shutdown therefore takes at most one
poll interval.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional

from ..config import ServerConfig
from ..errors import AcceptError, SocketSetupError
from .connection import Connection


logger = logging.getLogger(__name__)

# How often the accept loop wakes up to check for shutdown
POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP listener.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.bind()                    # raises SocketSetupError
        server.serve(handle_connection)  # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._stopped = threading.Event()
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_bound(self) -> bool:
        return self._socket is not None

    @property
    def address(self) -> tuple[str, int]:
        """
        The address actually bound.

        Differs from config when port 0 was requested: the kernel picks
        the port and this reports it.
        """
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return host, port
        return self.config.host, self.config.port

    # =========================================================================
    # SETUP
    # =========================================================================

    def bind(self) -> tuple[str, int]:
        """
        Create, bind and listen on the server socket.

        Returns:
            The bound (host, port).

        Raises:
            SocketSetupError: With stage "socket", "bind" or "listen".
        """
        if self._socket is not None:
            return self.address

        requested = (self.config.host, self.config.port)

        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            raise SocketSetupError(f"Could not create socket: {e}", "socket", requested) from e

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as e:
            sock.close()
            raise SocketSetupError(f"Could not set SO_REUSEADDR: {e}", "socket", requested) from e

        try:
            sock.bind(requested)
        except OSError as e:
            sock.close()
            raise SocketSetupError(
                f"Failed to bind to {requested[0]}:{requested[1]}: {e}", "bind", requested
            ) from e

        try:
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            raise SocketSetupError(f"Failed to listen: {e}", "listen", requested) from e

        sock.settimeout(POLL_INTERVAL)
        self._socket = sock
        self._stopped.clear()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        return host, port

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that call shutdown().

        Python only allows signal handlers in the main thread. When serving
        from any other thread (the test suite does) we skip this and rely
        on an explicit shutdown() call.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    # =========================================================================
    # ACCEPT LOOP
    # =========================================================================

    def serve(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown() is called. Blocks.

        Binds first if bind() has not been called yet.

        Args:
            connection_handler: Called with every accepted Connection.
                It must not block for long; the HTTP layer just hands
                the connection to another thread.
        """
        self.bind()
        self._running = True
        self._setup_signals()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept(self) -> Optional[tuple[socket.socket, tuple[str, int]]]:
        """
        One accept() call.

        Returns:
            (client_socket, client_address), or None when the poll
            interval passed with nobody connecting.

        Raises:
            AcceptError: accept() itself failed (EMFILE, ECONNABORTED...).
        """
        try:
            return self._socket.accept()
        except socket.timeout:
            return None
        except OSError as e:
            raise AcceptError(f"Accept failed: {e}") from e

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                accepted = self._accept()
            except AcceptError as e:
                if not self._running:
                    break  # Socket closed under us by shutdown
                logger.error(str(e))
                # Back off briefly so a persistent failure (EMFILE) doesn't spin
                self._stopped.wait(0.1)
                continue

            if accepted is None:
                continue

            client_socket, client_address = accepted
            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    # =========================================================================
    # SHUTDOWN
    # =========================================================================

    def shutdown(self):
        """Stop the accept loop. Idempotent, callable from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def close(self):
        """Release the listening socket without ever serving (or after)."""
        self._cleanup()

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
            logger.info("Socket server stopped")

        self._stopped.set()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket has been closed."""
        return self._stopped.wait(timeout)
