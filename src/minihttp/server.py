"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: listener, per-connection threads, parser,
router and response framing.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                             │
    │        │                                                             │
    │        ▼                                                             │
    │   _handle_connection(conn)        accept thread, returns at once    │
    │        │                                                             │
    │        ▼  executor.submit                                           │
    │   _process_connection(conn)       conn-N thread                     │
    │        │                                                             │
    │        ├─ READING     conn.read_request()    ReadError ──────┐      │
    │        ├─ PARSING     parser.parse()         Malformed ──────┤      │
    │        ├─ ROUTING     router.dispatch()      crash → 500     │      │
    │        ├─ RESPONDING  conn.send_response()   failure logged  │      │
    │        │                                                     ▼      │
    │        └─ CLOSED      with conn: ... ◄─────────── ERRORED ───┘      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A request we cannot even split into method and path gets no response at
all. Everything after that point always gets one.

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import Connection, ConnectionState, DetachedExecutor, SocketServer
from .errors import MalformedRequestError, ReadError
from .handlers import FileResponder, register_routes
from .http import HTTPRequest, HTTPResponse, RequestParser, Router
from .http.response import internal_error


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("minihttp.access")


class HTTPServer:
    """
    The HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = create_app(ServerConfig(port=4221, directory="/srv"))
        server.run()            # blocks until SIGINT/SIGTERM

    In tests, bind to port 0 and serve from a background thread:

        server = create_app(ServerConfig(host="127.0.0.1", port=0))
        host, port = server.bind()
        threading.Thread(target=server.serve_forever, daemon=True).start()
        ...
        server.shutdown()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Defaults if not provided.
            router: Routes to dispatch to. An empty router (everything 404)
                    if not provided; create_app() supplies the real one.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._executor = DetachedExecutor(self.config.max_connections)
        self._parser = RequestParser()
        self._router = router or Router()
        self._router.freeze()

    @property
    def router(self) -> Router:
        return self._router

    @property
    def executor(self) -> DetachedExecutor:
        return self._executor

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port), or the configured one before bind()."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    def bind(self) -> tuple[str, int]:
        """
        Bind and listen without serving yet.

        Raises:
            SocketSetupError: If the socket cannot be set up.
        """
        return self._socket_server.bind()

    def serve_forever(self):
        """Accept connections until shutdown(). Binds first if needed."""
        self._socket_server.serve(self._handle_connection)

    def run(self):
        """
        Set up logging, bind and serve. Blocks until SIGINT/SIGTERM.

        Raises:
            SocketSetupError: If the socket cannot be set up.
        """
        self.setup_logging()
        host, port = self.bind()
        logger.info(f"Serving files from {self.config.directory}")
        logger.info(f"Starting HTTP server on {host}:{port}")

        try:
            self.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Stop accepting. In-flight connection threads finish on their own.

        Args:
            timeout: If given, wait up to this long for the listening
                     socket to close.

        Returns:
            True if the listener has stopped (always True without timeout).
        """
        self._socket_server.shutdown()
        if timeout is None:
            return True
        return self._socket_server.wait_for_shutdown(timeout)

    def close(self):
        """Release the listening socket of a server that was bound but never served."""
        self._socket_server.close()

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand the connection to its own thread. Runs on the accept thread."""
        try:
            self._executor.submit(self._process_connection, conn)
        except RuntimeError as e:
            logger.error(f"[{conn.id}] Could not start handler thread: {e}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """Run one connection through its whole lifecycle (connection thread)."""
        with conn:
            try:
                data = conn.read_request()
            except ReadError as e:
                logger.warning(f"[{conn.id}] {e}")
                return

            conn.state = ConnectionState.PARSING
            try:
                request = self._parser.parse(data, conn.address)
            except MalformedRequestError as e:
                conn.state = ConnectionState.ERRORED
                logger.warning(f"[{conn.id}] {e}; closing without response")
                return

            conn.state = ConnectionState.ROUTING
            response = self._respond(request)

            conn.send_response(response.to_bytes())

    def _respond(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch a parsed request. A crashing handler becomes a 500."""
        try:
            response = self._router.dispatch(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            response = internal_error()

        access_logger.info(
            f"Handled {request.method} request for {request.path} -> {response.status.value}"
        )
        return response

    def handle_request_bytes(self, data: bytes) -> bytes:
        """
        Parse, route and frame a request without any socket.

        Returns:
            The response bytes that would be written to the client.

        Raises:
            MalformedRequestError: The connection would be closed silently.
        """
        request = self._parser.parse(data)
        return self._respond(request).to_bytes()


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server with the standard routes registered.

    Example:
        app = create_app(ServerConfig(port=3000, directory="/tmp"))
        app.run()
    """
    config = config or ServerConfig()
    router = register_routes(Router(), FileResponder(config.directory))
    return HTTPServer(config, router)
