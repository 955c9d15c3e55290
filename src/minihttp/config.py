"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --port 3000                             │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=3000 python -m minihttp                      │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The defaults reproduce the classic behaviour of this server: port 4221,
backlog of 5, a 4 KB request buffer, and no socket timeout at all.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    CONCURRENCY
    - max_connections

    FILES
    - directory

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All local addresses (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = 4221
    """
    The port number to listen on. 0 lets the OS pick a free port,
    which is what the test suite does.
    """

    backlog: int = 5
    """
    Maximum number of queued, not yet accepted connections.
    Beyond this the OS queues or refuses connections, not us.
    """

    buffer_size: int = 4096
    """
    Size of the single read that fetches a request. Request bytes beyond
    this are never seen.
    """

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block forever on a silent client (the historic behaviour).
    Setting a value is an extension: an expired read counts as a read error.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    max_connections: Optional[int] = None
    """
    Upper bound on connections handled at the same time.
    None = one thread per connection with no limit.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = "."
    """Directory that /file/{name} is served from."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIHTTP_HOST             Server host (default: 0.0.0.0)
        MINIHTTP_PORT             Server port (default: 4221)
        MINIHTTP_BACKLOG          Listen backlog (default: 5)
        MINIHTTP_BUFFER_SIZE      Request buffer size (default: 4096)
        MINIHTTP_TIMEOUT          Socket timeout in seconds (default: none)
        MINIHTTP_DIRECTORY        Served directory (default: .)
        MINIHTTP_MAX_CONNECTIONS  Concurrent connection limit (default: none)
        MINIHTTP_LOG_LEVEL        Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("MINIHTTP_TIMEOUT")
        max_connections = os.getenv("MINIHTTP_MAX_CONNECTIONS")
        return cls(
            host=os.getenv("MINIHTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("MINIHTTP_PORT", "4221")),
            backlog=int(os.getenv("MINIHTTP_BACKLOG", "5")),
            buffer_size=int(os.getenv("MINIHTTP_BUFFER_SIZE", "4096")),
            timeout=float(timeout) if timeout else None,
            directory=os.getenv("MINIHTTP_DIRECTORY", "."),
            max_connections=int(max_connections) if max_connections else None,
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        We validate at startup, not at first use, so a bad value fails
        immediately instead of on the first connection.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_connections is not None and self.max_connections < 1:
            raise ValueError("max_connections must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
