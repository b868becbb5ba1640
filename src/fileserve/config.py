"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

Configuration comes from two places only:

    1. Command-line arguments (see __main__.py)
    2. Default values in this dataclass

No environment variables or config files are read.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Shortest request we accept ("GET / HTTP/1.1\r\n\r\n") plus room for a
# few header lines
MIN_BUFFER_SIZE = 64


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    CONTENT
    - root_dir, strict_paths

    NETWORK
    - host, port, backlog, timeout

    REQUEST LIMITS
    - buffer_size

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory files are served from."""

    strict_paths: bool = True
    """
    Refuse request paths that resolve outside root_dir (../, absolute
    paths, symlinks pointing out). Such requests get the plain 404.
    False opens whatever the joined path names.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to. Loopback only by default."""

    port: int = 9000
    """The port number to listen on."""

    backlog: int = 128
    """Maximum number of connections queued while one is being served."""

    timeout: Optional[float] = 30.0
    """
    Per-connection socket deadline in seconds, applied to every read and
    write. None = block forever: one client that never finishes its
    header then stalls the whole server.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 8196
    """
    Capacity of the request header buffer in bytes. A request whose
    \\r\\n\\r\\n does not arrive within this many bytes is dropped.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR). DEBUG logs raw heads."""

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast at startup rather than on the first request.

        Raises:
            ValueError: Describing the first invalid value.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < MIN_BUFFER_SIZE:
            raise ValueError(f"buffer_size must be >= {MIN_BUFFER_SIZE}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0 (or None to disable)")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
