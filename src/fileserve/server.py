"""
=============================================================================
FILE SERVER
=============================================================================

Wires the pieces together:

    ┌──────────────┐  Connection  ┌──────────────┐  serve()  ┌─────────────┐
    │ SocketServer │ ───────────► │  FileServer  │ ────────► │ FileHandler │
    │ accept loop  │              │ log + close  │           │ one request │
    └──────────────┘              └──────────────┘           └─────────────┘

FileServer is where per-connection failures stop. Whatever FileHandler
raises is logged, the connection is closed, and the loop moves on to the
next client. A single malformed or hostile request never takes the
process down; only a failing listener does.

=============================================================================
WHAT THE CLIENT SEES
=============================================================================

    ┌─────────────────────────┬──────────────────────────────────────────┐
    │ Failure                 │ Client sees                              │
    ├─────────────────────────┼──────────────────────────────────────────┤
    │ ConnectionClosedEarly   │ (nothing, it already left)               │
    │ HeaderTooLarge          │ connection closed, no bytes              │
    │ MalformedRequestLine    │ connection closed, no bytes              │
    │ FileNotFound            │ HTTP/1.1 404 Not Found\r\n\r\n404        │
    │ OSError mid-stream      │ truncated 200 response                   │
    └─────────────────────────┴──────────────────────────────────────────┘

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import FileHandler, ServingRoot
from .http.errors import FileNotFound, ServeError


logger = logging.getLogger(__name__)


class FileServer:
    """
    Serves files from one directory, one connection at a time.

    Usage:
        server = FileServer(ServerConfig(root_dir="./public"))
        server.run()  # Blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: Invalid configuration, or root_dir is not a
                        directory.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.root = ServingRoot(self.config.root_dir, strict=self.config.strict_paths)
        self.handler = FileHandler(self.root, buffer_size=self.config.buffer_size)

        self._socket_server = SocketServer(self.config)

    @property
    def socket_server(self) -> SocketServer:
        return self._socket_server

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() or SIGINT/SIGTERM.

        Raises:
            OSError: If the listener cannot bind or accept() fails.
        """
        self._setup_logging()
        logger.info(f"Serving files from {self.root.root_dir}")

        try:
            self._socket_server.start(self.handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Ask the accept loop to stop."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("fileserve").setLevel(level)

    def handle_connection(self, conn: Connection):
        """
        Serve one connection and close it, whatever happens.

        Never raises for per-client failures.
        """
        with conn:
            try:
                state = self.handler.serve(conn)
                logger.info(
                    f"[{conn.id}] Sent {state.bytes_sent}/{state.content_length} bytes "
                    f"to {conn.client_ip}:{conn.client_port}"
                )
            except FileNotFound as e:
                logger.info(f"[{conn.id}] 404: {e}")
            except ServeError as e:
                logger.warning(f"[{conn.id}] Failed to serve client: {e}")
            except OSError as e:
                logger.error(f"[{conn.id}] Failed to serve client: {e!r}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error serving client: {e}")
