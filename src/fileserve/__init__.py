"""
=============================================================================
FILESERVE - A One-Request-Per-Connection Static File Server
=============================================================================

Serves the files of one directory over HTTP/1.1 using raw Python sockets.
Each connection carries exactly one GET; the file is streamed back with
sendfile() and the connection is closed.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          REQUEST FLOW                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   accept()                       one connection at a time           │
    │      │                                                              │
    │      ▼                                                              │
    │   read until \r\n\r\n            bounded by buffer_size             │
    │      │                                                              │
    │      ▼                                                              │
    │   GET /<path> HTTP/1.1           anything else: close, no reply     │
    │      │                                                              │
    │      ▼                                                              │
    │   /        → index.html                                             │
    │   /app     → app.html            .html added when no extension      │
    │   /app.css → app.css                                                │
    │      │                                                              │
    │      ▼                                                              │
    │   200 + Content-Type + body      or  404 Not Found                  │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fileserve/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fileserve DIR)
    ├── server.py            # FileServer: wires listener and handler
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # Sequential accept loop
    │   └── connection.py    # Header reading, sending, sendfile
    ├── http/
    │   ├── errors.py        # ServeError hierarchy
    │   ├── request.py       # Request line grammar
    │   ├── response.py      # Response head, 404, response state
    │   ├── status_codes.py  # 200 / 404
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        └── static.py        # Path resolution and the per-connection routine

=============================================================================
QUICK START
=============================================================================

    from fileserve import FileServer, ServerConfig

    server = FileServer(ServerConfig(root_dir="./public", port=9000))
    server.run()

or from a shell:

    python -m fileserve ./public

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "__version__"]
