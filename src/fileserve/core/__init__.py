"""
Low-level networking: the accept loop and the per-client socket wrapper.
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Sequential accept loop
    "Connection",       # Client socket: bounded header read, send, sendfile
    "ConnectionState",  # Enum for connection lifecycle states
]
