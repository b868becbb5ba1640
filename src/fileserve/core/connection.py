"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the three byte-level operations the
file handler needs:

    read_header()   collect bytes until \r\n\r\n, in a bounded buffer
    send_all()      write a block of bytes completely
    send_file()     move a file's bytes to the socket with sendfile()

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

A request sent in one write can arrive split over any number of recv()
calls:

    Client sends:   "GET /app HTTP/1.1\r\n\r\n"

    Server may see: recv() → "GET /a"
                    recv() → "pp HTTP/1.1\r"
                    recv() → "\n\r\n"

So we keep appending to a buffer and look for the terminator after every
read, checking the WHOLE occupied region (the terminator can straddle two
reads).

=============================================================================
THE HEADER BUFFER
=============================================================================

    capacity C (ServerConfig.buffer_size)
    ┌──────────────────────────────────────────┬─────────────────────┐
    │ occupied: bytes received so far          │ free                │
    └──────────────────────────────────────────┴─────────────────────┘
    0                                     occupied                    C

    recv_into(buffer[occupied:])      never reads past C
    \r\n\r\n in buffer[:occupied]     → done
    recv() == 0                       → ConnectionClosedEarly
    occupied == C, no terminator      → HeaderTooLarge

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED
     │         │                       ▲
     └─────────┴───────────────────────┘

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from ..http.errors import ConnectionClosedEarly, HeaderTooLarge
from ..http.response import ResponseState


logger = logging.getLogger(__name__)


HEADER_TERMINATOR = b"\r\n\r\n"


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and idempotent close."""
    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier, used as a log prefix.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Per-operation socket deadline in seconds. None blocks
                 forever.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    timeout: Optional[float] = 30.0

    def __post_init__(self):
        # Accepted sockets may inherit the listener's polling timeout;
        # reset to blocking and apply our own deadline.
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_header(self, capacity: int) -> bytes:
        """
        Read until the header terminator, within ``capacity`` bytes.

        Args:
            capacity: Size of the header buffer.

        Returns:
            Every byte received, including the terminator and anything
            after it that arrived in the same read.

        Raises:
            ConnectionClosedEarly: Peer closed before the terminator.
            HeaderTooLarge: Buffer filled without a terminator.
            OSError: Socket errors and timeouts, unchanged.
        """
        self.state = ConnectionState.READING

        buffer = bytearray(capacity)
        view = memoryview(buffer)
        occupied = 0

        while True:
            received = self.socket.recv_into(view[occupied:])
            if received == 0:
                raise ConnectionClosedEarly(occupied)

            # The terminator may straddle the previous read, so look back
            # up to three bytes before the new data.
            search_from = max(0, occupied - len(HEADER_TERMINATOR) + 1)
            occupied += received

            if buffer.find(HEADER_TERMINATOR, search_from, occupied) != -1:
                return bytes(buffer[:occupied])

            if occupied >= capacity:
                raise HeaderTooLarge(capacity)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_all(self, data: bytes) -> None:
        """
        Send every byte of ``data``.

        sendall() blocks until all data is written or raises; a partial
        write is never reported as success.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)

    def send_file(self, file: BinaryIO, progress: ResponseState) -> ResponseState:
        """
        Stream a file's bytes to the client.

        Each sendfile() call starts at ``progress.bytes_sent`` and may move
        fewer bytes than asked for; it is reissued from the new offset until
        the whole length has gone out. A transfer of zero bytes (the file
        shrank under us) also ends the loop.

        Args:
            file: File opened in binary mode.
            progress: Response state with ``content_length`` set.

        Returns:
            ``progress``, updated.

        Raises:
            OSError: Any transfer error; the client may have received part
                     of the body.
        """
        self.state = ConnectionState.WRITING

        while not progress.is_complete:
            sent = self.socket.sendfile(file, offset=progress.bytes_sent, count=progress.remaining)
            if sent == 0:
                break
            progress.advance(sent)

        return progress

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN, so the client sees end of response
        2. drain whatever the client still had in flight
        3. close() releases the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
