"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

The per-connection routine: everything between "a client connected" and
"the connection can be closed".

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         FileHandler.serve()                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   conn.read_header()          bytes until \r\n\r\n                  │
    │        │                      (ConnectionClosedEarly/HeaderTooLarge)│
    │        ▼                                                            │
    │   RequestLineParser.parse()   GET /<path> HTTP/1.1                  │
    │        │                      (MalformedRequestLine)                │
    │        ▼                                                            │
    │   resolve_path()              "/" → index, add .html if no ext      │
    │        │                                                            │
    │        ▼                                                            │
    │   ServingRoot.open()  ──fail──►  write 404, raise FileNotFound      │
    │        │                                                            │
    │        ▼                                                            │
    │   get_mime_type()             extension → Content-Type              │
    │        │                                                            │
    │        ▼                                                            │
    │   write head, sendfile() body                                       │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Nothing is written until the request line has been accepted, so a client
that sends garbage just sees the connection close.

=============================================================================
PATH RESOLUTION
=============================================================================

    Request path        Resolved name       Extension
    ────────────        ─────────────       ─────────
    /                   index.html          .html  (inferred)
    /index              index.html          .html  (inferred)
    /app                app.html            .html  (inferred)
    /style.css          style.css           .css
    /pkg/app.wasm       pkg/app.wasm        .wasm
    /notes.txt          notes.txt           .txt   → text/plain

=============================================================================
PATH TRAVERSAL
=============================================================================

Path resolution itself is pure string work; it does not collapse "..".
Containment is enforced by ServingRoot when it opens the file:

    GET /../../etc/passwd HTTP/1.1

    root            /srv/site
    joined          /srv/site/../../etc/passwd.html
    resolved        /etc/passwd.html          ← outside root!
    → 404, PathOutsideRoot

resolve() follows symlinks too, so a link pointing out of the root is
refused the same way. With strict=False the check is skipped and the OS
opens whatever the joined path names.

=============================================================================
"""

import os
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from ..core.connection import Connection
from ..http.errors import FileNotFound, PathOutsideRoot, ServeError
from ..http.mime_types import get_mime_type
from ..http.request import RequestLineParser
from ..http.response import NOT_FOUND_RESPONSE, ResponseHead, ResponseState, ServeState


logger = logging.getLogger(__name__)


INDEX_NAME = "index"
DEFAULT_EXTENSION = ".html"


@dataclass(frozen=True)
class ResolvedPath:
    """
    A request path mapped to a name under the serving root.

    Attributes:
        name: Root-relative file name, extension included.
        extension: Active extension (".html", ".png", ...).
        inferred: True when ".html" was appended because the request path
                  had no extension.
    """
    name: str
    extension: str
    inferred: bool = False


def file_extension(name: str) -> str:
    """
    Extension of the last segment of ``name``, dot included.

    The last dot wins, unless it is the first character of the segment:

        >>> file_extension("docs/app.min.css")
        '.css'
        >>> file_extension(".profile")
        ''
        >>> file_extension("..")
        '.'
        >>> file_extension("..foo")
        '.foo'
    """
    segment = posixpath.basename(name.rstrip("/"))
    dot = segment.rfind(".")
    if dot <= 0:
        return ""
    return segment[dot:]


def resolve_path(path: str) -> ResolvedPath:
    """
    Map a request path to a root-relative file name.

    Args:
        path: Request path token, starting with "/".

    Returns:
        The ResolvedPath.

    Examples:
        >>> resolve_path("/")
        ResolvedPath(name='index.html', extension='.html', inferred=True)

        >>> resolve_path("/main.css")
        ResolvedPath(name='main.css', extension='.css', inferred=False)
    """
    name = INDEX_NAME if path == "/" else path[1:]

    extension = file_extension(name)
    if extension:
        return ResolvedPath(name=name, extension=extension)

    return ResolvedPath(name=name + DEFAULT_EXTENSION, extension=DEFAULT_EXTENSION, inferred=True)


class ServingRoot:
    """
    The directory files are served from.

    Shared read-only by every request; nothing here is mutated after
    __init__.

    Usage:
        root = ServingRoot("./public")
        with root.open("index.html") as f:
            ...
    """

    def __init__(self, root_dir: str, strict: bool = True):
        """
        Args:
            root_dir: Directory to serve.
            strict: Refuse names that resolve outside root_dir.

        Raises:
            ValueError: If root_dir is not a directory.
        """
        self.root_dir = Path(root_dir).resolve()
        self.strict = strict

        if not self.root_dir.is_dir():
            raise ValueError(f"Serving root is not a directory: {root_dir}")

    def path_for(self, name: str) -> Path:
        """
        Filesystem path for a root-relative name.

        Raises:
            FileNotFound: Name contains a NUL byte, which no OS can open, or
                          (strict mode) runs into a symlink loop.
            PathOutsideRoot: In strict mode, if the name escapes the root.
        """
        if "\0" in name:
            raise FileNotFound(name)

        full_path = self.root_dir / name
        if not self.strict:
            return full_path

        try:
            resolved = full_path.resolve()
        except RuntimeError as e:
            # Symlink loop (before 3.13; later versions leave it to open())
            raise FileNotFound(name) from e

        try:
            resolved.relative_to(self.root_dir)
        except ValueError:
            raise PathOutsideRoot(name) from None
        return full_path

    def open(self, name: str) -> BinaryIO:
        """
        Open a root-relative name for reading in binary mode.

        Raises:
            FileNotFound: Name cannot be opened by construction.
            PathOutsideRoot: Name escapes the root (strict mode).
            OSError: Missing file, directory, permission denied, ...
        """
        return open(self.path_for(name), "rb")


class FileHandler:
    """
    Serves one request per connection from a ServingRoot.

    Stateless between calls: two identical requests produce byte-identical
    responses.

    Usage:
        handler = FileHandler(ServingRoot("./public"), buffer_size=8196)
        with conn:
            handler.serve(conn)
    """

    def __init__(
        self,
        root: ServingRoot,
        buffer_size: int = 8196,
        parser: Optional[RequestLineParser] = None,
    ):
        self.root = root
        self.buffer_size = buffer_size
        self.parser = parser or RequestLineParser()

    def serve(self, conn: Connection) -> ResponseState:
        """
        Read one request from ``conn`` and answer it.

        The connection is NOT closed here; the caller closes it whatever
        the outcome.

        Args:
            conn: The client connection.

        Returns:
            The final ResponseState (DONE) when the file was streamed.

        Raises:
            ConnectionClosedEarly, HeaderTooLarge, MalformedRequestLine:
                Before anything is written.
            FileNotFound: After the 404 response has been written.
            OSError: Any other I/O failure, possibly mid-response.
        """
        progress = ResponseState()
        try:
            self._serve(conn, progress)
        except (ServeError, OSError):
            if progress.state != ServeState.NOT_FOUND_SENT:
                progress.state = ServeState.FAILED
            raise
        finally:
            logger.debug(f"[{conn.id}] Finished in state {progress.state.name}")
            progress.state = ServeState.DONE
        return progress

    def _serve(self, conn: Connection, progress: ResponseState) -> None:
        # ─────────────────────────────────────────────────────────────────
        # READ AND PARSE
        # ─────────────────────────────────────────────────────────────────
        header = conn.read_header(self.buffer_size)
        logger.debug(f"[{conn.id}] <<<\n{header.decode('latin-1')}")

        request = self.parser.parse(header)
        progress.state = ServeState.HEADER_PARSED

        # ─────────────────────────────────────────────────────────────────
        # RESOLVE AND OPEN
        # ─────────────────────────────────────────────────────────────────
        progress.state = ServeState.RESOLVING
        resolved = resolve_path(request.path)
        logger.info(f"[{conn.id}] Opening {resolved.name}")
        if resolved.inferred:
            logger.debug(f"[{conn.id}] No extension in {request.path!r}, assumed {DEFAULT_EXTENSION}")

        try:
            body_file = self.root.open(resolved.name)
        except (FileNotFound, OSError) as e:
            progress.state = ServeState.NOT_FOUND
            self._send_not_found(conn)
            progress.state = ServeState.NOT_FOUND_SENT
            if isinstance(e, FileNotFound):
                raise
            raise FileNotFound(resolved.name) from e

        # ─────────────────────────────────────────────────────────────────
        # STREAM
        # ─────────────────────────────────────────────────────────────────
        with body_file:
            progress.state = ServeState.FOUND
            progress.content_length = os.fstat(body_file.fileno()).st_size

            head = ResponseHead(
                content_type=get_mime_type(resolved.extension),
                content_length=progress.content_length,
            )
            head_bytes = head.to_bytes()
            logger.debug(f"[{conn.id}] >>>\n{head_bytes.decode('latin-1')}")
            conn.send_all(head_bytes)
            progress.state = ServeState.HEADER_SENT

            progress.state = ServeState.STREAMING
            conn.send_file(body_file, progress)

    def _send_not_found(self, conn: Connection) -> None:
        logger.debug(f"[{conn.id}] >>>\n{NOT_FOUND_RESPONSE.decode('latin-1')}")
        conn.send_all(NOT_FOUND_RESPONSE)
