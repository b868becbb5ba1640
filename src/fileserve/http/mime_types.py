"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type sent with a file.

The table is deliberately closed: it covers what a small static site or a
WebAssembly bundle needs and nothing more. Lookups are exact, so ".HTML"
and ".Png" fall through to the default just like ".txt" or ".js" do.

    ┌────────────────────────────────────────────────────────────────────┐
    │  Extension     Content-Type                                        │
    │  ─────────     ────────────                                        │
    │  .html         text/html                                           │
    │  .css          text/css                                            │
    │  .map          application/json      (source maps)                 │
    │  .svg          image/svg+xml                                       │
    │  .jpg          image/jpg                                           │
    │  .png          image/png                                           │
    │  .wasm         application/wasm      (required for streaming       │
    │                                       compilation in browsers)     │
    │  (anything)    text/plain                                          │
    └────────────────────────────────────────────────────────────────────┘

Extensionless request paths never reach this table bare: path resolution
has already appended ".html" to them (see handlers/static.py).

=============================================================================
"""


MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".map": "application/json",
    ".svg": "image/svg+xml",
    ".jpg": "image/jpg",
    ".png": "image/png",
    ".wasm": "application/wasm",
}

# Returned for every extension not in the table
DEFAULT_MIME_TYPE = "text/plain"


def get_mime_type(extension: str) -> str:
    """
    Get the MIME type for a file extension.

    Args:
        extension: Extension including the leading dot (".css"), or ""
                   for none.

    Returns:
        The MIME type string.

    Examples:
        >>> get_mime_type(".wasm")
        'application/wasm'

        >>> get_mime_type(".js")
        'text/plain'
    """
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
