"""
Request handlers.

Only one exists: FileHandler, which answers a connection's single GET with
a file from the serving root or a 404.
"""

from .static import FileHandler, ServingRoot, ResolvedPath, resolve_path

__all__ = [
    "FileHandler",
    "ServingRoot",
    "ResolvedPath",
    "resolve_path",
]
