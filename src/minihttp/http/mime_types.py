"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type sent with /file/{name} responses.

    report.html  → text/html
    notes.txt    → text/plain
    photo.jpg    → image/jpeg
    archive      → application/octet-stream   (no extension)
    thing.xyz    → application/octet-stream   (unknown extension)

The table is built once at import time and exposed read-only
(MappingProxyType), so every connection thread can consult it without
locking.

=============================================================================
"""

from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Keys are lowercase extensions including the dot.
#
# =============================================================================

_MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".txt": "text/plain",
    ".css": "text/css",
    ".js": "text/javascript",
    ".csv": "text/csv",
    ".md": "text/markdown",
    ".json": "application/json",
    ".xml": "application/xml",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",

    # -------------------------------------------------------------------------
    # DOCUMENTS AND ARCHIVES
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
    ".wasm": "application/wasm",
}

MIME_TYPES: Mapping[str, str] = MappingProxyType(_MIME_TYPES)

# "I don't know what this is, treat it as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or bare file name.
        default: Returned for unknown or missing extensions.
                 application/octet-stream if not given.

    Examples:
        >>> get_mime_type("index.html")
        'text/html'

        >>> get_mime_type("IMAGE.PNG")
        'image/png'

        >>> get_mime_type("Makefile")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()  # .PNG → .png
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)
