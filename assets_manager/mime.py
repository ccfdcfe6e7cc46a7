"""
MIME type detection for served assets.

Detection order:
1. Extension lookup in the resolver's table (defaults + caller overrides)
2. Content sniffing through libmagic, when the ``magic`` binding is installed
3. ``application/octet-stream``
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

# Optional content sniffing (python-magic, needs the libmagic system library)
try:
    import magic
except ImportError:
    magic = None

logger = logging.getLogger("assets_manager.mime")

PathLike = Union[str, "os.PathLike[str]"]

FALLBACK_MIME_TYPE = "application/octet-stream"

# ─── Default extension → MIME type table ─────────────────────────────────────
DEFAULT_MIME_TYPES: Mapping[str, str] = MappingProxyType({
    "txt": "text/plain",
    "htm": "text/html",
    "html": "text/html",
    "php": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "swf": "application/x-shockwave-flash",
    "flv": "video/x-flv",

    # images
    "png": "image/png",
    "jpe": "image/jpeg",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "ico": "image/vnd.microsoft.icon",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    "svg": "image/svg+xml",
    "svgz": "image/svg+xml",

    # archives
    "zip": "application/zip",
    "rar": "application/x-rar-compressed",
    "exe": "application/x-msdownload",
    "msi": "application/x-msdownload",
    "cab": "application/vnd.ms-cab-compressed",

    # audio/video
    "mp3": "audio/mpeg",
    "qt": "video/quicktime",
    "mov": "video/quicktime",

    # adobe
    "pdf": "application/pdf",
    "psd": "image/vnd.adobe.photoshop",
    "ai": "application/postscript",
    "eps": "application/postscript",
    "ps": "application/postscript",

    # ms office
    "doc": "application/msword",
    "rtf": "application/rtf",
    "xls": "application/vnd.ms-excel",
    "ppt": "application/vnd.ms-powerpoint",

    # open office
    "odt": "application/vnd.oasis.opendocument.text",
    "ods": "application/vnd.oasis.opendocument.spreadsheet",

    # fonts
    "eot": "application/vnd.ms-fontobject",
    "woff": "application/font-woff",
    "woff2": "application/font-woff2",
    "ttf": "application/x-font-truetype",
    "otf": "application/x-font-opentype",
})


def sniffing_available() -> bool:
    """True when libmagic content sniffing can be used."""
    return magic is not None


SNIFFING_AVAILABLE = sniffing_available()


def _normalize_extension(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


def _valid_mime_type(value: Any) -> bool:
    """A non-empty string with no control characters."""
    if not isinstance(value, str) or not value.strip():
        return False
    return not any(ord(char) < 32 or char == "\x7f" for char in value)


def build_mime_table(overrides: Optional[Mapping[str, Any]] = None) -> Mapping[str, str]:
    """
    Merge caller entries over the default table.

    Caller entries win on collision.  Keys are normalised to lowercase
    without a leading dot.  A non-mapping *overrides* is ignored, as is
    any entry whose value is not a usable header value.

    Returns:
        Read-only mapping of extension → MIME type
    """
    table = dict(DEFAULT_MIME_TYPES)
    if isinstance(overrides, Mapping):
        for ext, mime_type in overrides.items():
            if not _valid_mime_type(mime_type):
                logger.warning("Ignoring mime_types entry %r: %r is not a valid MIME type", ext, mime_type)
                continue
            table[_normalize_extension(str(ext))] = mime_type
    elif overrides is not None:
        logger.warning("Ignoring mime_types of type %s, expected a mapping", type(overrides).__name__)
    return MappingProxyType(table)


def file_extension(path: PathLike) -> str:
    """Lowercased text after the last dot of the file name ("" if none)."""
    name = Path(path).name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def sniff_mime_type(path: PathLike) -> Optional[str]:
    """
    Inspect the file's bytes with libmagic.

    Returns None when sniffing is unavailable or libmagic cannot
    classify the file.
    """
    if magic is None:
        return None
    try:
        result = magic.from_file(os.fspath(path), mime=True)
    except (OSError, magic.MagicException) as e:
        logger.debug("Content sniffing failed for %s: %s", path, e)
        return None
    return result or None


def detect_mime_type(path: PathLike, mime_types: Mapping[str, str] = DEFAULT_MIME_TYPES) -> str:
    """Detect the MIME type of *path*: extension table, then sniffing, then octet-stream."""
    ext = file_extension(path)
    if ext and ext in mime_types:
        return mime_types[ext]

    sniffed = sniff_mime_type(path)
    if sniffed:
        return sniffed

    return FALLBACK_MIME_TYPE
