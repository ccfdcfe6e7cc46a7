"""
assets-manager - Serve assets from directories outside the web root.

Looks up each request path across an ordered list of asset directories,
answers with the file and its MIME type, and optionally copies the file
into the public web directory so the web server handles later requests
on its own.
"""

__version__ = "0.1.0"

from .config import AssetsConfig, ConfigLoader
from .faults import (
    CacheWriteFault,
    ConfigInvalidFault,
    Escalate,
    Fault,
    FaultDomain,
    FilesystemFault,
    InvalidHeaderError,
    ResponseStreamError,
    Served,
    ServeResult,
    Severity,
)
from .manager import AssetsManager
from .messages import Request, Response, ResponseBody
from .mime import DEFAULT_MIME_TYPES, build_mime_table, detect_mime_type
from .asgi import AssetsMiddleware, create_app

__all__ = [
    "__version__",
    # Core
    "AssetsManager",
    "AssetsConfig",
    "ConfigLoader",
    # Messages
    "Request",
    "Response",
    "ResponseBody",
    # MIME
    "DEFAULT_MIME_TYPES",
    "build_mime_table",
    "detect_mime_type",
    # ASGI
    "AssetsMiddleware",
    "create_app",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigInvalidFault",
    "FilesystemFault",
    "CacheWriteFault",
    "ResponseStreamError",
    "InvalidHeaderError",
    "Served",
    "Escalate",
    "ServeResult",
]
