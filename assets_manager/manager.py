"""
Assets Manager - Serve assets from directories outside the document root.

Features:
- Ordered search paths, first match wins
- Content-type detection from extension, then libmagic sniffing
- Optional copy of every served asset into a public web directory, so
  the front-end web server finds it there on the next request
- Falls through to the next handler (or 404) when nothing matches
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from .config import AssetsConfig
from .faults import CacheWriteFault, Escalate, Fault, ServeResult, Served
from .messages import Request, Response
from .mime import build_mime_table, detect_mime_type

logger = logging.getLogger("assets_manager.manager")

NextHandler = Callable[[Request, Response], Response]


class AssetsManager:
    """
    Asset serving middleware.

    Looks for the request path under each configured directory.  When a
    file is found its contents are returned with the detected MIME type;
    otherwise the request is passed to *next* (or answered with 404).

    Args:
        options: Mapping (or AssetsConfig) with optional keys
                 ``paths``: directory or list of directories to search,
                 ``web_dir``: existing directory to copy found assets into,
                 ``mime_types``: extension → MIME type overrides.
        **kwargs: Same keys as *options*, taking precedence over it.

    Missing or invalid options never raise; the matching feature is
    simply disabled.
    """

    def __init__(
        self,
        options: Union[Mapping[str, Any], AssetsConfig, None] = None,
        **kwargs: Any,
    ):
        if isinstance(options, AssetsConfig):
            config = options
        else:
            merged = dict(options) if isinstance(options, Mapping) else {}
            merged.update(kwargs)
            config = AssetsConfig.from_options(merged)

        self._paths: Tuple[Path, ...] = tuple(Path(p) for p in config.paths)

        self._web_dir: Optional[Path] = None
        if config.web_dir and Path(config.web_dir).is_dir():
            self._web_dir = Path(config.web_dir)
        elif config.web_dir:
            logger.debug("web_dir %s is not a directory, caching disabled", config.web_dir)

        self._mime_types = build_mime_table(config.mime_types)

        logger.debug(
            "Assets manager searching %s, caching %s",
            [str(p) for p in self._paths] or "nothing",
            f"into {self._web_dir}" if self._web_dir else "disabled",
        )

    @classmethod
    def from_config(cls, config: AssetsConfig) -> "AssetsManager":
        return cls(config)

    # ── Public API ────────────────────────────────────────────────────────

    @property
    def paths(self) -> Tuple[Path, ...]:
        return self._paths

    @property
    def web_dir(self) -> Optional[Path]:
        return self._web_dir

    @property
    def mime_types(self) -> Mapping[str, str]:
        return self._mime_types

    def __call__(
        self,
        request: Request,
        response: Response,
        next: Optional[NextHandler] = None,
    ) -> Response:
        """Serve the asset for *request*, or delegate to *next* / answer 404."""
        result = self.serve(request, response)
        if isinstance(result, Served):
            return result.response

        if next is not None:
            return next(request, response)

        return response.set_status(404, f"{request.path} not found")

    handle = __call__

    def serve(self, request: Request, response: Response) -> ServeResult:
        """
        Try to serve *request* into *response*.

        Returns:
            Served with the committed response, or Escalate when no file
            matched or the response body could not be written.
        """
        uri_path = request.path
        file_path = self.find_file(uri_path)
        if file_path is None:
            logger.debug("No asset found for %s", uri_path)
            return Escalate()

        try:
            contents = file_path.read_bytes()
        except OSError as e:
            logger.warning("Unable to read %s: %s", file_path, e)
            return Escalate()

        self.write_to_web_dir(uri_path, contents)

        fault = response.body.overwrite(contents)
        if fault is not None:
            logger.warning("Unable to serve %s. %s", file_path, fault.message)
            return Escalate(fault)

        response.set_status(200)
        response.set_header("Content-Type", self.detect_mime_type(file_path))
        logger.debug("Served %s from %s", uri_path, file_path)
        return Served(response)

    def find_file(self, uri_path: str) -> Optional[Path]:
        """
        Find the file for *uri_path* in the search paths.

        Returns:
            Path of the first readable regular file, or None
        """
        relative = uri_path.lstrip("/")
        if not relative:
            return None

        for root in self._paths:
            candidate = root / relative
            if not self._is_within(root, candidate):
                logger.warning("Rejected path outside %s: %s", root, uri_path)
                continue
            if candidate.is_file() and os.access(candidate, os.R_OK):
                return candidate

        return None

    def detect_mime_type(self, file_path: Union[str, Path]) -> str:
        """MIME type from extension, libmagic sniffing, or octet-stream."""
        return detect_mime_type(file_path, self._mime_types)

    def write_to_web_dir(self, uri_path: str, contents: bytes) -> Optional[Fault]:
        """
        Copy *contents* to ``web_dir + uri_path`` so the web server serves
        it next time.

        Never raises.  Returns the fault when the copy failed, None when
        it succeeded or caching is disabled.
        """
        if self._web_dir is None:
            return None

        if not os.access(self._web_dir, os.W_OK):
            fault = CacheWriteFault(str(self._web_dir), "directory is not writable", operation="access")
            logger.warning("Directory %s is not writeable", self._web_dir)
            return fault

        dest_file = self._web_dir / uri_path.lstrip("/")
        if not self._is_within(self._web_dir, dest_file):
            fault = CacheWriteFault(str(dest_file), "destination escapes web_dir")
            logger.warning(str(fault))
            return fault

        try:
            dest_file.parent.mkdir(parents=True, exist_ok=True)
            dest_file.write_bytes(contents)
        except OSError as e:
            fault = CacheWriteFault(str(dest_file), str(e))
            logger.warning(str(fault))
            return fault

        logger.debug("Cached %s at %s", uri_path, dest_file)
        return None

    # ── Internals ─────────────────────────────────────────────────────────

    @staticmethod
    def _is_within(root: Path, candidate: Path) -> bool:
        """True when *candidate* stays inside *root* once `..` is collapsed."""
        root_norm = os.path.normpath(os.path.abspath(root))
        cand_norm = os.path.normpath(os.path.abspath(candidate))
        return cand_norm == root_norm or cand_norm.startswith(root_norm.rstrip(os.sep) + os.sep)
