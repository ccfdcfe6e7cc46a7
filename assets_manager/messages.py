"""
Messages - Minimal request/response objects the middleware works with.

Provides:
- Request built directly or from an ASGI HTTP scope
- ResponseBody, an in-memory byte stream with rewindable read-back
- Response with status, reason phrase, headers and ASGI sending
"""

from __future__ import annotations

import io
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .faults import InvalidHeaderError, ResponseStreamError


# ============================================================================
# Request
# ============================================================================

class Request:
    """
    Incoming request as seen by the middleware.

    Only the URI path is required; method and headers are carried for
    adapters that need them.
    """

    __slots__ = ("path", "method", "query_string", "_headers")

    def __init__(
        self,
        path: str = "/",
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        query_string: str = "",
    ):
        self.path = path or "/"
        self.method = method.upper()
        self.query_string = query_string
        self._headers: Dict[str, str] = {
            k.lower(): v for k, v in (headers or {}).items()
        }

    @classmethod
    def from_scope(cls, scope: Mapping[str, Any]) -> "Request":
        """Build a Request from an ASGI HTTP scope."""
        headers: Dict[str, str] = {}
        for name, value in scope.get("headers", ()):
            headers[name.decode("latin-1")] = value.decode("latin-1")

        query_string = scope.get("query_string", b"")
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")

        return cls(
            path=scope.get("path", "/"),
            method=scope.get("method", "GET"),
            headers=headers,
            query_string=query_string,
        )

    @property
    def headers(self) -> Dict[str, str]:
        return self._headers

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a header value (case-insensitive)."""
        return self._headers.get(name.lower(), default)

    def __repr__(self) -> str:
        return f"Request({self.method} {self.path})"


# ============================================================================
# Response body
# ============================================================================

class ResponseBody:
    """
    In-memory response body stream.

    Supports writing, rewinding and reading back what was written.
    Once closed, writes raise ResponseStreamError.
    """

    def __init__(self, initial: bytes = b""):
        self._buffer = io.BytesIO()
        if initial:
            self._buffer.write(initial)

    @property
    def writable(self) -> bool:
        return not self._buffer.closed

    def write(self, data: Union[bytes, str]) -> int:
        """Write *data* at the current position and return the byte count."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            return self._buffer.write(data)
        except ValueError as e:
            raise ResponseStreamError(f"Unable to write response body: {e}") from e

    def rewind(self) -> None:
        if self.writable:
            self._buffer.seek(0)

    def truncate(self) -> None:
        """Discard everything after the current position."""
        if self.writable:
            self._buffer.truncate()

    def overwrite(self, data: bytes) -> Optional[ResponseStreamError]:
        """
        Replace the whole body with *data*.

        Returns the fault instead of raising it; None on success.
        """
        if not self.writable:
            return ResponseStreamError("Response body stream is closed")
        self.rewind()
        self.truncate()
        try:
            self.write(data)
        except ResponseStreamError as fault:
            return fault
        return None

    def read(self) -> bytes:
        """Read from the current position to the end."""
        if not self.writable:
            return b""
        return self._buffer.read()

    def getvalue(self) -> bytes:
        """Full body contents, independent of the current position."""
        if not self.writable:
            return b""
        return self._buffer.getvalue()

    def close(self) -> None:
        self._buffer.close()

    def __len__(self) -> int:
        return len(self.getvalue())


# ============================================================================
# Response
# ============================================================================

class Response:
    """
    HTTP response built up by the middleware.

    Headers are stored with lowercased names.  The reason phrase defaults
    to the standard phrase for the status code.
    """

    def __init__(
        self,
        status: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        body: Union[bytes, str, ResponseBody] = b"",
        reason: str = "",
    ):
        self.status = status
        self._reason = reason
        self._headers: Dict[str, str] = {}
        for key, value in (headers or {}).items():
            self.set_header(key, value)

        if isinstance(body, ResponseBody):
            self.body = body
        else:
            if isinstance(body, str):
                body = body.encode("utf-8")
            self.body = ResponseBody(body)

    @property
    def headers(self) -> Dict[str, str]:
        """Get response headers."""
        return self._headers

    @property
    def reason(self) -> str:
        if self._reason:
            return self._reason
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    @property
    def content(self) -> bytes:
        """Body bytes written so far."""
        return self.body.getvalue()

    def set_status(self, status: int, reason: str = "") -> "Response":
        """Set status code and optional reason phrase."""
        self.status = status
        self._reason = reason
        return self

    def set_header(self, name: str, value: str) -> "Response":
        """Set header (replaces existing)."""
        self._validate_header(name, value)
        self._headers[name.lower()] = value
        return self

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._headers.get(name.lower(), default)

    def _validate_header(self, name: str, value: str) -> None:
        """Reject header names/values that contain control characters."""
        for char in name:
            if ord(char) < 32:
                raise InvalidHeaderError(
                    f"Invalid header name: {name!r}",
                    metadata={"header_name": name},
                )

        for char in value:
            if char in ("\r", "\n"):
                raise InvalidHeaderError(
                    f"Invalid header value: {value!r}",
                    metadata={"header_name": name, "header_value": value},
                )

    def _prepare_headers(self, content_length: int) -> list:
        """Headers as ASGI byte tuples, with content-length computed."""
        headers_list = [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers.items()
            if name != "content-length"
        ]
        headers_list.append((b"content-length", str(content_length).encode("latin-1")))
        return headers_list

    async def send_asgi(
        self,
        send: Callable[[dict], Awaitable[None]],
        head: bool = False,
    ) -> None:
        """
        Send response via ASGI.

        For HEAD requests the content-length of the full body is sent
        without the body itself.
        """
        content = self.content
        await send({
            "type": "http.response.start",
            "status": self.status,
            "headers": self._prepare_headers(len(content)),
        })
        await send({
            "type": "http.response.body",
            "body": b"" if head else content,
            "more_body": False,
        })

    def __repr__(self) -> str:
        return f"Response({self.status} {self.reason})"
