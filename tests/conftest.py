"""
Shared test fixtures and helpers for the assets-manager test suite.
"""

from pathlib import Path
from typing import List, Optional

import pytest

from assets_manager.messages import Request, Response

ASSETS_DIR = Path(__file__).parent / "assets"


# ============================================================================
# Request / Response Helpers
# ============================================================================


def make_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
    type: str = "http",
) -> dict:
    """Build a minimal ASGI HTTP scope."""
    raw_headers = []
    for name, value in headers or []:
        raw_headers.append((name.encode("latin-1"), value.encode("latin-1")))
    return {
        "type": type,
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "scheme": "http",
        "server": ("127.0.0.1", 8000),
        "client": ("127.0.0.1", 12345),
        "root_path": "",
    }


def make_next(status: int = 418, body: bytes = b"from next"):
    """A next handler that records its calls and returns a fresh response."""
    calls = []

    def next_handler(request: Request, response: Response) -> Response:
        calls.append((request, response))
        return Response(status=status, body=body)

    next_handler.calls = calls
    return next_handler


# ============================================================================
# Filesystem fixtures
# ============================================================================


@pytest.fixture
def search_a(tmp_path):
    """First search directory."""
    root = tmp_path / "a"
    (root / "sub").mkdir(parents=True)
    (root / "shared.txt").write_bytes(b"from a")
    (root / "sub" / "test.css").write_bytes(b"body { color: red; }")
    (root / "app.js").write_bytes(b"\x00\x01\x02\xff binary garbage")
    return root


@pytest.fixture
def search_b(tmp_path):
    """Second search directory."""
    root = tmp_path / "b"
    root.mkdir()
    (root / "shared.txt").write_bytes(b"from b")
    (root / "only-b.json").write_bytes(b'{"b": true}')
    return root


@pytest.fixture
def web_dir(tmp_path):
    """Empty public directory."""
    root = tmp_path / "public"
    root.mkdir()
    return root
