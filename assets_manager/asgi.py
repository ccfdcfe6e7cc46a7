"""
ASGI adapter - Mounts the assets manager in an ASGI application stack.

AssetsMiddleware wraps another ASGI app and answers asset requests
before they reach it.  create_app builds a standalone app that answers
404 for anything it cannot serve.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from .faults import Served
from .manager import AssetsManager
from .messages import Request, Response

Scope = Dict[str, Any]
Receive = Callable[[], Awaitable[dict]]
Send = Callable[[dict], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

logger = logging.getLogger("assets_manager.asgi")

SERVED_METHODS = ("GET", "HEAD")


class AssetsMiddleware:
    """
    ASGI middleware serving assets through an AssetsManager.

    Only GET and HEAD requests are looked up; everything else, and every
    miss, goes to the wrapped application untouched.
    """

    __slots__ = ("app", "manager")

    def __init__(self, app: ASGIApp, manager: AssetsManager):
        self.app = app
        self.manager = manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http" or scope.get("method", "GET") not in SERVED_METHODS:
            await self.app(scope, receive, send)
            return

        request = Request.from_scope(scope)
        result = self.manager.serve(request, Response())
        if isinstance(result, Served):
            await result.response.send_asgi(send, head=request.method == "HEAD")
            return

        logger.debug("Passing %s %s to %r", request.method, request.path, self.app)
        await self.app(scope, receive, send)


async def not_found_app(scope: Scope, receive: Receive, send: Send) -> None:
    """Terminal ASGI app answering 404 with a plain-text body."""
    if scope.get("type") != "http":
        return
    path = scope.get("path", "/")
    response = Response(
        status=404,
        headers={"content-type": "text/plain; charset=utf-8"},
        body=f"{path} not found",
    )
    await response.send_asgi(send, head=scope.get("method") == "HEAD")


def create_app(manager: AssetsManager, fallback: Optional[ASGIApp] = None) -> AssetsMiddleware:
    """Standalone asset server: *manager* in front of *fallback* (404 by default)."""
    return AssetsMiddleware(fallback or not_found_app, manager)
