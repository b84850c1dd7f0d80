"""
Pre-render routing for dashboard pages.

Runs before any page handler: unauthenticated visitors of protected pages
go to the login page, signed-in visitors of the login page go to their
tenant home, and /app/<tenant>/... is rewritten to the tenant's canonical
identifier. API routes are not touched; they enforce access themselves.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from notsoai.core.auth_context import resolve_from_request
from notsoai.core.session import Session

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/app", "/profile")
AUTH_PREFIXES = ("/login",)
LOGIN_PATH = "/login"


def _under(path: str, prefixes) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") for prefix in prefixes)


def decide_route(path: str, session: Optional[Session], query: str = "") -> Optional[str]:
    """Redirect target (path and query) for a page request, or None to let it through."""
    if _under(path, PROTECTED_PREFIXES) and session is None:
        return f"{LOGIN_PATH}?{urlencode({'redirect': path})}"

    if session is None:
        return None

    canonical = session.tenant.canonical

    if _under(path, AUTH_PREFIXES):
        return f"/app/{canonical}/home"

    if path.startswith("/app/"):
        parts = path.split("/")
        segment = parts[2]
        if segment and segment != canonical:
            parts[2] = canonical
            target = "/".join(parts)
            return f"{target}?{query}" if query else target

    return None


class EdgeRouterMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not (_under(path, PROTECTED_PREFIXES) or _under(path, AUTH_PREFIXES)):
            return await call_next(request)

        result = resolve_from_request(request, request.app.state.session_codec)
        target = decide_route(path, result.session, request.url.query)

        if target is not None:
            logger.debug("Edge redirect | %s -> %s", path, target)
            return RedirectResponse(target, status_code=307)

        return await call_next(request)
