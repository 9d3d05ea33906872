"""
HTTP middleware: request logging and sign-in redirects for dashboard pages.
"""

import logging
import time
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from core.config import settings
from core.security import decode_token

logger = logging.getLogger("missionboard.access")

# Browser routes that need a session (API routes authenticate per handler)
PROTECTED_PREFIXES = (
    "/dashboard",
    "/users",
    "/plans",
    "/subscriptions",
    "/events",
    "/payments",
    "/analytics",
    "/settings",
)

SIGNIN_PATH = "/auth/signin"


def is_protected_path(path: str) -> bool:
    if path.startswith("/api/"):
        return False
    return any(path == prefix or path.startswith(prefix + "/") for prefix in PROTECTED_PREFIXES)


class AuthRedirectMiddleware(BaseHTTPMiddleware):
    """Send unauthenticated page navigation to the sign-in page.

    Only checks that the session cookie holds a valid token; every
    authenticated principal gets the same route access.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if is_protected_path(path):
            token = request.cookies.get(settings.session_cookie_name)
            if not token or not decode_token(token):
                query = urlencode({"callbackUrl": path})
                return RedirectResponse(url=f"{SIGNIN_PATH}?{query}", status_code=307)
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response
