"""Middleware: request ID injection, structured access logging, cookie sessions."""

import hashlib
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from sprig.config import Settings
from sprig.core.alerts import Alerts
from sprig.core.errors import ConfigMissing, Redirect, config_missing_response, error_response
from sprig.core.routing import abort
from sprig.core.session import SessionManager

logger = logging.getLogger("sprig.access")
error_logger = logging.getLogger("sprig")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Inject a unique request ID into each request and response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Structured access log: request_id, user_id (hashed), endpoint, status."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed_ms = round((time.monotonic() - start) * 1000, 1)

        request_id = getattr(request.state, "request_id", "-")
        session = getattr(request.state, "session", None)
        user = session.get_user() if session is not None else None
        user_id = _hash_user_id(user["id"]) if isinstance(user, dict) and user.get("id") else "-"
        client_ip = request.client.host if request.client else "-"

        logger.info(
            "request_id=%s user=%s ip=%s method=%s path=%s status=%d elapsed_ms=%.1f",
            request_id,
            user_id,
            client_ip,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


class SessionMiddleware(BaseHTTPMiddleware):
    """Resolve the cookie session and flash alerts for each request.

    Both are exposed as ``request.state.session`` / ``request.state.alerts``
    and write their cookies onto whatever response the request produces.
    """

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        alerts = Alerts(
            self.settings.alerts_cookie_name,
            request.cookies,
            path=self.settings.base_uri or "/",
        )
        session = SessionManager(
            self.settings,
            request.cookies,
            on_expired=lambda message: abort(request, self.settings, alerts, message),
        )
        request.state.alerts = alerts
        request.state.session = session

        try:
            session.setup()
        except Redirect as exc:
            response = RedirectResponse(exc.location, status_code=302)
        except ConfigMissing as exc:
            return config_missing_response(request, exc)
        else:
            try:
                response = await call_next(request)
            except Exception:
                error_logger.exception("Unhandled error on %s %s", request.method, request.url.path)
                response = error_response(request, 500, "Internal server error")

        session.write_cookies(response)
        alerts.write_cookie(response)
        return response


def _hash_user_id(uid: str) -> str:
    """Hash user ID for log privacy: first 12 chars of SHA-256."""
    return hashlib.sha256(str(uid).encode()).hexdigest()[:12]
