"""HTTP middleware.

Provides:
- Request ID correlation
- Admin token authentication
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from devdaily.api.errors import GENERIC_ERROR_MESSAGE, public_message
from devdaily.application.audit_service import bind_audit_context
from devdaily.application.auth_service import AuthService
from devdaily.application.response_formatter import ResponseFormatter
from devdaily.domain.exceptions import AuthenticationError
from devdaily.infrastructure.config import settings
from devdaily.web.errors import is_json_request, render_error_page

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Admin Authentication Middleware
# ============================================================================


# API paths that need a signed-in admin
PROTECTED_API_PREFIXES = ("/api/dashboard", "/api/auth/me", "/api/auth/logout")

# Admin pages reachable without a session
ADMIN_PUBLIC_PATHS = {"/admin/login"}


def extract_token(request: Request) -> str | None:
    """Read a Bearer token, falling back to the admin cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header:
        parts = auth_header.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
            return parts[1].strip()
    return request.cookies.get(settings.admin_cookie_name) or None


def _is_admin_page(path: str) -> bool:
    return path == "/admin" or path.startswith("/admin/")


def requires_admin(path: str) -> bool:
    if _is_admin_page(path):
        return path not in ADMIN_PUBLIC_PATHS
    if path == "/htmx" or path.startswith("/htmx/"):
        return True
    return path.startswith(PROTECTED_API_PREFIXES)


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """Resolve the admin token and guard back office paths.

    Any request carrying a valid token gets ``request.state.admin``.
    Protected JSON and HTMX paths answer 401; admin pages redirect to the
    login form.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        bind_audit_context(
            request.client.host if request.client else None,
            request.headers.get("User-Agent"),
        )
        request.state.admin = None
        request.state.token = None

        path = request.url.path.rstrip("/") or "/"
        token = extract_token(request)
        auth_error: AuthenticationError | None = None
        if token:
            try:
                request.state.admin = AuthService().authenticate(token)
                request.state.token = token
                structlog.contextvars.bind_contextvars(admin_id=request.state.admin.id)
            except AuthenticationError as e:
                auth_error = e

        try:
            if request.state.admin is None and requires_admin(path):
                message = auth_error.message if auth_error else "Authentication required."
                logger.warning("Unauthenticated request", path=path, method=request.method, reason=message)
                if _is_admin_page(path):
                    return RedirectResponse(url="/admin/login", status_code=status.HTTP_303_SEE_OTHER)
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content=ResponseFormatter.error(
                        message=message,
                        error_code="UNAUTHORIZED",
                        request_id=getattr(request.state, "request_id", None),
                    ),
                    headers={"WWW-Authenticate": "Bearer"},
                )
            return await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("admin_id")


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            if not is_json_request(request):
                return render_error_page(request, status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ResponseFormatter.error(
                    message=public_message(e),
                    error_code="INTERNAL_ERROR",
                    request_id=request_id,
                ),
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(AdminAuthMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)
