"""Exception handlers that answer in the caller's format.

JSON API paths get the error envelope, HTMX paths get an error toast
and everything else gets an HTML error page.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from devdaily.api import errors as api_errors
from devdaily.application.response_formatter import ResponseFormatter
from devdaily.domain.exceptions import DomainError
from devdaily.htmx.responses import error_toast
from devdaily.web.templating import templates

JSON_PREFIXES = ("/api", "/health", "/ready", "/docs", "/openapi.json")

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "AUTHENTICATION_ERROR",
    status.HTTP_403_FORBIDDEN: "AUTHORIZATION_ERROR",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def is_json_request(request: Request) -> bool:
    return request.url.path.startswith(JSON_PREFIXES)


def is_htmx_request(request: Request) -> bool:
    return request.url.path.startswith("/htmx") or request.headers.get("HX-Request") == "true"


def render_error_page(request: Request, status_code: int, message: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "pages/error.html",
        {"status_code": status_code, "message": message},
        status_code=status_code,
    )


async def domain_error_handler(request: Request, exc: DomainError) -> Response:
    if is_json_request(request):
        return await api_errors.domain_error_handler(request, exc)
    if is_htmx_request(request):
        return error_toast(exc)
    return render_error_page(request, api_errors.status_for(exc), api_errors.public_message(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    if is_json_request(request):
        return await api_errors.request_validation_handler(request, exc)
    return render_error_page(request, status.HTTP_400_BAD_REQUEST, "The request could not be understood.")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if is_json_request(request):
        return JSONResponse(
            status_code=exc.status_code,
            content=ResponseFormatter.error(
                message=message,
                error_code=HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
                request_id=getattr(request.state, "request_id", None),
            ),
            headers=getattr(exc, "headers", None),
        )
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "The page you are looking for does not exist."
    return render_error_page(request, exc.status_code, message)


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
