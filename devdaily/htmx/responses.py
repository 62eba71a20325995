"""HTMX response helpers.

Client-side events travel in the ``HX-Trigger`` header as JSON, e.g.
``{"showToast": {"type": "success", "message": "Saved"}, "refreshStats": true}``.
"""

import json
from typing import Any

import structlog
from fastapi import Request, status
from fastapi.responses import HTMLResponse

from devdaily.api.errors import status_for
from devdaily.domain.exceptions import BusinessRuleError, DomainError, ValidationError
from devdaily.web.templating import templates

logger = structlog.get_logger()


def triggers(toast_type: str, message: str, **events: Any) -> dict[str, str]:
    payload: dict[str, Any] = {"showToast": {"type": toast_type, "message": message}, **events}
    return {"HX-Trigger": json.dumps(payload)}


def fragment(
    request: Request,
    template: str,
    context: dict[str, Any] | None = None,
    status_code: int = status.HTTP_200_OK,
    headers: dict[str, str] | None = None,
) -> HTMLResponse:
    return templates.TemplateResponse(request, template, context or {}, status_code=status_code, headers=headers)


def toast(message: str, toast_type: str = "success", status_code: int = status.HTTP_200_OK, **events: Any) -> HTMLResponse:
    """An empty fragment that only carries client events."""
    return HTMLResponse(content="", status_code=status_code, headers=triggers(toast_type, message, **events))


def error_status(error: Exception) -> int:
    # 422 marks an action the client may retry after fixing input
    if isinstance(error, (ValidationError, BusinessRuleError)):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status_for(error)


def error_toast(error: Exception) -> HTMLResponse:
    """Error toast for a failed fragment request."""
    status_code = error_status(error)
    if status_code >= 500:
        logger.exception("HTMX request failed", error=str(error))
        message = "Something went wrong. Please try again."
    else:
        message = error.message if isinstance(error, DomainError) else str(error)
    return toast(message, "error", status_code=status_code)
