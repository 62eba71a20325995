"""Shared helpers for the back office pages."""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from fastapi import Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from devdaily.application.authorization_service import AuthorizationService
from devdaily.domain.entities import Admin
from devdaily.web.templating import templates


@dataclass
class FormField:
    """One input on a generic admin form."""

    name: str
    label: str
    type: str = "text"
    value: Any = None
    options: list[tuple[Any, str]] = field(default_factory=list)
    required: bool = False
    help: str | None = None


def render(
    request: Request,
    template: str,
    context: dict[str, Any] | None = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    """Render an admin page with the signed-in admin and any notice."""
    admin: Admin | None = getattr(request.state, "admin", None)
    authorization = AuthorizationService()
    base = {
        "current_admin": admin,
        "can": (lambda permission: admin is not None and authorization.has_permission(admin, permission)),
        "notice": request.query_params.get("notice"),
        "notice_type": request.query_params.get("notice_type", "success"),
    }
    return templates.TemplateResponse(request, template, {**base, **(context or {})}, status_code=status_code)


def redirect(url: str, notice: str | None = None, notice_type: str = "success") -> RedirectResponse:
    """Redirect after a POST, carrying a one-shot notice in the query string."""
    if notice:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{urlencode({'notice': notice, 'notice_type': notice_type})}"
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def render_form(
    request: Request,
    title: str,
    action: str,
    fields: list[FormField],
    errors: dict[str, str] | None = None,
    message: str | None = None,
    cancel_url: str | None = None,
    multipart: bool = False,
) -> HTMLResponse:
    return render(
        request,
        "admin/form.html",
        {
            "title": title,
            "action": action,
            "fields": fields,
            "errors": errors or {},
            "message": message,
            "cancel_url": cancel_url,
            "multipart": multipart,
        },
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY if errors or message else status.HTTP_200_OK,
    )
