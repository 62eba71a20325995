"""Back office login, dashboard and profile pages."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from devdaily.admin.common import redirect, render
from devdaily.api.dependencies import (
    get_admin_service,
    get_auth_service,
    get_current_admin,
    get_dashboard_service,
    get_orchestrator,
)
from devdaily.application.admin_service import AdminService
from devdaily.application.auth_service import AuthService
from devdaily.application.dashboard_service import DashboardService
from devdaily.application.product import ProductOrchestrator
from devdaily.domain.entities import Admin
from devdaily.domain.exceptions import AuthenticationError, ValidationError
from devdaily.dtos.auth_requests import ChangePasswordRequest, LoginRequest, UpdateAdminRequest
from devdaily.dtos.queries import ProductQuery
from devdaily.infrastructure.config import settings
from devdaily.web.forms import read_form

router = APIRouter(prefix="/admin", include_in_schema=False)


# ============================================================================
# Session
# ============================================================================


@router.get("/login", response_class=HTMLResponse)
async def login_form(request: Request) -> Response:
    if getattr(request.state, "admin", None) is not None:
        return redirect("/admin")
    return render(request, "admin/login.html", {"errors": {}, "identifier": ""})


@router.post("/login", response_class=HTMLResponse)
async def login(request: Request, auth: AuthService = Depends(get_auth_service)) -> Response:
    data = await read_form(request)
    try:
        login_request = LoginRequest.from_request(data)
        result = auth.login(
            login_request,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("User-Agent"),
        )
    except ValidationError as e:
        return render(
            request,
            "admin/login.html",
            {"errors": e.errors, "identifier": data.get("identifier", "")},
            status_code=422,
        )
    except AuthenticationError as e:
        return render(
            request,
            "admin/login.html",
            {"errors": {"general": e.message}, "identifier": data.get("identifier", "")},
            status_code=401,
        )

    response = redirect("/admin", "Welcome back.")
    response.set_cookie(
        settings.admin_cookie_name,
        result.token,
        max_age=settings.remember_me_ttl_seconds if login_request.remember_me else None,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    request: Request,
    admin: Admin = Depends(get_current_admin),
    auth: AuthService = Depends(get_auth_service),
) -> Response:
    auth.logout(request.state.token)
    response = redirect("/admin/login", "You have been logged out.")
    response.delete_cookie(settings.admin_cookie_name)
    return response


# ============================================================================
# Dashboard
# ============================================================================


@router.get("", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    admin: Admin = Depends(get_current_admin),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
    orchestrator: ProductOrchestrator = Depends(get_orchestrator),
) -> HTMLResponse:
    recent = await orchestrator.list_products(ProductQuery.for_admin(sort_by="updated_at", per_page=10), admin_mode=True)
    needs_review = await orchestrator.get_products_by_status("pending_verification", limit=10)
    return render(
        request,
        "admin/dashboard.html",
        {
            "stats": await dashboard_service.statistics(),
            "health": dashboard_service.health(orchestrator),
            "recent": recent.items,
            "needs_review": needs_review,
        },
    )


# ============================================================================
# Profile
# ============================================================================


@router.get("/profile", response_class=HTMLResponse)
async def profile(request: Request, admin: Admin = Depends(get_current_admin)) -> HTMLResponse:
    return render(request, "admin/profile.html", {"profile": admin, "errors": {}})


@router.post("/profile", response_class=HTMLResponse)
async def update_profile(
    request: Request,
    admin: Admin = Depends(get_current_admin),
    admins: AdminService = Depends(get_admin_service),
) -> Response:
    data = await read_form(request)
    editable = {key: data[key] for key in ("name", "email") if key in data}
    try:
        admins.update(UpdateAdminRequest.from_request(admin.id, editable), actor_id=admin.id)
    except ValidationError as e:
        return render(request, "admin/profile.html", {"profile": admin, "errors": e.errors}, status_code=422)
    return redirect("/admin/profile", "Profile updated.")


@router.post("/profile/password", response_class=HTMLResponse)
async def change_password(
    request: Request,
    admin: Admin = Depends(get_current_admin),
    auth: AuthService = Depends(get_auth_service),
) -> Response:
    data = await read_form(request)
    try:
        auth.change_password(ChangePasswordRequest.from_request(admin.id, data))
    except ValidationError as e:
        return render(request, "admin/profile.html", {"profile": admin, "errors": e.errors}, status_code=422)
    response = redirect("/admin/login", "Password changed. Please log in again.")
    response.delete_cookie(settings.admin_cookie_name)
    return response
