"""Back office pages for admin users, roles and the audit trail."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from devdaily.admin.common import FormField, redirect, render, render_form
from devdaily.api.dependencies import get_admin_service, get_authorization_service, require_permission
from devdaily.application.admin_service import AdminService
from devdaily.application.audit_service import AuditService
from devdaily.application.authorization_service import AuthorizationService
from devdaily.domain.entities import Admin
from devdaily.domain.exceptions import DomainError, ValidationError
from devdaily.dtos.auth_requests import AssignPermissionsRequest, CreateAdminRequest, CreateRoleRequest, UpdateAdminRequest
from devdaily.dtos.queries import PaginationQuery
from devdaily.web.forms import read_form

router = APIRouter(prefix="/admin", include_in_schema=False)

AUDIT_FILTERS = ("admin_id", "entity_type", "entity_id", "action_type")


# ============================================================================
# Admin users
# ============================================================================


def _admin_fields(
    authorization: AuthorizationService, values: dict[str, Any], creating: bool
) -> list[FormField]:
    fields = [
        FormField("username", "Username", value=values.get("username"), required=True),
        FormField("email", "Email", type="email", value=values.get("email"), required=True),
        FormField("name", "Name", value=values.get("name"), required=True),
        FormField(
            "role",
            "Role",
            type="select",
            value=values.get("role", "editor"),
            options=[(role.slug, role.name) for role in authorization.list_roles()],
        ),
        FormField("active", "Active", type="checkbox", value=values.get("active", True)),
    ]
    if creating:
        fields += [
            FormField("password", "Password", type="password", required=True),
            FormField("password_confirm", "Confirm password", type="password", required=True),
        ]
    return fields


@router.get("/users", response_class=HTMLResponse)
async def list_admins(
    request: Request,
    admin: Admin = Depends(require_permission("admin.manage")),
    admins: AdminService = Depends(get_admin_service),
) -> HTMLResponse:
    pagination = PaginationQuery.from_request(request.query_params)
    search = request.query_params.get("search") or None
    result = admins.list_admins(pagination.page, pagination.per_page, search)
    return render(request, "admin/users.html", {"result": result, "search": search or ""})


@router.get("/users/new", response_class=HTMLResponse)
async def new_admin(
    request: Request,
    admin: Admin = Depends(require_permission("admin.manage")),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> HTMLResponse:
    fields = _admin_fields(authorization, {}, creating=True)
    return render_form(request, "New admin", "/admin/users", fields, cancel_url="/admin/users")


@router.post("/users", response_class=HTMLResponse)
async def create_admin(
    request: Request,
    admin: Admin = Depends(require_permission("admin.manage")),
    admins: AdminService = Depends(get_admin_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    data = await read_form(request)
    try:
        created = admins.create(CreateAdminRequest.from_request(data), actor_id=admin.id)
    except ValidationError as e:
        fields = _admin_fields(authorization, data, creating=True)
        return render_form(request, "New admin", "/admin/users", fields, e.errors, e.message, "/admin/users")
    return redirect("/admin/users", f"Admin '{created.username}' created.")


@router.get("/users/{admin_id}/edit", response_class=HTMLResponse)
async def edit_admin(
    admin_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("admin.manage")),
    admins: AdminService = Depends(get_admin_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> HTMLResponse:
    target = admins.get_admin(admin_id)
    values = {
        "username": target.username,
        "email": target.email,
        "name": target.name,
        "role": target.role,
        "active": target.active,
    }
    fields = _admin_fields(authorization, values, creating=False)
    return render_form(request, f"Edit {target.username}", f"/admin/users/{admin_id}", fields, cancel_url="/admin/users")


@router.post("/users/{admin_id}", response_class=HTMLResponse)
async def update_admin(
    admin_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("admin.manage")),
    admins: AdminService = Depends(get_admin_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    data = await read_form(request)
    try:
        updated = admins.update(UpdateAdminRequest.from_request(admin_id, data), actor_id=admin.id)
    except DomainError as e:
        errors = e.errors if isinstance(e, ValidationError) else {}
        fields = _admin_fields(authorization, data, creating=False)
        return render_form(
            request, "Edit admin", f"/admin/users/{admin_id}", fields, errors, e.message, "/admin/users"
        )
    return redirect("/admin/users", f"Admin '{updated.username}' updated.")


@router.post("/users/{admin_id}/delete")
async def delete_admin(
    admin_id: int,
    admin: Admin = Depends(require_permission("admin.manage")),
    admins: AdminService = Depends(get_admin_service),
) -> Response:
    try:
        admins.delete(admin_id, actor_id=admin.id)
    except DomainError as e:
        return redirect("/admin/users", e.message, "error")
    return redirect("/admin/users", "Admin deleted.")


@router.post("/users/{admin_id}/unlock")
async def unlock_admin(
    admin_id: int,
    admin: Admin = Depends(require_permission("admin.manage")),
    admins: AdminService = Depends(get_admin_service),
) -> Response:
    unlocked = admins.unlock(admin_id, actor_id=admin.id)
    return redirect("/admin/users", f"Admin '{unlocked.username}' unlocked.")


# ============================================================================
# Roles
# ============================================================================


def _permission_field(authorization: AuthorizationService, selected: Any) -> FormField:
    return FormField(
        "permissions",
        "Permissions",
        type="checkboxes",
        value=list(selected or []),
        options=list(authorization.list_permissions().items()),
    )


@router.get("/roles", response_class=HTMLResponse)
async def list_roles(
    request: Request,
    admin: Admin = Depends(require_permission("role.manage")),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> HTMLResponse:
    return render(
        request,
        "admin/roles.html",
        {"roles": authorization.list_roles(), "permissions": authorization.list_permissions()},
    )


@router.get("/roles/new", response_class=HTMLResponse)
async def new_role(
    request: Request,
    admin: Admin = Depends(require_permission("role.manage")),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> HTMLResponse:
    fields = [
        FormField("name", "Name", required=True),
        FormField("slug", "Slug", help="Lowercase letters, numbers and underscores."),
        FormField("description", "Description", type="textarea"),
        _permission_field(authorization, []),
    ]
    return render_form(request, "New role", "/admin/roles", fields, cancel_url="/admin/roles")


@router.post("/roles", response_class=HTMLResponse)
async def create_role(
    request: Request,
    admin: Admin = Depends(require_permission("role.manage")),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    data = await read_form(request)
    try:
        role = authorization.create_role(CreateRoleRequest.from_request(data), admin_id=admin.id)
    except ValidationError as e:
        fields = [
            FormField("name", "Name", value=data.get("name"), required=True),
            FormField("slug", "Slug", value=data.get("slug")),
            FormField("description", "Description", type="textarea", value=data.get("description")),
            _permission_field(authorization, data.get("permissions")),
        ]
        return render_form(request, "New role", "/admin/roles", fields, e.errors, e.message, "/admin/roles")
    return redirect("/admin/roles", f"Role '{role.name}' created.")


@router.get("/roles/{role_id}/edit", response_class=HTMLResponse)
async def edit_role(
    role_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("role.manage")),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> HTMLResponse:
    role = authorization.get_role(role_id)
    fields = [_permission_field(authorization, role.permissions)]
    return render_form(
        request, f"Permissions for {role.name}", f"/admin/roles/{role_id}", fields, cancel_url="/admin/roles"
    )


@router.post("/roles/{role_id}", response_class=HTMLResponse)
async def assign_permissions(
    role_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("role.manage")),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    data = await read_form(request)
    try:
        role = authorization.assign_permissions(AssignPermissionsRequest.from_request(role_id, data), admin_id=admin.id)
    except ValidationError as e:
        fields = [_permission_field(authorization, data.get("permissions"))]
        return render_form(request, "Permissions", f"/admin/roles/{role_id}", fields, e.errors, e.message, "/admin/roles")
    except DomainError as e:
        return redirect("/admin/roles", e.message, "error")
    return redirect("/admin/roles", f"Permissions for '{role.name}' saved.")


@router.post("/roles/{role_id}/delete")
async def delete_role(
    role_id: int,
    admin: Admin = Depends(require_permission("role.manage")),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    try:
        authorization.delete_role(role_id, admin_id=admin.id)
    except DomainError as e:
        return redirect("/admin/roles", e.message, "error")
    return redirect("/admin/roles", "Role deleted.")


# ============================================================================
# Audit trail
# ============================================================================


@router.get("/audit-logs", response_class=HTMLResponse)
async def list_audit_logs(
    request: Request,
    admin: Admin = Depends(require_permission("audit.view")),
) -> HTMLResponse:
    params = request.query_params
    pagination = PaginationQuery.from_request(params, default_per_page=50)
    filters: dict[str, Any] = {}
    for key in AUDIT_FILTERS:
        value = (params.get(key) or "").strip()
        if not value:
            continue
        if key in ("admin_id", "entity_id"):
            if not value.isdigit():
                continue
            filters[key] = int(value)
        else:
            filters[key] = value
    result = AuditService().list_logs(filters, page=pagination.page, per_page=pagination.per_page)
    return render(request, "admin/audit_logs.html", {"result": result, "filters": filters})


@router.get("/audit-logs/{log_id}", response_class=HTMLResponse)
async def audit_log_detail(
    log_id: int,
    request: Request,
    admin: Admin = Depends(require_permission("audit.view")),
) -> HTMLResponse:
    return render(request, "admin/audit_log.html", {"log": AuditService().get_log(log_id)})
