"""Authentication API endpoints.

Provides:
- POST /api/auth/login - exchange credentials for a bearer token
- POST /api/auth/logout - revoke the current token
- GET /api/auth/me - the signed-in admin
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from devdaily.api.dependencies import get_auth_service, get_authorization_service, get_current_admin
from devdaily.api.schemas import ApiResponse, LoginBody
from devdaily.application.auth_service import AuthService
from devdaily.application.authorization_service import AuthorizationService
from devdaily.application.response_formatter import ResponseFormatter
from devdaily.domain.entities import Admin
from devdaily.dtos.auth_requests import LoginRequest
from devdaily.dtos.responses import AdminResponse
from devdaily.infrastructure.config import settings

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=ApiResponse, status_code=status.HTTP_200_OK, summary="Log in")
async def login(
    body: LoginBody,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Log in with a username or email and a password.

    Returns the token in the body and also sets it as an HTTP-only
    cookie so browser clients can call HTMX endpoints.
    """
    login_request = LoginRequest.from_request(body.model_dump(exclude_none=True))
    result = auth.login(
        login_request,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
    )
    response = JSONResponse(content=ResponseFormatter.success(result.to_dict(), "Login successful"))
    response.set_cookie(
        settings.admin_cookie_name,
        result.token,
        max_age=settings.remember_me_ttl_seconds if login_request.remember_me else None,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.post("/logout", response_model=ApiResponse, summary="Log out")
async def logout(
    request: Request,
    admin: Admin = Depends(get_current_admin),
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    auth.logout(request.state.token)
    response = JSONResponse(content=ResponseFormatter.success(None, "Logged out"))
    response.delete_cookie(settings.admin_cookie_name)
    return response


@router.get("/me", response_model=ApiResponse, summary="Current admin")
async def me(
    admin: Admin = Depends(get_current_admin),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> dict:
    role = authorization.roles.get_by_slug(admin.role)
    data = {
        **AdminResponse.from_entity(admin).to_dict(),
        "permissions": sorted(role.permissions) if role else [],
    }
    return ResponseFormatter.success(data)
