"""Back office user management."""

import structlog

from devdaily.application.audit_service import AuditService
from devdaily.application.authorization_service import SUPER_ADMIN, AuthorizationService
from devdaily.domain.entities import Admin, utcnow
from devdaily.domain.exceptions import AdminNotFoundError, BusinessRuleError, ValidationError
from devdaily.dtos.auth_requests import CreateAdminRequest, UpdateAdminRequest
from devdaily.dtos.pagination import PaginatedResult, paginate
from devdaily.dtos.responses import AdminResponse
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.memory import Repositories, get_repositories
from devdaily.infrastructure.security import hash_password

logger = structlog.get_logger()


class AdminService:
    """Service for admin accounts."""

    def __init__(
        self,
        repositories: Repositories | None = None,
        audit: AuditService | None = None,
        authorization: AuthorizationService | None = None,
    ) -> None:
        self.repositories = repositories or get_repositories()
        self.admins = self.repositories.admins
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)
        self.authorization = authorization or AuthorizationService(self.repositories, self.audit)

    def _require(self, admin_id: int) -> Admin:
        admin = self.admins.get(admin_id)
        if admin is None:
            raise AdminNotFoundError(admin_id)
        return admin

    def _check_unique(self, username: str | None, email: str | None, exclude_id: int | None = None) -> None:
        errors: dict[str, str] = {}
        if username:
            existing = self.admins.get_by_username(username)
            if existing is not None and existing.id != exclude_id:
                errors["username"] = "The username is already taken."
        if email:
            existing = self.admins.get_by_email(email)
            if existing is not None and existing.id != exclude_id:
                errors["email"] = "The email is already registered."
        if errors:
            raise ValidationError("Admin validation failed", errors)

    def _check_role(self, role: str) -> None:
        if not self.authorization.role_exists(role):
            raise ValidationError("Admin validation failed", {"role": f"Unknown role: {role}"})

    def list_admins(self, page: int = 1, per_page: int = 20, search: str | None = None) -> PaginatedResult[AdminResponse]:
        admins = sorted(self.admins.all(), key=lambda a: a.id)
        if search:
            needle = search.lower()
            admins = [
                a for a in admins if needle in a.username.lower() or needle in a.email.lower() or needle in a.name.lower()
            ]
        return paginate(admins, page, per_page).map(AdminResponse.from_entity)

    def get_admin(self, admin_id: int) -> AdminResponse:
        return AdminResponse.from_entity(self._require(admin_id))

    def get_entity(self, admin_id: int) -> Admin:
        return self._require(admin_id)

    def create(self, request: CreateAdminRequest, actor_id: int | None = None) -> AdminResponse:
        self._check_unique(request.username, request.email)
        self._check_role(request.role)
        admin = self.admins.add(
            Admin(
                username=request.username,
                email=request.email,
                name=request.name,
                password_hash=hash_password(request.password),
                role=request.role,
                active=request.active,
            )
        )
        self.audit.record("admin.create", "admin", admin.id, admin_id=actor_id, new_values=request.to_dict())
        logger.info("Admin created", admin_id=admin.id, role=admin.role)
        return AdminResponse.from_entity(admin)

    def update(self, request: UpdateAdminRequest, actor_id: int | None = None) -> AdminResponse:
        admin = self._require(request.admin_id)
        changes = request.to_update_dict()
        self._check_unique(changes.get("username"), changes.get("email"), admin.id)
        if "role" in changes:
            self._check_role(changes["role"])
            if admin.id == actor_id and changes["role"] != admin.role:
                raise BusinessRuleError("You cannot change your own role.")
        if changes.get("active") is False and admin.id == actor_id:
            raise BusinessRuleError("You cannot deactivate your own account.")

        old_values = {key: getattr(admin, key) for key in changes}
        for key, value in changes.items():
            setattr(admin, key, value)
        admin.updated_at = utcnow()
        self.admins.update(admin)
        if changes.get("active") is False:
            self.repositories.tokens.revoke_for_admin(admin.id)

        self.audit.record("admin.update", "admin", admin.id, admin_id=actor_id, old_values=old_values, new_values=changes)
        logger.info("Admin updated", admin_id=admin.id, fields=sorted(changes))
        return AdminResponse.from_entity(admin)

    def delete(self, admin_id: int, actor_id: int | None = None) -> bool:
        admin = self._require(admin_id)
        if admin.id == actor_id:
            raise BusinessRuleError("You cannot delete your own account.")
        if admin.role == SUPER_ADMIN and self.admins.count_by_role(SUPER_ADMIN) <= 1:
            raise BusinessRuleError("The last super admin cannot be deleted.")
        self.admins.delete(admin.id)
        self.repositories.tokens.revoke_for_admin(admin.id)
        self.audit.record(
            "admin.delete", "admin", admin.id, admin_id=actor_id, old_values={"username": admin.username}
        )
        logger.info("Admin deleted", admin_id=admin_id)
        return True

    def unlock(self, admin_id: int, actor_id: int | None = None) -> AdminResponse:
        admin = self._require(admin_id)
        admin.login_attempts = 0
        self.admins.update(admin)
        self.audit.record("admin.unlock", "admin", admin.id, admin_id=actor_id, summary="Account unlocked")
        logger.info("Admin unlocked", admin_id=admin.id)
        return AdminResponse.from_entity(admin)

    def ensure_default_admin(self) -> Admin | None:
        """Create the configured super admin when no admin exists yet."""
        self.authorization.ensure_default_roles()
        if self.admins.count():
            return None
        admin = self.admins.add(
            Admin(
                username=settings.default_admin_username,
                email=settings.default_admin_email,
                name="Administrator",
                password_hash=hash_password(settings.default_admin_password),
                role=SUPER_ADMIN,
            )
        )
        logger.info("Default admin created", admin_id=admin.id, username=admin.username)
        return admin
