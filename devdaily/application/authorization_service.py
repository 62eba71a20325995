"""Roles and permissions.

Admins carry a role slug; a role grants a set of permission names. The
``*`` permission grants everything.
"""

import structlog

from devdaily.application.audit_service import AuditService
from devdaily.domain.entities import Admin, Role
from devdaily.domain.exceptions import AuthorizationError, BusinessRuleError, RoleNotFoundError, ValidationError
from devdaily.dtos.auth_requests import AssignPermissionsRequest, CreateRoleRequest
from devdaily.dtos.responses import RoleResponse
from devdaily.infrastructure.memory import Repositories, get_repositories

logger = structlog.get_logger()

PERMISSIONS: dict[str, str] = {
    "product.view": "View products in the back office",
    "product.create": "Create products",
    "product.update": "Edit products",
    "product.delete": "Move products to the trash",
    "product.publish": "Publish and unpublish products",
    "product.verify": "Verify products",
    "product.archive": "Archive products",
    "product.bulk": "Run bulk product actions",
    "product.bulk.hard_delete": "Permanently delete products in bulk",
    "category.manage": "Manage categories",
    "link.manage": "Manage marketplace links",
    "marketplace.manage": "Manage marketplaces",
    "badge.manage": "Manage badges",
    "admin.manage": "Manage admin users",
    "role.manage": "Manage roles and permissions",
    "audit.view": "View audit logs",
}

SUPER_ADMIN = "super_admin"

DEFAULT_ROLES: dict[str, dict] = {
    SUPER_ADMIN: {
        "name": "Super Admin",
        "description": "Unrestricted access",
        "permissions": {"*"},
    },
    "admin": {
        "name": "Admin",
        "description": "Manages the catalog and its workflow",
        "permissions": set(PERMISSIONS) - {"admin.manage", "role.manage", "product.bulk.hard_delete"},
    },
    "editor": {
        "name": "Editor",
        "description": "Creates and edits product drafts",
        "permissions": {"product.view", "product.create", "product.update", "link.manage", "badge.manage"},
    },
}


class AuthorizationService:
    """Service for role and permission checks."""

    def __init__(self, repositories: Repositories | None = None, audit: AuditService | None = None) -> None:
        self.repositories = repositories or get_repositories()
        self.roles = self.repositories.roles
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)

    def ensure_default_roles(self) -> int:
        """Create any missing built-in roles.

        Returns:
            Number of roles created.
        """
        created = 0
        for slug, definition in DEFAULT_ROLES.items():
            if self.roles.get_by_slug(slug) is None:
                self.roles.add(
                    Role(
                        slug=slug,
                        name=definition["name"],
                        description=definition["description"],
                        permissions=set(definition["permissions"]),
                        is_system=True,
                    )
                )
                created += 1
        if created:
            logger.info("Default roles created", count=created)
        return created

    def _require(self, role_id: int) -> Role:
        role = self.roles.get(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    def _response(self, role: Role) -> RoleResponse:
        return RoleResponse.from_entity(role, self.repositories.admins.count_by_role(role.slug))

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def list_roles(self) -> list[RoleResponse]:
        return [self._response(role) for role in sorted(self.roles.all(), key=lambda r: r.id)]

    def get_role(self, role_id: int) -> RoleResponse:
        return self._response(self._require(role_id))

    def role_exists(self, slug: str) -> bool:
        return self.roles.get_by_slug(slug) is not None

    def list_permissions(self) -> dict[str, str]:
        return dict(PERMISSIONS)

    def _check_permission_names(self, names: frozenset[str]) -> None:
        unknown = sorted(name for name in names if name != "*" and name not in PERMISSIONS)
        if unknown:
            raise ValidationError(
                "Role validation failed", {"permissions": f"Unknown permissions: {', '.join(unknown)}"}
            )

    def create_role(self, request: CreateRoleRequest, admin_id: int | None = None) -> RoleResponse:
        if self.roles.get_by_slug(request.slug) is not None:
            raise ValidationError("Role validation failed", {"slug": "A role with this slug already exists."})
        self._check_permission_names(request.permissions)
        role = self.roles.add(
            Role(
                slug=request.slug,
                name=request.name,
                description=request.description,
                permissions=set(request.permissions),
            )
        )
        self.audit.record(
            "role.create",
            "role",
            role.id,
            admin_id=admin_id,
            new_values={"slug": role.slug, "permissions": sorted(role.permissions)},
        )
        logger.info("Role created", role_id=role.id, slug=role.slug)
        return self._response(role)

    def assign_permissions(self, request: AssignPermissionsRequest, admin_id: int | None = None) -> RoleResponse:
        role = self._require(request.role_id)
        if role.slug == SUPER_ADMIN:
            raise BusinessRuleError("The super admin role always has every permission.")
        self._check_permission_names(request.permissions)
        old = sorted(role.permissions)
        role.permissions = set(request.permissions)
        self.roles.update(role)
        self.audit.record(
            "role.permissions",
            "role",
            role.id,
            admin_id=admin_id,
            old_values={"permissions": old},
            new_values={"permissions": sorted(role.permissions)},
        )
        logger.info("Role permissions assigned", role_id=role.id, count=len(role.permissions))
        return self._response(role)

    def delete_role(self, role_id: int, admin_id: int | None = None) -> bool:
        role = self._require(role_id)
        if role.is_system:
            raise BusinessRuleError("Built-in roles cannot be deleted.", details={"role": role.slug})
        in_use = self.repositories.admins.count_by_role(role.slug)
        if in_use:
            raise BusinessRuleError(
                f"Role is assigned to {in_use} admins.", details={"role": role.slug, "admin_count": in_use}
            )
        self.roles.delete(role.id)
        self.audit.record("role.delete", "role", role.id, admin_id=admin_id, old_values={"slug": role.slug})
        logger.info("Role deleted", role_id=role_id)
        return True

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def has_permission(self, admin: Admin, permission: str) -> bool:
        if not admin.active:
            return False
        role = self.roles.get_by_slug(admin.role)
        return role is not None and role.grants(permission)

    def authorize(self, admin: Admin, permission: str) -> None:
        """Raise AuthorizationError unless the admin holds ``permission``."""
        if not self.has_permission(admin, permission):
            logger.warning("Permission denied", admin_id=admin.id, permission=permission)
            raise AuthorizationError(permission)
