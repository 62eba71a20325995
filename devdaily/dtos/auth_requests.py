"""Request DTOs for authentication, admin users and roles."""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Self

from devdaily.dtos.base import InputReader, RequestDTO, is_valid_email

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 72

_USERNAME = re.compile(r"^[A-Za-z0-9_.-]{3,50}$")


def _read_password(reader: InputReader, key: str = "password", required: bool = True) -> str | None:
    # Passwords are never trimmed
    value = reader.data.get(key)
    if value is None or value == "":
        if required:
            reader.error(key, f"The {key.replace('_', ' ')} field is required.")
        return None
    value = str(value)
    if len(value) < MIN_PASSWORD_LENGTH:
        reader.error(key, f"The password must be at least {MIN_PASSWORD_LENGTH} characters.")
    elif len(value) > MAX_PASSWORD_LENGTH:
        reader.error(key, f"The password cannot exceed {MAX_PASSWORD_LENGTH} characters.")
    return value


def _read_username(reader: InputReader, required: bool = True) -> str | None:
    username = reader.string("username", required=required)
    if username is not None and not _USERNAME.match(username):
        reader.error("username", "The username must be 3-50 letters, numbers, dots, dashes or underscores.")
    return username


@dataclass(frozen=True)
class LoginRequest(RequestDTO):
    """Credentials for the admin login."""

    identifier: str
    password: str = field(repr=False)
    remember_me: bool = False

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        identifier = reader.string("identifier") or reader.string("username") or reader.string("email")
        if identifier is None:
            reader.error("identifier", "Email or username is required.")
        elif "@" in identifier:
            if not is_valid_email(identifier):
                reader.error("identifier", "The email must be a valid email address.")
        elif not _USERNAME.match(identifier):
            reader.error("identifier", "The username must be 3-50 characters.")
        password = _read_password(reader)
        remember_me = reader.boolean("remember_me")
        reader.raise_if_errors("Login validation failed")
        return cls(identifier=identifier.lower() if "@" in identifier else identifier, password=password, remember_me=remember_me)

    @property
    def is_email(self) -> bool:
        return "@" in self.identifier

    def to_dict(self) -> dict[str, Any]:
        return {"identifier": self.identifier, "remember_me": self.remember_me}


@dataclass(frozen=True)
class CreateAdminRequest(RequestDTO):
    username: str
    email: str
    name: str
    password: str = field(repr=False)
    role: str = "editor"
    active: bool = True

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        username = _read_username(reader)
        email = reader.email("email", required=True)
        name = reader.string("name", required=True, min_length=2, max_length=100)
        password = _read_password(reader)
        confirm = reader.data.get("password_confirm")
        if confirm is not None and password is not None and confirm != password:
            reader.error("password_confirm", "The password confirmation does not match.")
        role = reader.string("role", max_length=50) or "editor"
        active = reader.boolean("active", default=True)
        reader.raise_if_errors("Admin validation failed")
        return cls(username=username, email=email, name=name, password=password, role=role, active=active)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.pop("password", None)
        return data


@dataclass(frozen=True)
class UpdateAdminRequest(RequestDTO):
    admin_id: int
    username: str | None = None
    email: str | None = None
    name: str | None = None
    role: str | None = None
    active: bool | None = None
    present_fields: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_request(cls, admin_id: int, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        present = {key for key in ("username", "email", "name", "role", "active") if reader.has(key)}
        values: dict[str, Any] = {}
        if "username" in present:
            values["username"] = _read_username(reader)
        if "email" in present:
            values["email"] = reader.email("email", required=True)
        if "name" in present:
            values["name"] = reader.string("name", required=True, min_length=2, max_length=100)
        if "role" in present:
            values["role"] = reader.string("role", required=True, max_length=50)
        if "active" in present:
            values["active"] = reader.boolean("active")
        reader.raise_if_errors("Admin validation failed")
        return cls(admin_id=admin_id, present_fields=frozenset(present), **values)

    def to_update_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present_fields)}


@dataclass(frozen=True)
class ChangePasswordRequest(RequestDTO):
    admin_id: int
    new_password: str = field(repr=False)
    current_password: str | None = field(default=None, repr=False)

    @classmethod
    def from_request(cls, admin_id: int, data: Mapping[str, Any], require_current: bool = True) -> Self:
        reader = InputReader(data)
        current = reader.data.get("current_password") or None
        if require_current and not current:
            reader.error("current_password", "The current password is required.")
        new_password = _read_password(reader, "new_password")
        confirm = reader.data.get("new_password_confirm")
        if confirm is not None and new_password is not None and confirm != new_password:
            reader.error("new_password_confirm", "The password confirmation does not match.")
        reader.raise_if_errors("Password change validation failed")
        return cls(admin_id=admin_id, new_password=new_password, current_password=current)

    def to_dict(self) -> dict[str, Any]:
        return {"admin_id": self.admin_id}


@dataclass(frozen=True)
class CreateRoleRequest(RequestDTO):
    slug: str
    name: str
    description: str | None = None
    permissions: frozenset[str] = frozenset()

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        name = reader.string("name", required=True, min_length=2, max_length=50, label="role name")
        slug = reader.string("slug", max_length=50)
        if slug is None and name:
            slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
        if slug is not None and not re.match(r"^[a-z0-9_]+$", slug):
            reader.error("slug", "The role slug may only contain lowercase letters, numbers and underscores.")
        description = reader.string("description", max_length=255)
        permissions = _read_permission_names(reader)
        reader.raise_if_errors("Role validation failed")
        return cls(slug=slug, name=name, description=description, permissions=frozenset(permissions))


@dataclass(frozen=True)
class AssignPermissionsRequest(RequestDTO):
    role_id: int
    permissions: frozenset[str] = frozenset()

    @classmethod
    def from_request(cls, role_id: int, data: Mapping[str, Any]) -> Self:
        reader = InputReader(data)
        permissions = _read_permission_names(reader)
        reader.raise_if_errors("Permission assignment validation failed")
        return cls(role_id=role_id, permissions=frozenset(permissions))


def _read_permission_names(reader: InputReader) -> list[str]:
    value = reader.data.get("permissions")
    if value is None or value == "":
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    names = [str(item).strip() for item in items if str(item).strip()]
    for name in names:
        if name != "*" and not re.match(r"^[a-z_]+(\.[a-z_]+)*$", name):
            reader.error("permissions", f"Invalid permission name: {name}")
            break
    return names
