"""Tests for authentication, admin accounts and permissions."""

from datetime import timedelta

import pytest

from devdaily.application.admin_service import AdminService
from devdaily.application.auth_service import AuthService
from devdaily.application.authorization_service import AuthorizationService
from devdaily.domain.entities import Admin, utcnow
from devdaily.domain.exceptions import (
    AccountLockedError,
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    ValidationError,
)
from devdaily.dtos.auth_requests import ChangePasswordRequest, CreateAdminRequest, LoginRequest, UpdateAdminRequest
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.memory import Repositories


def login(identifier: str, password: str, **extra) -> LoginRequest:
    return LoginRequest.from_request({"identifier": identifier, "password": password, **extra})


@pytest.fixture
def admin() -> Admin:
    return AdminService().ensure_default_admin()


@pytest.fixture
def editor(admin: Admin) -> Admin:
    service = AdminService()
    created = service.create(
        CreateAdminRequest.from_request(
            {
                "username": "editor.one",
                "email": "Editor@DevDaily.local",
                "name": "Editor One",
                "password": "secret-pass",
                "password_confirm": "secret-pass",
            }
        ),
        actor_id=admin.id,
    )
    return service.get_entity(created.id)


class TestLogin:
    def test_login_with_username(self, admin: Admin) -> None:
        result = AuthService().login(login("admin", settings.default_admin_password))
        assert result.token
        assert result.admin.username == "admin"

    def test_login_with_email(self, admin: Admin) -> None:
        """Email identifiers are matched case-insensitively."""
        result = AuthService().login(login("ADMIN@devdaily.local", settings.default_admin_password))
        assert result.admin.id == admin.id

    def test_remember_me_extends_token(self, admin: Admin) -> None:
        service = AuthService(token_ttl_seconds=60, remember_me_ttl_seconds=3600)
        short = service.login(login("admin", settings.default_admin_password))
        long = service.login(login("admin", settings.default_admin_password, remember_me="1"))
        assert long.expires_at - short.expires_at > timedelta(minutes=50)

    def test_wrong_password(self, admin: Admin) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            AuthService().login(login("admin", "wrong-password"))
        assert exc_info.value.message == "Invalid credentials."

    def test_unknown_user_gets_same_message(self, admin: Admin) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            AuthService().login(login("nobody", "whatever"))
        assert exc_info.value.message == "Invalid credentials."

    def test_account_locks_after_repeated_failures(self, admin: Admin) -> None:
        """The fifth failure locks the account, even for the right password."""
        service = AuthService(max_login_attempts=5)
        for _ in range(4):
            with pytest.raises(AuthenticationError):
                service.login(login("admin", "wrong-password"))

        with pytest.raises(AccountLockedError) as exc_info:
            service.login(login("admin", "wrong-password"))
        assert exc_info.value.error_code == "ACCOUNT_LOCKED"

        with pytest.raises(AccountLockedError):
            service.login(login("admin", settings.default_admin_password))

    def test_unlock_allows_login_again(self, admin: Admin) -> None:
        service = AuthService(max_login_attempts=1)
        with pytest.raises(AccountLockedError):
            service.login(login("admin", "wrong-password"))

        AdminService().unlock(admin.id)

        assert service.login(login("admin", settings.default_admin_password)).token

    def test_inactive_account_cannot_log_in(self, admin: Admin, editor: Admin) -> None:
        AdminService().update(UpdateAdminRequest.from_request(editor.id, {"active": "0"}), actor_id=admin.id)
        with pytest.raises(AuthenticationError):
            AuthService().login(login("editor.one", "secret-pass"))

    def test_login_request_requires_identifier(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            LoginRequest.from_request({"password": "x"})
        assert "identifier" in exc_info.value.errors


class TestTokens:
    def test_authenticate_resolves_admin(self, admin: Admin) -> None:
        service = AuthService()
        token = service.login(login("admin", settings.default_admin_password)).token
        assert service.authenticate(token).id == admin.id

    def test_missing_and_unknown_tokens(self) -> None:
        service = AuthService()
        with pytest.raises(AuthenticationError):
            service.authenticate(None)
        with pytest.raises(AuthenticationError):
            service.authenticate("not-a-token")

    def test_expired_token_is_revoked(self, admin: Admin, repositories: Repositories) -> None:
        service = AuthService()
        token = service.login(login("admin", settings.default_admin_password)).token
        repositories.tokens.get_by_token(token).expires_at = utcnow() - timedelta(seconds=1)

        with pytest.raises(AuthenticationError) as exc_info:
            service.authenticate(token)
        assert exc_info.value.message == "Token has expired."
        assert repositories.tokens.get_by_token(token) is None

    def test_logout(self, admin: Admin) -> None:
        service = AuthService()
        token = service.login(login("admin", settings.default_admin_password)).token

        assert service.logout(token) is True
        assert service.logout(token) is False
        with pytest.raises(AuthenticationError):
            service.authenticate(token)

    def test_change_password_revokes_tokens(self, admin: Admin) -> None:
        service = AuthService()
        token = service.login(login("admin", settings.default_admin_password)).token

        service.change_password(
            ChangePasswordRequest.from_request(
                admin.id,
                {
                    "current_password": settings.default_admin_password,
                    "new_password": "a-new-password",
                    "new_password_confirm": "a-new-password",
                },
            )
        )

        with pytest.raises(AuthenticationError):
            service.authenticate(token)
        assert service.login(login("admin", "a-new-password")).token

    def test_change_password_checks_current(self, admin: Admin) -> None:
        request = ChangePasswordRequest.from_request(
            admin.id, {"current_password": "wrong-one", "new_password": "a-new-password"}
        )
        with pytest.raises(ValidationError) as exc_info:
            AuthService().change_password(request)
        assert "current_password" in exc_info.value.errors


class TestAdminService:
    def test_default_admin_is_created_once(self, admin: Admin) -> None:
        assert admin.role == "super_admin"
        assert AdminService().ensure_default_admin() is None

    def test_create_defaults_to_editor(self, editor: Admin) -> None:
        assert editor.role == "editor"
        assert editor.email == "editor@devdaily.local"

    def test_password_confirmation_must_match(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            CreateAdminRequest.from_request(
                {
                    "username": "someone",
                    "email": "someone@devdaily.local",
                    "name": "Someone",
                    "password": "secret-pass",
                    "password_confirm": "other-pass",
                }
            )
        assert "password_confirm" in exc_info.value.errors

    def test_duplicate_username_rejected(self, admin: Admin) -> None:
        request = CreateAdminRequest(username="admin", email="other@devdaily.local", name="Other", password="secret-pass")
        with pytest.raises(ValidationError) as exc_info:
            AdminService().create(request)
        assert "username" in exc_info.value.errors

    def test_unknown_role_rejected(self, admin: Admin) -> None:
        request = CreateAdminRequest(
            username="other", email="other@devdaily.local", name="Other", password="secret-pass", role="owner"
        )
        with pytest.raises(ValidationError) as exc_info:
            AdminService().create(request)
        assert "role" in exc_info.value.errors

    def test_cannot_change_own_role(self, admin: Admin) -> None:
        with pytest.raises(BusinessRuleError):
            AdminService().update(UpdateAdminRequest.from_request(admin.id, {"role": "editor"}), actor_id=admin.id)

    def test_cannot_deactivate_self(self, admin: Admin) -> None:
        with pytest.raises(BusinessRuleError):
            AdminService().update(UpdateAdminRequest.from_request(admin.id, {"active": "0"}), actor_id=admin.id)

    def test_cannot_delete_self(self, admin: Admin) -> None:
        with pytest.raises(BusinessRuleError):
            AdminService().delete(admin.id, actor_id=admin.id)

    def test_last_super_admin_cannot_be_deleted(self, admin: Admin, editor: Admin) -> None:
        with pytest.raises(BusinessRuleError):
            AdminService().delete(admin.id, actor_id=editor.id)

    def test_delete_other_admin(self, admin: Admin, editor: Admin) -> None:
        service = AdminService()
        assert service.delete(editor.id, actor_id=admin.id) is True
        assert [a.username for a in service.list_admins().items] == ["admin"]


class TestAuthorization:
    def test_super_admin_has_every_permission(self, admin: Admin) -> None:
        service = AuthorizationService()
        assert service.has_permission(admin, "role.manage")
        assert service.has_permission(admin, "product.bulk.hard_delete")

    def test_editor_cannot_publish(self, editor: Admin) -> None:
        service = AuthorizationService()
        service.authorize(editor, "product.update")

        with pytest.raises(AuthorizationError) as exc_info:
            service.authorize(editor, "product.publish")
        assert exc_info.value.error_code == "FORBIDDEN"
        assert exc_info.value.permission == "product.publish"

    def test_default_roles(self, admin: Admin) -> None:
        slugs = {role.slug for role in AuthorizationService().list_roles()}
        assert slugs == {"super_admin", "admin", "editor"}
