"""Admin authentication.

Password login issues an opaque bearer token stored in the token
repository. Repeated failures lock the account until an administrator
unlocks it.
"""

from datetime import timedelta

import structlog

from devdaily.application.audit_service import AuditService
from devdaily.domain.entities import Admin, AdminToken, utcnow
from devdaily.domain.exceptions import AccountLockedError, AuthenticationError, ValidationError
from devdaily.dtos.auth_requests import ChangePasswordRequest, LoginRequest
from devdaily.dtos.responses import AdminResponse, LoginResponse
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.memory import Repositories, get_repositories
from devdaily.infrastructure.security import generate_token, hash_password, verify_password

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials."


class AuthService:
    """Service for login, logout and token resolution."""

    def __init__(
        self,
        repositories: Repositories | None = None,
        audit: AuditService | None = None,
        max_login_attempts: int | None = None,
        token_ttl_seconds: int | None = None,
        remember_me_ttl_seconds: int | None = None,
    ) -> None:
        self.repositories = repositories or get_repositories()
        self.admins = self.repositories.admins
        self.tokens = self.repositories.tokens
        self.audit = audit or AuditService(self.repositories.audit_logs, self.repositories.admins)
        self.max_login_attempts = max_login_attempts or settings.max_login_attempts
        self.token_ttl = timedelta(seconds=token_ttl_seconds or settings.token_ttl_seconds)
        self.remember_me_ttl = timedelta(seconds=remember_me_ttl_seconds or settings.remember_me_ttl_seconds)

    def _find(self, request: LoginRequest) -> Admin | None:
        if request.is_email:
            return self.admins.get_by_email(request.identifier)
        return self.admins.get_by_username(request.identifier)

    def login(
        self,
        request: LoginRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> LoginResponse:
        """Check credentials and issue a token.

        Raises:
            AccountLockedError: If the account has too many failed attempts.
            AuthenticationError: If the credentials are wrong or the account is inactive.
        """
        admin = self._find(request)
        if admin is None:
            logger.warning("Login failed", reason="unknown_identifier")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if admin.login_attempts >= self.max_login_attempts:
            logger.warning("Login blocked", admin_id=admin.id, reason="locked")
            raise AccountLockedError("Account is locked after too many failed attempts.")
        if not admin.active:
            raise AuthenticationError("Account is inactive.")

        if not verify_password(request.password, admin.password_hash):
            admin.login_attempts += 1
            self.admins.update(admin)
            logger.warning("Login failed", admin_id=admin.id, attempts=admin.login_attempts)
            if admin.login_attempts >= self.max_login_attempts:
                self.audit.record("admin.locked", "admin", admin.id, admin_id=admin.id, summary="Account locked")
                raise AccountLockedError("Account is locked after too many failed attempts.")
            raise AuthenticationError(INVALID_CREDENTIALS)

        now = utcnow()
        admin.login_attempts = 0
        admin.last_login = now
        self.admins.update(admin)

        ttl = self.remember_me_ttl if request.remember_me else self.token_ttl
        token = self.tokens.add(
            AdminToken(
                token=generate_token(),
                admin_id=admin.id,
                expires_at=now + ttl,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        self.tokens.purge_expired(now)
        self.audit.record("admin.login", "admin", admin.id, admin_id=admin.id, summary="Logged in")
        logger.info("Admin logged in", admin_id=admin.id, remember_me=request.remember_me)
        return LoginResponse(token=token.token, expires_at=token.expires_at, admin=AdminResponse.from_entity(admin))

    def logout(self, token: str) -> bool:
        record = self.tokens.get_by_token(token)
        if record is None:
            return False
        self.tokens.revoke(token)
        self.audit.record("admin.logout", "admin", record.admin_id, admin_id=record.admin_id, summary="Logged out")
        logger.info("Admin logged out", admin_id=record.admin_id)
        return True

    def authenticate(self, token: str | None) -> Admin:
        """Resolve a bearer token to its admin.

        Raises:
            AuthenticationError: If the token is missing, unknown or expired.
        """
        if not token:
            raise AuthenticationError("Authentication required.")
        record = self.tokens.get_by_token(token)
        if record is None:
            raise AuthenticationError("Invalid token.")
        if record.is_expired():
            self.tokens.revoke(token)
            raise AuthenticationError("Token has expired.")
        admin = self.admins.get(record.admin_id)
        if admin is None or not admin.active:
            raise AuthenticationError("Account is inactive.")
        return admin

    def change_password(self, request: ChangePasswordRequest) -> bool:
        admin = self.admins.get(request.admin_id)
        if admin is None:
            raise AuthenticationError("Account not found.")
        if request.current_password is not None and not verify_password(
            request.current_password, admin.password_hash
        ):
            raise ValidationError.for_field("current_password", "The current password is incorrect.")
        admin.password_hash = hash_password(request.new_password)
        admin.updated_at = utcnow()
        self.admins.update(admin)
        revoked = self.tokens.revoke_for_admin(admin.id)
        self.audit.record("admin.password", "admin", admin.id, admin_id=admin.id, summary="Password changed")
        logger.info("Password changed", admin_id=admin.id, revoked_tokens=revoked)
        return True

