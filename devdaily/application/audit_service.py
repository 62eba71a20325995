"""Audit trail service.

Records who changed what. The HTTP layer binds the client address and
user agent into a context variable once per request; every record made
while serving that request picks them up.
"""

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

import structlog

from devdaily.domain.entities import AuditLog
from devdaily.domain.exceptions import AuditLogNotFoundError
from devdaily.dtos.pagination import PaginatedResult
from devdaily.dtos.responses import AuditLogResponse
from devdaily.infrastructure.memory import AdminRepository, AuditLogRepository, get_repositories

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuditContext:
    ip_address: str | None = None
    user_agent: str | None = None


_audit_context: ContextVar[AuditContext] = ContextVar("audit_context", default=AuditContext())


def bind_audit_context(ip_address: str | None, user_agent: str | None) -> None:
    _audit_context.set(AuditContext(ip_address=ip_address, user_agent=(user_agent or "")[:255] or None))


def summarize_changes(old: dict[str, Any] | None, new: dict[str, Any] | None) -> str:
    """Describe which keys differ between two snapshots."""
    old = old or {}
    new = new or {}
    changed = [key for key in new if old.get(key) != new.get(key)]
    if not old and new:
        return "Created with " + ", ".join(sorted(new))
    if old and not new:
        return "Removed"
    if not changed:
        return "No changes"
    return "Changed " + ", ".join(changed)


class AuditService:
    """Service for recording and browsing audit logs."""

    def __init__(
        self,
        logs: AuditLogRepository | None = None,
        admins: AdminRepository | None = None,
    ) -> None:
        repositories = get_repositories()
        self.logs = logs or repositories.audit_logs
        self.admins = admins or repositories.admins

    def record(
        self,
        action_type: str,
        entity_type: str,
        entity_id: int | None,
        admin_id: int | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        summary: str | None = None,
    ) -> AuditLog:
        """Persist one audit entry."""
        context = _audit_context.get()
        entry = self.logs.add(
            AuditLog(
                admin_id=admin_id,
                action_type=action_type,
                entity_type=entity_type,
                entity_id=entity_id,
                old_values=old_values,
                new_values=new_values,
                changes_summary=summary or summarize_changes(old_values, new_values),
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
        )
        logger.info(
            "Audit recorded",
            action_type=action_type,
            entity_type=entity_type,
            entity_id=entity_id,
            admin_id=admin_id,
        )
        return entry

    def _admin_name(self, admin_id: int | None) -> str | None:
        if admin_id is None:
            return None
        admin = self.admins.get(admin_id)
        return admin.name if admin else None

    def list_logs(
        self,
        filters: dict[str, Any] | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResult[AuditLogResponse]:
        filters = filters or {}
        logs, total = self.logs.list_all(
            page=page,
            per_page=per_page,
            admin_id=filters.get("admin_id"),
            entity_type=filters.get("entity_type"),
            entity_id=filters.get("entity_id"),
            action_type=filters.get("action_type"),
        )
        items = [AuditLogResponse.from_entity(log, self._admin_name(log.admin_id)) for log in logs]
        return PaginatedResult(items=items, total=total, page=page, per_page=per_page)

    def get_log(self, log_id: int) -> AuditLogResponse:
        log = self.logs.get(log_id)
        if log is None:
            raise AuditLogNotFoundError(log_id)
        return AuditLogResponse.from_entity(log, self._admin_name(log.admin_id))
