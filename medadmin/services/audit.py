"""Audit trail: best-effort recording of mutations and newest-first queries."""

import enum
import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from medadmin.models import AuditAction, AuditLog, User
from medadmin.schemas.audit import AuditLogOut

logger = logging.getLogger(__name__)

AUDIT_LIST_DEFAULT_LIMIT = 50
AUDIT_LIST_MAX_LIMIT = 500

# Stand-in value for secrets in audit payloads.
REDACTED = "[changed]"


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    return value


def snapshot(obj: object, fields: Iterable[str]) -> dict[str, Any]:
    """Read the named attributes off an ORM row as JSON-safe values."""
    return {field: _jsonable(getattr(obj, field)) for field in fields}


def diff_values(
    old: Mapping[str, Any], new: Mapping[str, Any]
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (old, new) restricted to the keys whose values changed."""
    changed = [k for k in new if _jsonable(old.get(k)) != _jsonable(new[k])]
    return (
        {k: _jsonable(old.get(k)) for k in changed},
        {k: _jsonable(new[k]) for k in changed},
    )


class AuditRecorder:
    """
    Appends audit entries in a session of its own.

    Called after the primary mutation has committed. A failed write is logged
    and dropped: it is attempted once and never propagates to the caller.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def record(
        self,
        table_name: str,
        record_id: str | int,
        action: AuditAction,
        *,
        actor_id: int,
        old_values: Mapping[str, Any] | None = None,
        new_values: Mapping[str, Any] | None = None,
    ) -> None:
        try:
            db = self._session_factory()
        except Exception:
            logger.exception(
                "Audit write failed",
                extra={"table_name": table_name, "record_id": str(record_id), "action": action.value},
            )
            return
        try:
            db.add(
                AuditLog(
                    table_name=table_name,
                    record_id=str(record_id),
                    action=action.value,
                    old_values=_jsonable(old_values) if old_values else None,
                    new_values=_jsonable(new_values) if new_values else None,
                    actor_id=actor_id,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(
                "Audit write failed",
                extra={"table_name": table_name, "record_id": str(record_id), "action": action.value},
            )
        finally:
            db.close()


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return AUDIT_LIST_DEFAULT_LIMIT
    return max(1, min(limit, AUDIT_LIST_MAX_LIMIT))


def list_audit_logs(
    db: Session,
    table_name: str | None = None,
    record_id: str | None = None,
    limit: int | None = AUDIT_LIST_DEFAULT_LIMIT,
) -> list[AuditLogOut]:
    """Newest-first audit entries, joined to the acting account, optionally filtered."""
    query = db.query(AuditLog, User.name, User.email).join(User, AuditLog.actor_id == User.id)
    if table_name:
        query = query.filter(AuditLog.table_name == table_name)
    if record_id:
        query = query.filter(AuditLog.record_id == record_id)
    rows = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(clamp_limit(limit))
        .all()
    )
    return [
        AuditLogOut(
            id=entry.id,
            table_name=entry.table_name,
            record_id=entry.record_id,
            action=entry.action,
            old_values=entry.old_values,
            new_values=entry.new_values,
            actor_id=entry.actor_id,
            created_at=entry.created_at,
            user_name=user_name,
            user_email=user_email,
        )
        for entry, user_name, user_email in rows
    ]
