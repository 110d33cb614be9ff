"""Audit log query endpoint (admin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medadmin.api.deps import require_admin
from medadmin.core.database import get_db
from medadmin.schemas.audit import AuditLogOut
from medadmin.schemas.auth import CurrentUser
from medadmin.services.audit import AUDIT_LIST_DEFAULT_LIMIT, list_audit_logs

router = APIRouter()


@router.get("", response_model=list[AuditLogOut])
def get_audit_logs(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    table_name: Annotated[str | None, Query(alias="tableName", max_length=64)] = None,
    record_id: Annotated[str | None, Query(alias="recordId", max_length=64)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = AUDIT_LIST_DEFAULT_LIMIT,
) -> list[AuditLogOut]:
    """Newest-first audit entries, optionally filtered by table and record id."""
    return list_audit_logs(db, table_name=table_name, record_id=record_id, limit=limit)
