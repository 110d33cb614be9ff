"""Schemas for audit log queries."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class AuditLogOut(BaseModel):
    """Audit entry joined with the acting account's name and email."""

    id: int
    table_name: str
    record_id: str
    action: str
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    actor_id: int
    created_at: datetime
    user_name: str
    user_email: str
