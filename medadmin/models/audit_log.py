"""ORM model for the append-only mutation audit trail."""

import enum
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String

from medadmin.models.base import Base, JSONType


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditLog(Base):
    """One row per create/update/delete, with before/after values and the acting account."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_name = Column(String(64), nullable=False, index=True)
    record_id = Column(String(64), nullable=False, index=True)
    action = Column(String(16), nullable=False)
    old_values = Column(JSONType, nullable=True)
    new_values = Column(JSONType, nullable=True)
    # No foreign key: entries outlive the account that made them. Listing joins
    # to users, so only entries with an existing actor are returned.
    actor_id = Column(Integer, nullable=False, index=True)
    # Set client-side so entries written within the same second keep their order.
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )
