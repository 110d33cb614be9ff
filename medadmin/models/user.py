"""ORM model for dashboard accounts (auth and RBAC)."""

import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from medadmin.models.base import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    COLLABORATOR = "COLLABORATOR"


class User(Base):
    """
    Account for cookie-session authentication and role-based access control.

    password_hash is nullable: accounts created before a password is set
    cannot sign in. Deleting a user clears created_by/updated_by references;
    audit entries it authored are kept. Ids are never reused, so a kept
    entry cannot be attributed to a later account.
    """

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    role = Column(String(32), nullable=False, default=Role.COLLABORATOR.value)
    disabled = Column(Boolean, nullable=False, default=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
