"""SQLAlchemy ORM models."""

from medadmin.models.audit_log import AuditAction, AuditLog
from medadmin.models.base import Base
from medadmin.models.document import Document, EmbeddingStatus
from medadmin.models.user import Role, User
from medadmin.models.verification_token import TokenPurpose, VerificationToken

__all__ = [
    "AuditAction",
    "AuditLog",
    "Base",
    "Document",
    "EmbeddingStatus",
    "Role",
    "TokenPurpose",
    "User",
    "VerificationToken",
]
