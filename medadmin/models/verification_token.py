"""ORM model for single-use email verification and password reset tokens."""

import enum

from sqlalchemy import Column, DateTime, Integer, String, func

from medadmin.models.base import Base


class TokenPurpose(str, enum.Enum):
    VERIFY_EMAIL = "verify_email"
    PASSWORD_RESET = "password_reset"


class VerificationToken(Base):
    """
    One-time token bound to an email address.

    A newer token for the same identifier and purpose replaces older ones;
    a token is deleted once it has been used.
    """

    __tablename__ = "verification_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    identifier = Column(String(255), nullable=False, index=True)
    purpose = Column(String(32), nullable=False)
    token = Column(String(128), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
