"""Password reset and email verification flows built on single-use tokens."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from medadmin.core.config import Settings
from medadmin.core.errors import NotFoundError, UpstreamError, ValidationError
from medadmin.core.security import hash_password, verify_password
from medadmin.models import AuditAction, TokenPurpose, User
from medadmin.services.audit import REDACTED, AuditRecorder
from medadmin.services.notifications import NotificationError, Notifier
from medadmin.services.tokens import consume_token, find_valid_token, issue_token
from medadmin.services.users import USERS_TABLE, get_user, validate_new_password, verification_link

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)
INVALID_RESET_TOKEN = "Invalid or expired reset token"
INVALID_VERIFICATION_TOKEN = "Invalid or expired verification token"


def reset_link(settings: Settings, token: str) -> str:
    return f"{settings.APP_BASE_URL}/reset-password?token={token}"


def request_password_reset(
    db: Session,
    email: str,
    *,
    settings: Settings,
    notifier: Notifier,
) -> str:
    """
    Issue a reset token when the account exists and notify its holder.

    Always returns the same message so callers cannot probe for accounts.
    """
    user = db.query(User).filter(User.email == email.strip()).first()
    if user is None:
        return FORGOT_PASSWORD_MESSAGE
    token = issue_token(
        db,
        user.email,
        TokenPurpose.PASSWORD_RESET,
        timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
    ).token
    db.commit()
    try:
        notifier.send_password_reset(user.email, user.name or "User", reset_link(settings, token))
    except NotificationError:
        logger.warning(
            "Password reset notification failed", exc_info=True, extra={"user_id": user.id}
        )
    return FORGOT_PASSWORD_MESSAGE


def validate_reset_token(db: Session, token: str) -> str:
    """Return the email a reset token belongs to without consuming it."""
    row = find_valid_token(db, token, TokenPurpose.PASSWORD_RESET)
    if row is None:
        raise ValidationError(INVALID_RESET_TOKEN)
    return row.identifier


def reset_password(
    db: Session,
    token: str,
    password: str | None,
    *,
    settings: Settings,
    recorder: AuditRecorder,
) -> None:
    """Set a new password from a reset token, consuming the token."""
    row = find_valid_token(db, token, TokenPurpose.PASSWORD_RESET)
    if row is None:
        raise ValidationError(INVALID_RESET_TOKEN)
    if not password:
        raise ValidationError("Password is required")
    validate_new_password(password)

    user = db.query(User).filter(User.email == row.identifier).first()
    if user is None:
        raise NotFoundError("User not found")
    if user.password_hash and verify_password(password, user.password_hash):
        raise ValidationError("New password must be different from current password")

    if not consume_token(db, row):
        db.rollback()
        raise ValidationError(INVALID_RESET_TOKEN)
    user.password_hash = hash_password(password, settings.BCRYPT_ROUNDS)
    db.commit()
    recorder.record(
        USERS_TABLE,
        user.id,
        AuditAction.UPDATE,
        actor_id=user.id,
        new_values={"password": REDACTED},
    )


def verify_email(db: Session, token: str) -> User:
    """Mark the token's account as verified and consume the token."""
    row = find_valid_token(db, token, TokenPurpose.VERIFY_EMAIL)
    if row is None:
        raise ValidationError(INVALID_VERIFICATION_TOKEN)
    user = db.query(User).filter(User.email == row.identifier).first()
    if user is None:
        raise NotFoundError("User not found")
    if not consume_token(db, row):
        db.rollback()
        raise ValidationError(INVALID_VERIFICATION_TOKEN)
    user.email_verified_at = datetime.now(UTC)
    db.commit()
    db.refresh(user)
    return user


def resend_verification(
    db: Session,
    user_id: int,
    *,
    settings: Settings,
    notifier: Notifier,
) -> None:
    """Replace the account's verification token and send the new link."""
    user = get_user(db, user_id)
    if user.email_verified_at is not None:
        raise ValidationError("User email is already verified")
    token = issue_token(
        db,
        user.email,
        TokenPurpose.VERIFY_EMAIL,
        timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS),
    ).token
    db.commit()
    try:
        notifier.send_verification(user.email, user.name or "User", verification_link(settings, token))
    except NotificationError as e:
        logger.warning(
            "Verification notification failed", exc_info=True, extra={"user_id": user.id}
        )
        raise UpstreamError("Failed to send verification email") from e
