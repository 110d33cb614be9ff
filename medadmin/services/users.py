"""Account management: create, update, delete, password changes. Every mutation is audited."""

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medadmin.core.config import Settings
from medadmin.core.errors import NotFoundError, ValidationError
from medadmin.core.security import PASSWORD_MIN_LEN, hash_password, verify_password
from medadmin.models import AuditAction, Role, TokenPurpose, User, VerificationToken
from medadmin.schemas.auth import CurrentUser
from medadmin.schemas.users import UserCreate, UserUpdate
from medadmin.services.audit import REDACTED, AuditRecorder, diff_values, snapshot
from medadmin.services.notifications import NotificationError, Notifier
from medadmin.services.tokens import issue_token

logger = logging.getLogger(__name__)

USERS_TABLE = User.__tablename__

# Columns reported in audit entries; password_hash is never one of them.
AUDITED_FIELDS = ("name", "email", "role", "disabled")


def validate_new_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LEN} characters long"
        )


def verification_link(settings: Settings, token: str) -> str:
    return f"{settings.APP_BASE_URL}/verify-email?token={token}"


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    query = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def create_user(
    db: Session,
    body: UserCreate,
    actor: CurrentUser,
    *,
    settings: Settings,
    recorder: AuditRecorder,
    notifier: Notifier,
) -> User:
    """
    Create an account, issue its email verification token and notify the holder.

    A failed notification is logged; the account is still created.
    """
    email = body.email.strip()
    validate_new_password(body.password)
    if _email_taken(db, email):
        raise ValidationError("User with this email already exists")

    user = User(
        name=body.name.strip(),
        email=email,
        password_hash=hash_password(body.password, settings.BCRYPT_ROUNDS),
        role=body.role.value,
        disabled=False,
        created_by=actor.id,
        updated_by=actor.id,
    )
    db.add(user)
    try:
        db.flush()
        token = issue_token(
            db,
            email,
            TokenPurpose.VERIFY_EMAIL,
            timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS),
        ).token
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("User with this email already exists") from e
    db.refresh(user)

    try:
        notifier.send_verification(user.email, user.name or "User", verification_link(settings, token))
    except NotificationError:
        logger.warning(
            "Verification notification failed", exc_info=True, extra={"user_id": user.id}
        )

    recorder.record(
        USERS_TABLE,
        user.id,
        AuditAction.CREATE,
        actor_id=actor.id,
        new_values={"name": user.name, "email": user.email, "role": user.role},
    )
    return user


def update_user(
    db: Session,
    user_id: int,
    body: UserUpdate,
    actor: CurrentUser,
    *,
    settings: Settings,
    recorder: AuditRecorder,
) -> User:
    """Apply a partial update; the audit entry holds only the fields that changed."""
    user = get_user(db, user_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if changes.get("password") == "":
        changes.pop("password")
    if not changes:
        raise ValidationError("No valid fields to update")

    if "email" in changes:
        changes["email"] = changes["email"].strip()
        if _email_taken(db, changes["email"], exclude_id=user.id):
            raise ValidationError("Email already in use by another user")
    if "name" in changes:
        changes["name"] = changes["name"].strip()
    if "role" in changes:
        changes["role"] = Role(changes["role"]).value
    if user.id == actor.id and (
        changes.get("disabled") is True
        or changes.get("role", Role.ADMIN.value) != Role.ADMIN.value
    ):
        raise ValidationError("You cannot disable or demote your own account")

    new_password = changes.pop("password", None)
    if new_password is not None:
        validate_new_password(new_password)

    before = snapshot(user, AUDITED_FIELDS)
    for field, value in changes.items():
        setattr(user, field, value)
    if new_password is not None:
        user.password_hash = hash_password(new_password, settings.BCRYPT_ROUNDS)
    user.updated_by = actor.id
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Email already in use by another user") from e
    db.refresh(user)

    old_values, new_values = diff_values(before, changes)
    if new_password is not None:
        new_values["password"] = REDACTED
    recorder.record(
        USERS_TABLE,
        user.id,
        AuditAction.UPDATE,
        actor_id=actor.id,
        old_values=old_values,
        new_values=new_values,
    )
    return user


def delete_user(
    db: Session,
    user_id: int,
    actor: CurrentUser,
    *,
    recorder: AuditRecorder,
) -> None:
    """Hard-delete an account; related rows follow by foreign key cascade."""
    user = get_user(db, user_id)
    if user.id == actor.id:
        raise ValidationError("You cannot delete your own account")
    before = snapshot(user, AUDITED_FIELDS)
    (
        db.query(VerificationToken)
        .filter(VerificationToken.identifier == user.email)
        .delete(synchronize_session=False)
    )
    db.delete(user)
    db.commit()
    recorder.record(
        USERS_TABLE,
        user_id,
        AuditAction.DELETE,
        actor_id=actor.id,
        old_values=before,
    )


def change_password(
    db: Session,
    actor: CurrentUser,
    current_password: str,
    new_password: str,
    *,
    settings: Settings,
    recorder: AuditRecorder,
) -> None:
    """Self-service password change; the current password must be supplied."""
    validate_new_password(new_password)
    if current_password == new_password:
        raise ValidationError("New password must be different from current password")
    user = get_user(db, actor.id)
    if not user.password_hash:
        raise ValidationError("User does not have a password set")
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    user.password_hash = hash_password(new_password, settings.BCRYPT_ROUNDS)
    user.updated_by = actor.id
    db.commit()
    recorder.record(
        USERS_TABLE,
        user.id,
        AuditAction.UPDATE,
        actor_id=actor.id,
        new_values={"password": REDACTED},
    )
