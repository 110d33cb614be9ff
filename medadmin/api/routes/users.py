"""Account management endpoints. Reads need a session; writes need ADMIN."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medadmin.api.deps import (
    get_audit_recorder,
    get_current_user,
    get_notifier,
    get_settings_dep,
    require_admin,
)
from medadmin.core.config import Settings
from medadmin.core.database import get_db
from medadmin.schemas.auth import CurrentUser
from medadmin.schemas.common import MessageResponse
from medadmin.schemas.users import UserCreate, UserOut, UserUpdate
from medadmin.services import users as user_service
from medadmin.services.audit import AuditRecorder
from medadmin.services.notifications import Notifier

router = APIRouter()


@router.get("", response_model=list[UserOut])
def list_users(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserOut]:
    """All accounts, newest first."""
    return [UserOut.model_validate(u) for u in user_service.list_users(db)]


@router.post("", response_model=UserOut, status_code=201)
def create_user(
    body: UserCreate,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> UserOut:
    """Create an account and send its email verification link."""
    user = user_service.create_user(
        db, body, admin, settings=settings, recorder=recorder, notifier=notifier
    )
    return UserOut.model_validate(user)


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    return UserOut.model_validate(user_service.get_user(db, user_id))


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    body: UserUpdate,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> UserOut:
    """Partially update name, email, password, disabled flag or role."""
    user = user_service.update_user(
        db, user_id, body, admin, settings=settings, recorder=recorder
    )
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> MessageResponse:
    user_service.delete_user(db, user_id, admin, recorder=recorder)
    return MessageResponse(message="User deleted successfully")
