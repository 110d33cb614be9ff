"""Password change, forgot/reset password and email verification endpoints."""

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
from medadmin.schemas.passwords import (
    ForgotPasswordRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    ResetTokenValidResponse,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from medadmin.schemas.users import ChangePasswordRequest, UserOut
from medadmin.services import passwords as password_service
from medadmin.services.audit import AuditRecorder
from medadmin.services.notifications import Notifier
from medadmin.services.users import change_password as change_own_password

router = APIRouter()


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> MessageResponse:
    """Change the signed-in account's password; the current password is required."""
    change_own_password(
        db,
        current_user,
        body.current_password,
        body.new_password,
        settings=settings,
        recorder=recorder,
    )
    return MessageResponse(message="Password changed successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> MessageResponse:
    """Send a reset link if the account exists. The response never says whether it does."""
    message = password_service.request_password_reset(
        db, body.email, settings=settings, notifier=notifier
    )
    return MessageResponse(message=message)


@router.post(
    "/reset-password",
    response_model=ResetTokenValidResponse | MessageResponse,
)
def reset_password(
    body: ResetPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> ResetTokenValidResponse | MessageResponse:
    """
    With action=validate, check the token and return its email.
    Otherwise set the new password and consume the token.
    """
    if body.action == "validate":
        email = password_service.validate_reset_token(db, body.token)
        return ResetTokenValidResponse(message="Token is valid", email=email)
    password_service.reset_password(
        db, body.token, body.password, settings=settings, recorder=recorder
    )
    return MessageResponse(message="Password reset successfully")


@router.post("/verify-email", response_model=VerifyEmailResponse)
def verify_email(
    body: VerifyEmailRequest,
    db: Annotated[Session, Depends(get_db)],
) -> VerifyEmailResponse:
    user = password_service.verify_email(db, body.token)
    return VerifyEmailResponse(
        message="Email verified successfully", user=UserOut.model_validate(user)
    )


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    body: ResendVerificationRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> MessageResponse:
    """Issue a fresh verification link for an unverified account (admin only)."""
    password_service.resend_verification(
        db, body.user_id, settings=settings, notifier=notifier
    )
    return MessageResponse(message="Verification email sent successfully")
