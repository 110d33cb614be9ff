"""Sign-in, sign-out and current-session endpoints (cookie-based JWT sessions)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from medadmin.api.deps import get_current_user, get_settings_dep
from medadmin.core.config import Settings
from medadmin.core.database import get_db
from medadmin.core.security import create_access_token
from medadmin.schemas.auth import CurrentUser, SignInRequest, SignInResponse
from medadmin.schemas.common import MessageResponse
from medadmin.services.auth import authenticate

router = APIRouter()


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
        path="/",
    )


@router.post("/signin", response_model=SignInResponse)
def sign_in(
    body: SignInRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> SignInResponse:
    """
    Verify email and password and start a session.

    The signed session token is returned only as an HTTP-only cookie. Any
    failure yields the same 401 "Invalid credentials".
    """
    user = authenticate(db, body.email, body.password)
    token = create_access_token(sub=user.id, settings=settings)
    _set_session_cookie(response, token, settings)
    return SignInResponse(success=True, user=CurrentUser.model_validate(user))


@router.post("/signout", response_model=MessageResponse)
def sign_out(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> MessageResponse:
    """Clear the session cookie. Tokens are stateless, so nothing is revoked server-side."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        secure=settings.APP_ENV == "prod",
        httponly=True,
        samesite="lax",
    )
    return MessageResponse(message="Signed out")


@router.get("/session", response_model=CurrentUser)
def get_session(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Return the signed-in account with its current role."""
    return current_user
