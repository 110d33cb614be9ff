"""
Session validation and role gate, plus accessors for app-scoped components.

Per request: read the token (session cookie, else Bearer header), verify
signature and expiry, reload the account from the database, reject disabled
accounts, then compare the account's current role to the route's required
roles. The role is never taken from the token, so disabling or demoting an
account applies on the very next request.
"""

from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from medadmin.core.config import Settings
from medadmin.core.database import get_db
from medadmin.core.errors import AuthenticationError, AuthorizationError
from medadmin.core.security import decode_access_token
from medadmin.models import Role, User
from medadmin.schemas.auth import CurrentUser
from medadmin.services.ai_service import AIServiceClient
from medadmin.services.audit import AuditRecorder
from medadmin.services.notifications import Notifier

security = HTTPBearer(auto_error=False)

AUTHENTICATION_REQUIRED = "Authentication required"
INVALID_SESSION = "Invalid or expired session"
INSUFFICIENT_PERMISSIONS = "Insufficient permissions"


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_audit_recorder(request: Request) -> AuditRecorder:
    return request.app.state.audit_recorder


def get_ai_service(request: Request) -> AIServiceClient:
    return request.app.state.ai_service


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> CurrentUser:
    """Dependency: require a valid session for an existing, enabled account. 401/403 otherwise."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise AuthenticationError(AUTHENTICATION_REQUIRED)

    try:
        payload = decode_access_token(token, settings)
    except jwt.PyJWTError:
        raise AuthenticationError(INVALID_SESSION)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError(INVALID_SESSION)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError(INVALID_SESSION)
    if user.disabled:
        raise AuthorizationError(INSUFFICIENT_PERMISSIONS)
    return CurrentUser.model_validate(user)


def require_roles(*roles: Role) -> Callable[..., CurrentUser]:
    """Build a dependency that admits only accounts whose current role is in roles."""
    allowed = frozenset(role.value for role in roles)

    def _require(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role not in allowed:
            raise AuthorizationError(INSUFFICIENT_PERMISSIONS)
        return current_user

    return _require


require_admin = require_roles(Role.ADMIN)
