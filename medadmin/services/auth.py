"""Credential verification for sign-in."""

import logging

from sqlalchemy.orm import Session

from medadmin.core.errors import AuthenticationError
from medadmin.core.security import verify_password
from medadmin.models import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Return the account for email/password or raise AuthenticationError.

    Unknown email, missing hash, wrong password and disabled account all
    produce the same error, and a hash comparison runs in every case.
    """
    user = db.query(User).filter(User.email == email).first()
    password_ok = verify_password(password, user.password_hash if user else None)
    if user is None or not password_ok or user.disabled:
        logger.info("Sign-in rejected", extra={"auth_status": "failure"})
        raise AuthenticationError(INVALID_CREDENTIALS)
    logger.info("Sign-in succeeded", extra={"auth_status": "success", "user_id": user.id})
    return user
