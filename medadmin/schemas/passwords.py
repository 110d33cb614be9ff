"""Schemas for the token flows: forgot/reset password and email verification."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from medadmin.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN
from medadmin.schemas.users import UserOut


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN)


class ResetPasswordRequest(BaseModel):
    """action='validate' checks the token without consuming it."""

    token: str = Field(..., min_length=1, max_length=128)
    password: str | None = Field(default=None, max_length=PASSWORD_MAX_LEN)
    action: Literal["validate", "reset"] | None = None


class ResetTokenValidResponse(BaseModel):
    message: str
    email: str


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)


class VerifyEmailResponse(BaseModel):
    message: str
    user: UserOut


class ResendVerificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
