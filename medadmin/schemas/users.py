"""Request/response schemas for account management."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from medadmin.core.security import EMAIL_MAX_LEN, NAME_MAX_LEN, PASSWORD_MAX_LEN
from medadmin.models.user import Role


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    role: Role = Role.COLLABORATOR


class UserUpdate(BaseModel):
    """Partial update; omitted fields are left alone and an empty password is ignored."""

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LEN)
    email: str | None = Field(default=None, min_length=3, max_length=EMAIL_MAX_LEN)
    password: str | None = Field(default=None, max_length=PASSWORD_MAX_LEN)
    disabled: bool | None = None
    role: Role | None = None


class UserOut(BaseModel):
    """Account as exposed by the API (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    disabled: bool
    email_verified_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., alias="newPassword", min_length=1, max_length=PASSWORD_MAX_LEN)
