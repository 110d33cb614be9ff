"""Request/response schemas for sign-in and the session endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from medadmin.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN


class SignInRequest(BaseModel):
    """Credentials for sign-in."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Account email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class CurrentUser(BaseModel):
    """Authenticated account as loaded from the database on this request."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str


class SignInResponse(BaseModel):
    """Body returned with the session cookie after a successful sign-in."""

    success: bool = True
    user: CurrentUser
