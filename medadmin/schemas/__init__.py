"""Pydantic request/response schemas."""

from medadmin.schemas.audit import AuditLogOut
from medadmin.schemas.auth import CurrentUser, SignInRequest, SignInResponse
from medadmin.schemas.common import ErrorResponse, MessageResponse
from medadmin.schemas.documents import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    DeleteResponse,
    DocumentOut,
    DocumentsResponse,
    DocumentUpdate,
    ReEmbedResponse,
)
from medadmin.schemas.health import HealthResponse
from medadmin.schemas.missing_conditions import MissingConditionUpdate
from medadmin.schemas.passwords import (
    ForgotPasswordRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    ResetTokenValidResponse,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from medadmin.schemas.users import ChangePasswordRequest, UserCreate, UserOut, UserUpdate

__all__ = [
    "AuditLogOut",
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "ChangePasswordRequest",
    "CurrentUser",
    "DeleteResponse",
    "DocumentOut",
    "DocumentsResponse",
    "DocumentUpdate",
    "ErrorResponse",
    "ForgotPasswordRequest",
    "HealthResponse",
    "MessageResponse",
    "MissingConditionUpdate",
    "ReEmbedResponse",
    "ResendVerificationRequest",
    "ResetPasswordRequest",
    "ResetTokenValidResponse",
    "SignInRequest",
    "SignInResponse",
    "UserCreate",
    "UserOut",
    "UserUpdate",
    "VerifyEmailRequest",
    "VerifyEmailResponse",
]
