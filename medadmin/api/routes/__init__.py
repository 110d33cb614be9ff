"""API routes mounted under API_PREFIX."""

from fastapi import APIRouter

from medadmin.api.routes import (
    audit_logs,
    auth,
    documents,
    health,
    missing_conditions,
    passwords,
    users,
)
from medadmin.schemas.common import ErrorResponse

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    }
)
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(passwords.router, tags=["passwords"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit"])
router.include_router(documents.router, prefix="/documents", tags=["documents"])
router.include_router(
    missing_conditions.router, prefix="/missing-conditions", tags=["missing-conditions"]
)
