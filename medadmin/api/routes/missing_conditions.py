"""Missing-condition review endpoints, proxied to the AI service."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from medadmin.api.deps import get_ai_service, get_current_user, require_admin
from medadmin.core.errors import InternalError, UpstreamError
from medadmin.schemas.auth import CurrentUser
from medadmin.schemas.missing_conditions import MissingConditionUpdate
from medadmin.services.ai_service import AIServiceClient, AIServiceError, UpstreamResponse

logger = logging.getLogger(__name__)
router = APIRouter()


def _upstream_body(result: UpstreamResponse, failure: str) -> Any:
    """Return the upstream body on success; otherwise raise with the upstream status."""
    if not result.ok:
        raise UpstreamError(result.error_message(failure), status_code=result.status_code)
    if result.data is None:
        raise InternalError("Invalid response from AI service")
    return result.data


@router.get("")
async def list_missing_conditions(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    ai: Annotated[AIServiceClient, Depends(get_ai_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=200)] = 20,
    status: Annotated[str | None, Query()] = None,
) -> Any:
    """Page through missing conditions reported by the AI service."""
    params = {"page": str(page), "limit": str(limit)}
    if status:
        params["status"] = status.lower()
    try:
        result = await ai.list_missing_conditions(params)
    except AIServiceError as e:
        logger.error("Fetching missing conditions failed", extra={"reason": e.message[:500]})
        raise UpstreamError(e.message, status_code=503) from e
    return _upstream_body(result, "Failed to fetch missing conditions")


@router.patch("/{condition_id}")
async def update_missing_condition(
    condition_id: str,
    body: MissingConditionUpdate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    ai: Annotated[AIServiceClient, Depends(get_ai_service)],
) -> Any:
    """Set a missing condition's review status (pending, reviewed, resolved) and notes."""
    payload: dict[str, Any] = {"status": body.status}
    if body.admin_notes is not None:
        payload["admin_notes"] = body.admin_notes
    try:
        result = await ai.update_missing_condition(condition_id, payload)
    except AIServiceError as e:
        logger.error(
            "Updating missing condition failed",
            extra={"condition_id": condition_id, "reason": e.message[:500]},
        )
        raise UpstreamError(e.message, status_code=503) from e
    return _upstream_body(result, "Failed to update missing condition")
