"""Token cleanup: delete verification and reset tokens past their expiry."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from medadmin.models import VerificationToken

if TYPE_CHECKING:
    from medadmin.core.config import Settings

logger = logging.getLogger(__name__)


def purge_expired_tokens(session: Session, settings: "Settings") -> int:
    """
    Delete expired tokens and return how many were removed.

    Expired tokens are already rejected at use; this only keeps the table
    small. Idempotent: safe to run repeatedly.
    """
    if not settings.TOKEN_CLEANUP_ENABLED:
        logger.info("Token cleanup is disabled (TOKEN_CLEANUP_ENABLED=false); skipping.")
        return 0

    cutoff = datetime.now(UTC)
    deleted_count = (
        session.query(VerificationToken)
        .filter(VerificationToken.expires_at <= cutoff)
        .delete(synchronize_session=False)
    )
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Token cleanup run: cutoff=%s, tokens_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
