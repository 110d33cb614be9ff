"""Single-use verification and password reset tokens."""

from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from medadmin.core.security import generate_token
from medadmin.models import TokenPurpose, VerificationToken


def issue_token(
    db: Session,
    identifier: str,
    purpose: TokenPurpose,
    ttl: timedelta,
) -> VerificationToken:
    """
    Create a token for identifier, replacing any earlier token with the same purpose.

    Flushes but does not commit; the caller owns the transaction.
    """
    (
        db.query(VerificationToken)
        .filter(
            VerificationToken.identifier == identifier,
            VerificationToken.purpose == purpose.value,
        )
        .delete(synchronize_session=False)
    )
    row = VerificationToken(
        identifier=identifier,
        purpose=purpose.value,
        token=generate_token(),
        expires_at=datetime.now(UTC) + ttl,
    )
    db.add(row)
    db.flush()
    return row


def find_valid_token(
    db: Session, token: str, purpose: TokenPurpose
) -> VerificationToken | None:
    """Return the unexpired token row with this value and purpose, if any."""
    return (
        db.query(VerificationToken)
        .filter(
            VerificationToken.token == token,
            VerificationToken.purpose == purpose.value,
            VerificationToken.expires_at > datetime.now(UTC),
        )
        .first()
    )


def consume_token(db: Session, row: VerificationToken) -> bool:
    """
    Delete a used token; False when another request already consumed it.

    The caller commits together with the change the token guards.
    """
    deleted = (
        db.query(VerificationToken)
        .filter(VerificationToken.id == row.id)
        .delete(synchronize_session=False)
    )
    return deleted == 1
