"""Tests for purging expired verification and reset tokens."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from medadmin.models import TokenPurpose, VerificationToken
from medadmin.services.token_cleanup import purge_expired_tokens
from tests.support import AppHarness


class TestTokenCleanupDisabled(unittest.TestCase):
    """When TOKEN_CLEANUP_ENABLED is False, purge_expired_tokens does nothing."""

    def test_returns_zero_and_does_not_query(self) -> None:
        settings = MagicMock()
        settings.TOKEN_CLEANUP_ENABLED = False
        session = MagicMock()
        self.assertEqual(purge_expired_tokens(session, settings), 0)
        session.query.assert_not_called()


class TestTokenCleanupDeletes(unittest.TestCase):
    def test_returns_deleted_count_and_commits(self) -> None:
        settings = MagicMock()
        settings.TOKEN_CLEANUP_ENABLED = True
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 3
        self.assertEqual(purge_expired_tokens(session, settings), 3)
        session.commit.assert_called_once()


class TestTokenCleanupIntegration(unittest.TestCase):
    """Against sqlite: only expired rows go."""

    def test_keeps_live_tokens(self) -> None:
        h = AppHarness()
        db = h.session()
        try:
            now = datetime.now(UTC)
            db.add_all(
                [
                    VerificationToken(
                        identifier="a@example.com",
                        purpose=TokenPurpose.PASSWORD_RESET.value,
                        token="expired-token",
                        expires_at=now - timedelta(hours=1),
                    ),
                    VerificationToken(
                        identifier="b@example.com",
                        purpose=TokenPurpose.VERIFY_EMAIL.value,
                        token="live-token",
                        expires_at=now + timedelta(hours=1),
                    ),
                ]
            )
            db.commit()
            self.assertEqual(purge_expired_tokens(db, h.settings), 1)
            remaining = [row.token for row in db.query(VerificationToken).all()]
            self.assertEqual(remaining, ["live-token"])
            self.assertEqual(purge_expired_tokens(db, h.settings), 0)
        finally:
            db.close()
            h.close()


if __name__ == "__main__":
    unittest.main()
