"""Tests for the audit log query endpoint and audit helpers."""

import unittest
from unittest.mock import MagicMock

from medadmin.models import AuditAction, AuditLog, Role
from medadmin.services.audit import AuditRecorder, clamp_limit, diff_values
from tests.support import AppHarness


class TestDiffValues(unittest.TestCase):
    def test_only_changed_keys(self) -> None:
        old, new = diff_values({"name": "A", "role": "ADMIN"}, {"name": "B", "role": "ADMIN"})
        self.assertEqual(old, {"name": "A"})
        self.assertEqual(new, {"name": "B"})

    def test_enum_compared_by_value(self) -> None:
        old, new = diff_values({"role": "ADMIN"}, {"role": Role.ADMIN})
        self.assertEqual((old, new), ({}, {}))

    def test_clamp_limit(self) -> None:
        self.assertEqual(clamp_limit(None), 50)
        self.assertEqual(clamp_limit(0), 1)
        self.assertEqual(clamp_limit(10_000), 500)


class TestAuditRecorder(unittest.TestCase):
    def test_commit_failure_is_logged_not_raised(self) -> None:
        session = MagicMock()
        session.commit.side_effect = RuntimeError("disk full")
        recorder = AuditRecorder(MagicMock(return_value=session))
        with self.assertLogs("medadmin.services.audit", level="ERROR"):
            recorder.record("users", 1, AuditAction.UPDATE, actor_id=1, new_values={"name": "x"})
        session.rollback.assert_called_once()
        session.close.assert_called_once()


class TestAuditLogEndpoint(unittest.TestCase):
    def setUp(self) -> None:
        self.h = AppHarness()
        self.admin_id = self.h.add_user("admin@example.com", Role.ADMIN, name="Admin")
        self.collab_id = self.h.add_user("collab@example.com")
        self.headers = self.h.auth_headers(self.admin_id)
        for name in ("One", "Two", "Three"):
            self.h.client.put(
                f"/api/users/{self.collab_id}", json={"name": name}, headers=self.headers
            )

    def tearDown(self) -> None:
        self.h.close()

    def test_newest_first_with_actor_details(self) -> None:
        r = self.h.client.get("/api/audit-logs", headers=self.headers)
        self.assertEqual(r.status_code, 200)
        entries = r.json()
        self.assertEqual([e["new_values"]["name"] for e in entries], ["Three", "Two", "One"])
        self.assertEqual(entries[0]["user_name"], "Admin")
        self.assertEqual(entries[0]["user_email"], "admin@example.com")

    def test_filters_and_limit(self) -> None:
        r = self.h.client.get(
            "/api/audit-logs",
            params={"tableName": "users", "recordId": str(self.collab_id), "limit": 2},
            headers=self.headers,
        )
        self.assertEqual(len(r.json()), 2)
        r = self.h.client.get(
            "/api/audit-logs", params={"tableName": "documents"}, headers=self.headers
        )
        self.assertEqual(r.json(), [])

    def test_limit_out_of_range_is_400(self) -> None:
        r = self.h.client.get("/api/audit-logs", params={"limit": 0}, headers=self.headers)
        self.assertEqual(r.status_code, 400)

    def test_collaborator_denied(self) -> None:
        r = self.h.client.get("/api/audit-logs", headers=self.h.auth_headers(self.collab_id))
        self.assertEqual(r.status_code, 403)

    def test_entries_survive_actor_deletion(self) -> None:
        other_admin = self.h.add_user("admin2@example.com", Role.ADMIN)
        r = self.h.client.delete(
            f"/api/users/{self.admin_id}", headers=self.h.auth_headers(other_admin)
        )
        self.assertEqual(r.status_code, 200)
        db = self.h.session()
        try:
            kept = (
                db.query(AuditLog)
                .filter(AuditLog.actor_id == self.admin_id)
                .order_by(AuditLog.id)
                .all()
            )
            self.assertEqual([row.new_values["name"] for row in kept], ["One", "Two", "Three"])
            self.assertEqual(db.query(AuditLog).count(), 4)
        finally:
            db.close()

        # Listing joins to the actor, so only the DELETE by the remaining admin shows.
        r = self.h.client.get("/api/audit-logs", headers=self.h.auth_headers(other_admin))
        entries = r.json()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["action"], "DELETE")
        self.assertEqual(entries[0]["user_email"], "admin2@example.com")

    def test_deleted_account_id_is_not_reused(self) -> None:
        other_admin = self.h.add_user("admin2@example.com", Role.ADMIN)
        self.h.client.delete(f"/api/users/{other_admin}", headers=self.headers)
        replacement = self.h.add_user("admin3@example.com", Role.ADMIN)
        self.assertGreater(replacement, other_admin)


class TestHealth(unittest.TestCase):
    def test_reports_database_and_ai_status(self) -> None:
        h = AppHarness()
        try:
            r = h.client.get("/api/health")
            self.assertEqual(r.status_code, 200)
            self.assertEqual(
                r.json(),
                {
                    "status": "ok",
                    "environment": "dev",
                    "database": "connected",
                    "ai_service": "not_configured",
                },
            )
        finally:
            h.close()


if __name__ == "__main__":
    unittest.main()
