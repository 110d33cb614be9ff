"""Tests for account management and its audit entries."""

import unittest
from unittest.mock import MagicMock

from medadmin.core.security import verify_password
from medadmin.models import AuditLog, Role, TokenPurpose, User, VerificationToken
from medadmin.services.audit import AuditRecorder
from tests.support import TEST_PASSWORD, AppHarness, RecordingNotifier


def _audit_rows(h: AppHarness, record_id: int) -> list[AuditLog]:
    db = h.session()
    try:
        return (
            db.query(AuditLog)
            .filter(AuditLog.table_name == "users", AuditLog.record_id == str(record_id))
            .order_by(AuditLog.id)
            .all()
        )
    finally:
        db.close()


class TestCreateUser(unittest.TestCase):
    def setUp(self) -> None:
        self.h = AppHarness()
        self.admin_id = self.h.add_user("admin@example.com", Role.ADMIN, name="Admin")
        self.headers = self.h.auth_headers(self.admin_id)

    def tearDown(self) -> None:
        self.h.close()

    def test_creates_account_token_and_single_audit_entry(self) -> None:
        r = self.h.client.post(
            "/api/users",
            json={"name": "Nurse", "email": "nurse@example.com", "password": "long-enough-pw"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 201)
        body = r.json()
        self.assertEqual(body["role"], "COLLABORATOR")
        self.assertNotIn("password_hash", body)
        self.assertIsNone(body["email_verified_at"])

        rows = _audit_rows(self.h, body["id"])
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].action, "CREATE")
        self.assertEqual(rows[0].actor_id, self.admin_id)
        self.assertEqual(rows[0].new_values["email"], "nurse@example.com")
        self.assertNotIn("password", rows[0].new_values)

        self.assertEqual(len(self.h.notifier.verifications), 1)
        email, link = self.h.notifier.verifications[0]
        self.assertEqual(email, "nurse@example.com")
        self.assertTrue(link.startswith("http://dashboard.test/verify-email?token="))

        db = self.h.session()
        try:
            user = db.query(User).filter(User.id == body["id"]).one()
            self.assertTrue(verify_password("long-enough-pw", user.password_hash))
            self.assertEqual(user.created_by, self.admin_id)
            token = db.query(VerificationToken).filter(
                VerificationToken.identifier == "nurse@example.com"
            ).one()
            self.assertEqual(token.purpose, TokenPurpose.VERIFY_EMAIL.value)
        finally:
            db.close()

    def test_duplicate_email_is_400(self) -> None:
        r = self.h.client.post(
            "/api/users",
            json={"name": "Dup", "email": "admin@example.com", "password": "long-enough-pw"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"error": "User with this email already exists"})

    def test_short_password_is_400(self) -> None:
        r = self.h.client.post(
            "/api/users",
            json={"name": "Short", "email": "short@example.com", "password": "short"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 400)

    def test_notification_failure_does_not_fail_creation(self) -> None:
        h = AppHarness(notifier=RecordingNotifier(fail=True))
        try:
            admin_id = h.add_user("admin@example.com", Role.ADMIN)
            r = h.client.post(
                "/api/users",
                json={"name": "N", "email": "n@example.com", "password": "long-enough-pw"},
                headers=h.auth_headers(admin_id),
            )
            self.assertEqual(r.status_code, 201)
        finally:
            h.close()


class TestUpdateUser(unittest.TestCase):
    def setUp(self) -> None:
        self.h = AppHarness()
        self.admin_id = self.h.add_user("admin@example.com", Role.ADMIN)
        self.user_id = self.h.add_user("user@example.com", name="Before")
        self.headers = self.h.auth_headers(self.admin_id)

    def tearDown(self) -> None:
        self.h.close()

    def test_audit_holds_only_changed_fields(self) -> None:
        r = self.h.client.put(
            f"/api/users/{self.user_id}",
            json={"name": "After", "email": "user@example.com"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["name"], "After")
        rows = _audit_rows(self.h, self.user_id)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].action, "UPDATE")
        self.assertEqual(rows[0].old_values, {"name": "Before"})
        self.assertEqual(rows[0].new_values, {"name": "After"})

    def test_password_change_is_redacted(self) -> None:
        r = self.h.client.put(
            f"/api/users/{self.user_id}",
            json={"password": "another-long-pw"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 200)
        rows = _audit_rows(self.h, self.user_id)
        self.assertEqual(rows[0].new_values, {"password": "[changed]"})

    def test_empty_body_is_400(self) -> None:
        r = self.h.client.put(
            f"/api/users/{self.user_id}", json={"password": ""}, headers=self.headers
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"error": "No valid fields to update"})
        self.assertEqual(_audit_rows(self.h, self.user_id), [])

    def test_email_taken_by_other_is_400(self) -> None:
        r = self.h.client.put(
            f"/api/users/{self.user_id}",
            json={"email": "admin@example.com"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 400)

    def test_cannot_disable_self(self) -> None:
        r = self.h.client.put(
            f"/api/users/{self.admin_id}", json={"disabled": True}, headers=self.headers
        )
        self.assertEqual(r.status_code, 400)

    def test_unknown_user_is_404(self) -> None:
        r = self.h.client.put("/api/users/9999", json={"name": "X"}, headers=self.headers)
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json(), {"error": "User not found"})


class TestDeleteUser(unittest.TestCase):
    def setUp(self) -> None:
        self.h = AppHarness()
        self.admin_id = self.h.add_user("admin@example.com", Role.ADMIN)
        self.user_id = self.h.add_user("user@example.com")
        self.headers = self.h.auth_headers(self.admin_id)

    def tearDown(self) -> None:
        self.h.close()

    def test_delete_records_old_values(self) -> None:
        r = self.h.client.delete(f"/api/users/{self.user_id}", headers=self.headers)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"message": "User deleted successfully"})
        rows = _audit_rows(self.h, self.user_id)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].action, "DELETE")
        self.assertEqual(rows[0].old_values["email"], "user@example.com")
        self.assertEqual(
            self.h.client.get(f"/api/users/{self.user_id}", headers=self.headers).status_code,
            404,
        )

    def test_cannot_delete_self(self) -> None:
        r = self.h.client.delete(f"/api/users/{self.admin_id}", headers=self.headers)
        self.assertEqual(r.status_code, 400)


class TestAuditFailureIsolation(unittest.TestCase):
    """A broken audit store must not undo or fail the mutation."""

    def test_mutation_succeeds_when_audit_write_fails(self) -> None:
        broken = AuditRecorder(MagicMock(side_effect=RuntimeError("audit store down")))
        h = AppHarness(audit_recorder=broken)
        try:
            admin_id = h.add_user("admin@example.com", Role.ADMIN)
            r = h.client.post(
                "/api/users",
                json={"name": "Kept", "email": "kept@example.com", "password": "long-enough-pw"},
                headers=h.auth_headers(admin_id),
            )
            self.assertEqual(r.status_code, 201)
            db = h.session()
            try:
                self.assertIsNotNone(
                    db.query(User).filter(User.email == "kept@example.com").first()
                )
                self.assertEqual(db.query(AuditLog).count(), 0)
            finally:
                db.close()
        finally:
            h.close()


class TestChangePassword(unittest.TestCase):
    def setUp(self) -> None:
        self.h = AppHarness()
        self.user_id = self.h.add_user("user@example.com")
        self.headers = self.h.auth_headers(self.user_id)

    def tearDown(self) -> None:
        self.h.close()

    def test_change_then_sign_in_with_new_password(self) -> None:
        r = self.h.client.post(
            "/api/change-password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "brand-new-password"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 200)
        r = self.h.client.post(
            "/api/auth/signin",
            json={"email": "user@example.com", "password": "brand-new-password"},
        )
        self.assertEqual(r.status_code, 200)

    def test_wrong_current_password_is_400(self) -> None:
        r = self.h.client.post(
            "/api/change-password",
            json={"currentPassword": "not-my-password", "newPassword": "brand-new-password"},
            headers=self.headers,
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"error": "Current password is incorrect"})

    def test_requires_session(self) -> None:
        r = self.h.client.post(
            "/api/change-password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "brand-new-password"},
        )
        self.assertEqual(r.status_code, 401)


if __name__ == "__main__":
    unittest.main()
