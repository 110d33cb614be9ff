"""Tests for password hashing and session tokens."""

import unittest

import jwt

from medadmin.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from medadmin.models import Role, User
from tests.support import AppHarness, make_settings


class TestHashPassword(unittest.TestCase):
    def test_rounds_must_be_given(self) -> None:
        with self.assertRaises(TypeError):
            hash_password("long-enough-pw")

    def test_cost_factor_is_the_one_passed(self) -> None:
        hashed = hash_password("long-enough-pw", 5)
        self.assertTrue(hashed.startswith("$2b$05$"))
        self.assertTrue(verify_password("long-enough-pw", hashed))
        self.assertFalse(verify_password("other-password", hashed))

    def test_missing_hash_never_matches(self) -> None:
        self.assertFalse(verify_password("anything", None))
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))

    def test_created_account_uses_configured_rounds(self) -> None:
        h = AppHarness(make_settings(BCRYPT_ROUNDS=5))
        try:
            admin_id = h.add_user("admin@example.com", Role.ADMIN)
            r = h.client.post(
                "/api/users",
                json={"name": "N", "email": "n@example.com", "password": "long-enough-pw"},
                headers=h.auth_headers(admin_id),
            )
            self.assertEqual(r.status_code, 201)
            db = h.session()
            try:
                user = db.query(User).filter(User.email == "n@example.com").one()
                self.assertTrue(user.password_hash.startswith("$2b$05$"))
            finally:
                db.close()
        finally:
            h.close()


class TestAccessToken(unittest.TestCase):
    def test_round_trip_carries_subject_only(self) -> None:
        settings = make_settings()
        payload = decode_access_token(create_access_token(42, settings), settings)
        self.assertEqual(payload["sub"], "42")
        self.assertEqual(set(payload), {"sub", "iat", "exp"})

    def test_token_without_subject_is_rejected(self) -> None:
        settings = make_settings()
        token = jwt.encode(
            {"exp": 9999999999}, settings.JWT_SECRET.get_secret_value(), algorithm="HS256"
        )
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token(token, settings)


if __name__ == "__main__":
    unittest.main()
