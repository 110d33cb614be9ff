"""Tests for settings validation."""

import unittest

from pydantic import ValidationError

from medadmin.core.config import Settings
from tests.support import make_settings


class TestSettingsValidation(unittest.TestCase):
    def test_defaults_for_tests_are_valid(self) -> None:
        settings = make_settings()
        self.assertTrue(settings.is_sqlite)
        self.assertEqual(settings.session_cookie_name, "medadmin.session-token")
        self.assertEqual(settings.API_PREFIX, "/api")

    def test_prod_cookie_has_secure_prefix(self) -> None:
        settings = make_settings(APP_ENV="prod", JWT_SECRET="a-real-secret")
        self.assertEqual(settings.session_cookie_name, "__Secure-medadmin.session-token")

    def test_default_secret_refused_in_prod(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, APP_ENV="prod", JWT_SECRET="change-me-in-production")

    def test_rejects_unknown_database_scheme(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="mysql://localhost/db")

    def test_bcrypt_rounds_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(BCRYPT_ROUNDS=3)
        self.assertEqual(make_settings(BCRYPT_ROUNDS=12).BCRYPT_ROUNDS, 12)

    def test_blank_ai_service_url_means_unconfigured(self) -> None:
        self.assertIsNone(make_settings(AI_SERVICE_URL="  ").AI_SERVICE_URL)
        self.assertEqual(
            make_settings(AI_SERVICE_URL="http://ai:8000/").AI_SERVICE_URL, "http://ai:8000"
        )

    def test_ai_service_url_requires_http(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(AI_SERVICE_URL="ftp://ai")

    def test_api_prefix_normalised(self) -> None:
        self.assertEqual(make_settings(API_PREFIX="/api/").API_PREFIX, "/api")
        with self.assertRaises(ValidationError):
            make_settings(API_PREFIX="api")


if __name__ == "__main__":
    unittest.main()
