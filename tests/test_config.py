"""Unit tests for app.core.config.Settings validation."""

import unittest

from pydantic import ValidationError

from app.core.config import DEFAULT_JWT_SECRET, Settings


def _settings(**kwargs: object) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestSettingsDefaults(unittest.TestCase):
    def test_token_windows(self) -> None:
        s = _settings()
        self.assertEqual(s.LOGIN_TOKEN_EXPIRE_MINUTES, 60)
        self.assertEqual(s.REGISTRATION_TOKEN_EXPIRE_DAYS, 365)
        self.assertEqual(s.BCRYPT_ROUNDS, 10)

    def test_sqlite_url_accepted(self) -> None:
        self.assertEqual(_settings(DATABASE_URL=" sqlite:// ").DATABASE_URL, "sqlite://")


class TestSettingsValidation(unittest.TestCase):
    def test_rejects_non_sql_database_url(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://root@localhost/db")

    def test_rejects_empty_secret(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_SECRET="   ")

    def test_rejects_default_secret_in_prod(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(APP_ENV="prod", JWT_SECRET=DEFAULT_JWT_SECRET)
        self.assertEqual(
            _settings(APP_ENV="prod", JWT_SECRET="a-real-secret").APP_ENV,
            "prod",
        )

    def test_rejects_asymmetric_algorithm(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")

    def test_rejects_out_of_range_windows(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(LOGIN_TOKEN_EXPIRE_MINUTES=0)
        with self.assertRaises(ValidationError):
            _settings(REGISTRATION_TOKEN_EXPIRE_DAYS=400)
        with self.assertRaises(ValidationError):
            _settings(BCRYPT_ROUNDS=3)

    def test_api_prefix_normalized(self) -> None:
        self.assertEqual(_settings(API_V1_PREFIX="/api/v1/").API_V1_PREFIX, "/api/v1")
        with self.assertRaises(ValidationError):
            _settings(API_V1_PREFIX="api")
