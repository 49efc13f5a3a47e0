"""Shared helpers: an isolated app per test over in-memory SQLite and a temp upload dir."""

import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import Database
from app.main import create_app
from app.models import Base

TEST_SECRET = "test-secret-key-for-unit-tests"
DEFAULT_PASSWORD = "secret123"


def make_settings(upload_dir: str, **overrides: object) -> Settings:
    """Settings isolated from the environment's .env file."""
    values: dict = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
        "UPLOAD_DIR": Path(upload_dir),
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class ApiTestCase(unittest.TestCase):
    """Fresh database, upload directory and TestClient for every test."""

    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.upload_dir = Path(tmp.name)
        self.settings = make_settings(tmp.name)
        self.database = Database(self.settings.DATABASE_URL)
        Base.metadata.create_all(self.database.engine)
        self.addCleanup(self.database.dispose)
        self.app = create_app(self.settings, self.database)
        self.client = TestClient(self.app)
        self.api = self.settings.API_V1_PREFIX

    # --- HTTP helpers ---

    def register(
        self,
        email: str,
        password: str = DEFAULT_PASSWORD,
        role: str | None = None,
        name: str | None = None,
    ):
        body: dict = {"email": email, "password": password}
        if role is not None:
            body["role"] = role
        if name is not None:
            body["name"] = name
        return self.client.post(f"{self.api}/auth/register", json=body)

    def login(self, email: str, password: str = DEFAULT_PASSWORD):
        return self.client.post(
            f"{self.api}/auth/login",
            json={"email": email, "password": password},
        )

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def register_admin(self, email: str = "admin@example.com") -> tuple[int, str]:
        """Register the bootstrap admin; return (id, token)."""
        resp = self.register(email, name="Admin")
        self.assertEqual(resp.status_code, 201, resp.text)
        data = resp.json()
        self.assertEqual(data["user"]["role"], "ADMIN")
        return data["user"]["id"], data["token"]

    def register_user(self, email: str, role: str | None = None) -> tuple[int, str]:
        resp = self.register(email, role=role)
        self.assertEqual(resp.status_code, 201, resp.text)
        data = resp.json()
        return data["user"]["id"], data["token"]

    def set_status(self, admin_token: str, user_id: int, status: str):
        return self.client.put(
            f"{self.api}/users/{user_id}/status",
            json={"status": status},
            headers=self.bearer(admin_token),
        )
