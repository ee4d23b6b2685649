"""Shared test helpers: in-memory database, settings and app client."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from inkwell.core.config import Settings
from inkwell.core.database import Database
from inkwell.main import create_app
from inkwell.models import Role, User
from inkwell.services import auth as auth_service

TEST_PASSWORD = "longenough1"


def make_settings(**overrides: object) -> Settings:
    """Settings for tests; ignores any local .env file."""
    values = {"DATABASE_URL": "sqlite://", "APP_ENV": "dev"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_database() -> Database:
    """Connected in-memory SQLite database with all tables created."""
    database = Database("sqlite://")
    database.connect()
    database.create_all()
    return database


class DatabaseTestCase(unittest.TestCase):
    """Gives each test a fresh database and session; bcrypt runs at minimum cost."""

    def setUp(self) -> None:
        rounds = patch("inkwell.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)
        self.database = make_database()
        self.addCleanup(self.database.dispose)
        self.db = self.database.session()
        self.addCleanup(self.db.close)

    def make_user(
        self,
        name: str = "Alice",
        email: str = "alice@example.com",
        password: str = TEST_PASSWORD,
        role: Role = Role.USER,
    ) -> User:
        return auth_service.create_user(self.db, name, email, password, role)


class AppTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient bound to the same database."""

    def setUp(self) -> None:
        super().setUp()
        self.settings = make_settings()
        self.app = create_app(self.settings, self.database)
        self.client = TestClient(self.app, follow_redirects=False)

    def log_in(self, email: str = "alice@example.com", password: str = TEST_PASSWORD):
        response = self.client.post(
            "/api/auth/login", data={"email": email, "password": password}
        )
        self.assertEqual(response.status_code, 303)
        self.assertIn("session", self.client.cookies)
        return response
