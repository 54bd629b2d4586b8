"""Shared fixtures: in-memory SQLite store seeded like a fresh deployment."""

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import security
from app.core.config import get_settings
from app.core.database import build_engine, get_db
from app.main import app
from app.models import Base
from app.services.bootstrap import run_bootstrap

# Cheap hashes keep the suite fast; verification logic is unchanged.
security.BCRYPT_ROUNDS = 4

SEED_ADMIN_PASSWORD = get_settings().SEED_ADMIN_PASSWORD.get_secret_value()
SEED_ADMIN_USERNAME = get_settings().SEED_ADMIN_USERNAME
SEED_ADMIN_EMAIL = get_settings().SEED_ADMIN_EMAIL


class DatabaseTestCase(unittest.TestCase):
    """Each test gets a fresh in-memory database with default roles and the seed admin."""

    def setUp(self) -> None:
        self.engine = build_engine("sqlite://", poolclass=StaticPool)
        Base.metadata.create_all(bind=self.engine)
        self.SessionTesting = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db: Session = self.SessionTesting()
        self.admin = run_bootstrap(self.db, get_settings())

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient whose get_db uses the test database."""

    def setUp(self) -> None:
        super().setUp()

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        super().tearDown()

    def login(self, identifier: str, password: str) -> dict:
        resp = self.client.post(
            "/api/auth/login",
            json={"usernameOrEmail": identifier, "password": password},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def admin_headers(self) -> dict[str, str]:
        tokens = self.login(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD)
        return {"Authorization": f"Bearer {tokens['accessToken']}"}

    def create_user(self, username: str, email: str, password: str) -> dict:
        resp = self.client.post(
            "/api/users",
            json={"username": username, "email": email, "password": password},
            headers=self.admin_headers(),
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()
