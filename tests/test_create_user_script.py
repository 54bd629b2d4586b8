"""Tests for the create_user CLI."""

import unittest
from unittest.mock import patch

from app.models import User
from app.scripts import create_user as script
from tests.support import DatabaseTestCase


class TestCreateUserScript(DatabaseTestCase):
    def _run(self, *argv: str) -> int:
        with patch.object(script, "SessionLocal", self.SessionTesting), patch.object(
            script, "engine", self.engine
        ):
            return script.main(list(argv))

    def test_creates_admin(self) -> None:
        self.assertEqual(self._run("lena", "lena@example.com", "lena-pass-12", "--admin"), 0)
        self.db.expire_all()
        user = self.db.query(User).filter(User.username == "lena").one()
        self.assertEqual(user.role_names, ["Admin"])

    def test_creates_plain_user(self) -> None:
        self.assertEqual(self._run("max", "max@example.com", "max-pass-123"), 0)
        self.db.expire_all()
        self.assertEqual(self.db.query(User).filter(User.username == "max").one().role_names, [])

    def test_duplicate_email_fails(self) -> None:
        self.assertEqual(self._run("admin2", "admin@example.com", "password-123"), 1)


if __name__ == "__main__":
    unittest.main()
