"""Tests for app.services.bootstrap: startup seeding is idempotent and self-repairing."""

import unittest
from unittest.mock import MagicMock

from app.core.config import get_settings
from app.core.security import verify_password
from app.models import ADMIN_ROLE, USER_ROLE, Role, User, UserRole
from app.services.bootstrap import DEFAULT_ROLES, ensure_role, run_bootstrap
from tests.support import SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD, DatabaseTestCase


class TestBootstrap(DatabaseTestCase):
    def test_seeds_roles_and_admin(self) -> None:
        names = {r.name for r in self.db.query(Role).all()}
        self.assertEqual(names, set(DEFAULT_ROLES))
        admin = self.db.query(User).filter(User.email == SEED_ADMIN_EMAIL).one()
        self.assertEqual(admin.role_names, ["Admin"])
        self.assertTrue(verify_password(SEED_ADMIN_PASSWORD, admin.password_hash))

    def test_default_roles_are_the_builtin_role_names(self) -> None:
        self.assertEqual(set(DEFAULT_ROLES), {ADMIN_ROLE, USER_ROLE})
        self.assertEqual(self.admin.role_names, [ADMIN_ROLE])

    def test_running_twice_changes_nothing(self) -> None:
        run_bootstrap(self.db, get_settings())
        run_bootstrap(self.db, get_settings())
        self.assertEqual(self.db.query(Role).count(), 2)
        self.assertEqual(self.db.query(User).count(), 1)
        self.assertEqual(self.db.query(UserRole).count(), 1)

    def test_restores_missing_admin_assignment(self) -> None:
        self.db.query(UserRole).delete()
        self.db.commit()
        admin = run_bootstrap(self.db, get_settings())
        self.assertEqual(admin.role_names, ["Admin"])

    def test_existing_admin_keeps_password(self) -> None:
        admin = self.db.query(User).filter(User.email == SEED_ADMIN_EMAIL).one()
        admin.password_hash = "$2b$04$" + "x" * 53
        self.db.commit()
        run_bootstrap(self.db, get_settings())
        self.db.expire_all()
        admin = self.db.query(User).filter(User.email == SEED_ADMIN_EMAIL).one()
        self.assertEqual(admin.password_hash, "$2b$04$" + "x" * 53)


class TestEnsureRole(unittest.TestCase):
    def test_existing_role_is_not_added(self) -> None:
        session = MagicMock()
        existing = Role(name="Admin", description="d")
        session.query.return_value.filter.return_value.first.return_value = existing
        self.assertIs(ensure_role(session, "Admin", "d"), existing)
        session.add.assert_not_called()
        session.commit.assert_not_called()

    def test_missing_role_is_created(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.first.return_value = None
        role = ensure_role(session, "Auditor", "Reads logs")
        self.assertEqual(role.name, "Auditor")
        session.add.assert_called_once_with(role)
        session.commit.assert_called_once()


if __name__ == "__main__":
    unittest.main()
