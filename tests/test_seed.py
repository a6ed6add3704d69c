"""Tests for role seeding, the startup role check and the admin CLI scripts."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from sqlalchemy.orm import sessionmaker

from usermanagement.core.config import Settings
from usermanagement.core.database import create_db_engine
from usermanagement.models import Base, Role
from usermanagement.repositories.credential_store import SqlAlchemyCredentialStore
from usermanagement.scripts import create_user, seed_roles as seed_roles_script
from usermanagement.services.errors import RoleConfigurationMissing
from usermanagement.services.roles import STANDARD_ROLES
from usermanagement.services.seed import check_role_configuration, seed_roles


def _empty_factory() -> sessionmaker:
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class TestSeedRoles(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _empty_factory()()

    def tearDown(self) -> None:
        self.db.close()

    def test_idempotent(self) -> None:
        self.assertEqual(seed_roles(self.db), list(STANDARD_ROLES))
        self.assertEqual(seed_roles(self.db), [])
        self.assertEqual(self.db.query(Role).count(), 3)

    def test_fills_gaps(self) -> None:
        self.db.add(Role(name="ROLE_ADMIN"))
        self.db.commit()
        self.assertEqual(seed_roles(self.db), ["ROLE_EMPLOYEE", "ROLE_MANAGER"])


class TestCheckRoleConfiguration(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _empty_factory()()
        self.store = SqlAlchemyCredentialStore(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def test_missing_default_role(self) -> None:
        with self.assertRaises(RoleConfigurationMissing) as ctx:
            check_role_configuration(self.store, "ROLE_EMPLOYEE")
        self.assertEqual(ctx.exception.role_name, "ROLE_EMPLOYEE")

    def test_present_default_role(self) -> None:
        seed_roles(self.db)
        check_role_configuration(self.store, "ROLE_EMPLOYEE")


class TestScripts(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = _empty_factory()
        settings = Settings(DATABASE_URL="sqlite://", BCRYPT_ROUNDS=4)
        patches = [
            patch.object(seed_roles_script, "SessionLocal", self.factory),
            patch.object(create_user, "SessionLocal", self.factory),
            patch.object(create_user, "get_settings", return_value=settings),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def _create(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = create_user.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_seed_then_create_admin(self) -> None:
        self.assertEqual(seed_roles_script.main(), 0)
        code, out, _ = self._create(
            "susan", "secret1", "Susan", "Admin", "susan@x.com", "--role", "admin", "--role", "ROLE_MANAGER"
        )
        self.assertEqual(code, 0)
        self.assertIn("ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_MANAGER", out)

        db = self.factory()
        user = SqlAlchemyCredentialStore(db).find_user_by_username("susan")
        self.assertEqual(sorted(user.role_names), ["ROLE_ADMIN", "ROLE_EMPLOYEE", "ROLE_MANAGER"])
        db.close()

    def test_invalid_input(self) -> None:
        seed_roles_script.main()
        code, _, err = self._create("su", "secret1", "Susan", "Admin", "susan@x.com")
        self.assertEqual(code, 1)
        self.assertIn("username", err)

    def test_duplicate_user(self) -> None:
        seed_roles_script.main()
        self._create("susan", "secret1", "Susan", "Admin", "susan@x.com")
        code, _, err = self._create("susan", "secret1", "Susan", "Admin", "other@x.com")
        self.assertEqual(code, 1)
        self.assertIn("susan", err)

    def test_unknown_role(self) -> None:
        seed_roles_script.main()
        code, _, err = self._create("susan", "secret1", "Susan", "Admin", "susan@x.com", "--role", "ROOT")
        self.assertEqual(code, 1)
        self.assertIn("ROLE_ROOT", err)

        db = self.factory()
        self.assertIsNone(SqlAlchemyCredentialStore(db).find_user_by_username("susan", enabled_only=False))
        db.close()

        code, out, _ = self._create("susan", "secret1", "Susan", "Admin", "susan@x.com", "--role", "ADMIN")
        self.assertEqual(code, 0)
        self.assertIn("ROLE_ADMIN, ROLE_EMPLOYEE", out)


if __name__ == "__main__":
    unittest.main()
