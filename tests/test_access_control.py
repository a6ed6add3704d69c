"""Tests for usermanagement.services.access_control: first-match rules, permit-all, defaults."""

import unittest

from usermanagement.services.access_control import (
    AccessPolicy,
    AccessRule,
    authenticated,
    default_policy,
    has_authority,
    has_role,
    normalize_path,
    permit_all,
)
from usermanagement.services.errors import AccessDenied
from usermanagement.services.principal import Principal

EMPLOYEE = Principal(username="john", authorities=("ROLE_EMPLOYEE",))
MANAGER = Principal(username="mary", authorities=("ROLE_EMPLOYEE", "ROLE_MANAGER"))
ADMIN_ONLY = Principal(username="root", authorities=("ROLE_ADMIN",))
NO_ROLES = Principal(username="nobody", authorities=())


class TestPatterns(unittest.TestCase):
    """Ant-style patterns: * within a segment, ** across segments."""

    def _matches(self, pattern: str, path: str) -> bool:
        return AccessRule((pattern,), permit_all()).matches(normalize_path(path))

    def test_double_star(self) -> None:
        for path in ("/register", "/register/", "/register/form", "/register/a/b/c"):
            with self.subTest(path=path):
                self.assertTrue(self._matches("/register/**", path))
        self.assertFalse(self._matches("/register/**", "/registered"))
        self.assertFalse(self._matches("/register/**", "/api/register"))

    def test_single_star(self) -> None:
        self.assertTrue(self._matches("/users/*", "/users/42"))
        self.assertFalse(self._matches("/users/*", "/users/42/roles"))
        self.assertTrue(self._matches("/css/*.css", "/css/site.css"))
        self.assertFalse(self._matches("/css/*.css", "/css/site.js"))

    def test_exact_and_root(self) -> None:
        self.assertTrue(self._matches("/", "/"))
        self.assertFalse(self._matches("/", "/home"))
        self.assertTrue(self._matches("/home", "/home/"))

    def test_literal_characters_escaped(self) -> None:
        self.assertTrue(self._matches("/openapi.json", "/openapi.json"))
        self.assertFalse(self._matches("/openapi.json", "/openapiXjson"))

    def test_normalize_path(self) -> None:
        self.assertEqual(normalize_path("//a///b/"), "/a/b")
        self.assertEqual(normalize_path(""), "/")
        self.assertEqual(normalize_path("/"), "/")


class TestFirstMatch(unittest.TestCase):
    """The earliest matching rule decides, even when a later one is more specific."""

    def test_earlier_broad_rule_shadows_later_narrow_rule(self) -> None:
        policy = AccessPolicy(
            [
                AccessRule(("/admin/**",), has_role("ADMIN")),
                AccessRule(("/admin/public",), permit_all()),
            ]
        )
        self.assertFalse(policy.decide("/admin/public", None).allowed)

    def test_earlier_narrow_rule_wins_over_later_broad_rule(self) -> None:
        policy = AccessPolicy(
            [
                AccessRule(("/admin/public",), permit_all()),
                AccessRule(("/admin/**",), has_role("ADMIN")),
            ]
        )
        self.assertTrue(policy.decide("/admin/public", None).allowed)
        self.assertFalse(policy.decide("/admin/secret", EMPLOYEE).allowed)

    def test_decision_reports_matched_rule(self) -> None:
        rule = AccessRule(("/a/**",), authenticated())
        policy = AccessPolicy([rule])
        self.assertIs(policy.decide("/a/b", EMPLOYEE).rule, rule)
        self.assertIsNone(policy.decide("/z", EMPLOYEE).rule)


class TestDecisions(unittest.TestCase):
    """Allow/deny outcomes and their internal reason tags."""

    def setUp(self) -> None:
        self.policy = default_policy("/api/v1")

    def test_employee_denied_admin_resource(self) -> None:
        decision = self.policy.decide("/api/v1/systems", EMPLOYEE)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, "insufficient_authority")

    def test_employee_allowed_default_authenticated_resource(self) -> None:
        decision = self.policy.decide("/api/v1/me", EMPLOYEE)
        self.assertTrue(decision.allowed)
        self.assertIsNone(decision.reason)
        self.assertIsNone(decision.rule)

    def test_principal_without_roles_allowed_default_rule(self) -> None:
        self.assertTrue(self.policy.decide("/api/v1/anything/else", NO_ROLES).allowed)

    def test_anonymous_denied_default_rule(self) -> None:
        decision = self.policy.decide("/api/v1/me", None)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, "not_authenticated")

    def test_anonymous_denied_role_rule_as_not_authenticated(self) -> None:
        self.assertEqual(self.policy.decide("/api/v1/leaders", None).reason, "not_authenticated")

    def test_permit_all_paths(self) -> None:
        for path in (
            "/api/v1/register",
            "/api/v1/login",
            "/api/v1/health/",
            "/css/site.css",
            "/js/app.js",
            "/images/logo.png",
            "/static/x",
            "/docs",
            "/openapi.json",
        ):
            with self.subTest(path=path):
                self.assertTrue(self.policy.decide(path, None).allowed)

    def test_manager_rule(self) -> None:
        self.assertTrue(self.policy.decide("/api/v1/leaders", MANAGER).allowed)
        self.assertTrue(self.policy.decide("/api/v1/leaders/reports/q1", MANAGER).allowed)
        self.assertFalse(self.policy.decide("/api/v1/leaders", EMPLOYEE).allowed)

    def test_no_role_hierarchy(self) -> None:
        self.assertTrue(self.policy.decide("/api/v1/systems", ADMIN_ONLY).allowed)
        self.assertTrue(self.policy.decide("/api/v1/users/3", ADMIN_ONLY).allowed)
        self.assertFalse(self.policy.decide("/api/v1/home", ADMIN_ONLY).allowed)
        self.assertFalse(self.policy.decide("/", ADMIN_ONLY).allowed)

    def test_custom_default(self) -> None:
        policy = AccessPolicy([], default=has_authority("ROLE_X"))
        self.assertFalse(policy.decide("/any", EMPLOYEE).allowed)
        self.assertTrue(
            policy.decide("/any", Principal(username="x", authorities=("ROLE_X",))).allowed
        )


class TestEnforce(unittest.TestCase):
    def test_raises_access_denied_with_reason(self) -> None:
        policy = default_policy()
        with self.assertRaises(AccessDenied) as ctx:
            policy.enforce("/api/v1/systems", EMPLOYEE)
        self.assertEqual(ctx.exception.reason, "insufficient_authority")
        self.assertEqual(str(ctx.exception), "Access denied")

    def test_returns_decision_when_allowed(self) -> None:
        self.assertTrue(default_policy().enforce("/api/v1/home", EMPLOYEE).allowed)


class TestRequirements(unittest.TestCase):
    def test_has_role_prefixes(self) -> None:
        self.assertEqual(has_role("ADMIN"), has_authority("ROLE_ADMIN"))
        self.assertEqual(has_role("ROLE_ADMIN"), has_authority("ROLE_ADMIN"))
        self.assertEqual(str(has_role("ADMIN")), "ROLE_ADMIN")
        self.assertEqual(str(permit_all()), "permit_all")


if __name__ == "__main__":
    unittest.main()
