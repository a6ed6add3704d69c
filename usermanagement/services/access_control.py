"""
Access-control decisions: an ordered, first-match rule table.

Rules are scanned in declaration order and the first rule with a pattern
matching the request path decides; a later, broader rule never overrides an
earlier one. Paths that match no rule fall back to the default requirement
(any authenticated principal).
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from usermanagement.services.errors import AccessDenied, DenyReason
from usermanagement.services.principal import Principal
from usermanagement.services.roles import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_MANAGER, role_authority

logger = logging.getLogger(__name__)

RequirementKind = Literal["permit_all", "authenticated", "authority"]


@dataclass(frozen=True)
class Requirement:
    """What a matched rule demands of the caller."""

    kind: RequirementKind
    authority: str | None = None

    def __str__(self) -> str:
        return self.authority if self.kind == "authority" else self.kind


def permit_all() -> Requirement:
    return Requirement("permit_all")


def authenticated() -> Requirement:
    return Requirement("authenticated")


def has_authority(authority: str) -> Requirement:
    return Requirement("authority", authority)


def has_role(name: str) -> Requirement:
    """Require a role by bare or prefixed name: has_role("ADMIN") == has_authority("ROLE_ADMIN")."""
    return has_authority(role_authority(name))


@dataclass(frozen=True)
class AccessRule:
    """One row of the policy table: path patterns guarded by a requirement."""

    patterns: tuple[str, ...]
    requirement: Requirement

    def matches(self, path: str) -> bool:
        return any(_compile_pattern(p).fullmatch(path) for p in self.patterns)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of one check. reason is set only on deny and is for server-side logs."""

    allowed: bool
    reason: DenyReason | None = None
    rule: AccessRule | None = None


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile an Ant-style path pattern.

    ``*`` matches within one path segment, ``**`` matches any number of
    segments (including none), so ``/register/**`` matches ``/register`` and
    ``/register/form/step``.
    """
    regex = ""
    i = 0
    while i < len(pattern):
        if pattern.startswith("/**", i):
            regex += "(?:/.*)?"
            i += 3
        elif pattern.startswith("**", i):
            regex += ".*"
            i += 2
        elif pattern[i] == "*":
            regex += "[^/]*"
            i += 1
        elif pattern[i] == "?":
            regex += "[^/]"
            i += 1
        else:
            regex += re.escape(pattern[i])
            i += 1
    return re.compile(regex)


def normalize_path(path: str) -> str:
    """Collapse duplicate slashes and drop a trailing slash (except for the root)."""
    path = re.sub(r"/{2,}", "/", path or "/")
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"
    return path


class AccessPolicy:
    """Static first-match policy table with a default for unmatched paths."""

    def __init__(
        self,
        rules: list[AccessRule] | tuple[AccessRule, ...],
        default: Requirement | None = None,
    ) -> None:
        self.rules = tuple(rules)
        self.default = default or authenticated()

    def match(self, path: str) -> AccessRule | None:
        """Return the first rule matching path, or None."""
        path = normalize_path(path)
        for rule in self.rules:
            if rule.matches(path):
                return rule
        return None

    def decide(self, path: str, principal: Principal | None) -> AccessDecision:
        rule = self.match(path)
        requirement = rule.requirement if rule is not None else self.default

        if requirement.kind == "permit_all":
            return AccessDecision(True, rule=rule)
        if principal is None:
            return AccessDecision(False, "not_authenticated", rule)
        if requirement.kind == "authenticated":
            return AccessDecision(True, rule=rule)
        if principal.has_authority(requirement.authority):
            return AccessDecision(True, rule=rule)
        return AccessDecision(False, "insufficient_authority", rule)

    def enforce(self, path: str, principal: Principal | None) -> AccessDecision:
        """Like decide() but raise AccessDenied on deny."""
        decision = self.decide(path, principal)
        if not decision.allowed:
            logger.info(
                "Access denied: path=%s user=%s reason=%s required=%s",
                path,
                principal.username if principal else "anonymous",
                decision.reason,
                decision.rule.requirement if decision.rule else self.default,
            )
            raise AccessDenied(decision.reason)
        return decision


def default_policy(api_prefix: str = "/api/v1") -> AccessPolicy:
    """Role-gated pages, public registration/login/health/static, everything else authenticated."""
    p = api_prefix.rstrip("/")
    return AccessPolicy(
        [
            AccessRule(("/", f"{p}/home"), has_authority(ROLE_EMPLOYEE)),
            AccessRule((f"{p}/leaders/**",), has_authority(ROLE_MANAGER)),
            AccessRule((f"{p}/systems/**", f"{p}/users/**"), has_authority(ROLE_ADMIN)),
            AccessRule(
                (f"{p}/register/**", "/static/**", "/css/**", "/js/**", "/images/**"),
                permit_all(),
            ),
            AccessRule(
                (f"{p}/login", f"{p}/health/**", "/docs/**", "/redoc/**", "/openapi.json"),
                permit_all(),
            ),
        ],
        default=authenticated(),
    )
