"""Role resolution: role names assigned to a user -> authority strings."""

from collections.abc import Iterable

ROLE_PREFIX = "ROLE_"

ROLE_EMPLOYEE = "ROLE_EMPLOYEE"
ROLE_MANAGER = "ROLE_MANAGER"
ROLE_ADMIN = "ROLE_ADMIN"

# Roles seeded into a fresh database, in creation order.
STANDARD_ROLES = (ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_ADMIN)


def role_authority(name: str) -> str:
    """Map a bare role name (ADMIN) to its authority (ROLE_ADMIN); prefixed names pass through."""
    return name if name.startswith(ROLE_PREFIX) else f"{ROLE_PREFIX}{name}"


def resolve_authorities(role_names: Iterable[str]) -> tuple[str, ...]:
    """
    Each role name becomes one authority, verbatim, duplicates dropped.

    There is no hierarchy: ROLE_ADMIN does not imply ROLE_EMPLOYEE.
    """
    return tuple(dict.fromkeys(role_names))
