"""Role reference data: idempotent seeding and the startup configuration check."""

import logging

from sqlalchemy.orm import Session

from usermanagement.models import Role
from usermanagement.repositories.credential_store import CredentialStore
from usermanagement.services.errors import RoleConfigurationMissing
from usermanagement.services.roles import STANDARD_ROLES

logger = logging.getLogger(__name__)


def seed_roles(db: Session, names: tuple[str, ...] = STANDARD_ROLES) -> list[str]:
    """
    Insert any of names missing from the roles table.

    Returns the names created. Safe to run repeatedly.
    """
    existing = {name for (name,) in db.query(Role.name).filter(Role.name.in_(names)).all()}
    created = [name for name in names if name not in existing]
    for name in created:
        db.add(Role(name=name))
    db.commit()
    if created:
        logger.info("Seeded roles: %s", ", ".join(created))
    return created


def check_role_configuration(store: CredentialStore, default_role: str) -> None:
    """Raise RoleConfigurationMissing if default_role is absent; run at startup."""
    if store.find_role_by_name(default_role) is None:
        logger.critical("Default role %s is not configured; refusing to start", default_role)
        raise RoleConfigurationMissing(default_role)
    logger.info("Default role %s is configured", default_role)
