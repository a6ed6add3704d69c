"""Registration: uniqueness checks, password hashing, default role, persist."""

import logging

from usermanagement.core.security import PasswordHasher
from usermanagement.models import User
from usermanagement.repositories.credential_store import CredentialStore
from usermanagement.schemas.users import RegistrationRequest, UserSummary
from usermanagement.services.errors import (
    DuplicateEmail,
    DuplicateUsername,
    RoleConfigurationMissing,
)
from usermanagement.services.roles import ROLE_EMPLOYEE

logger = logging.getLogger(__name__)


def register_user(
    store: CredentialStore,
    hasher: PasswordHasher,
    request: RegistrationRequest,
    *,
    default_role: str = ROLE_EMPLOYEE,
) -> UserSummary:
    """
    Create an enabled user holding exactly the default role.

    The pre-checks give the common case a clear error; the store's unique
    indexes still decide concurrent registrations, and save() raises the same
    DuplicateUsername/DuplicateEmail when a race slips past them.
    """
    logger.info("Registering user with username: %s", request.username)

    if store.find_user_by_username(request.username, enabled_only=False) is not None:
        raise DuplicateUsername(request.username)
    if store.find_user_by_email(request.email, enabled_only=False) is not None:
        raise DuplicateEmail(request.email)

    password_hash = hasher.hash(request.password)

    role = store.find_role_by_name(default_role)
    if role is None:
        logger.error("Default role %s is missing; seed the roles table", default_role)
        raise RoleConfigurationMissing(default_role)

    user = User(
        username=request.username,
        password_hash=password_hash,
        enabled=True,
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        roles=[role],
    )
    saved = store.save(user)
    logger.info("Registered user %s with id %s", saved.username, saved.id)
    return UserSummary.from_user(saved)
