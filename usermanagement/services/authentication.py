"""
Login: load credentials, verify the password, build the principal, open a session.

Unknown users, disabled users and wrong passwords all end in the same
InvalidCredentials after exactly one bcrypt check, so neither the response
nor its latency tells them apart. The log line says which one it was.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from usermanagement.core.security import PasswordHasher
from usermanagement.repositories.credential_store import CredentialStore
from usermanagement.services.errors import InvalidCredentials, StoreUnavailable
from usermanagement.services.principal import Credentials, Principal, build_principal
from usermanagement.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)


class CredentialLoader(Protocol):
    """Loads the credentials of an enabled user by exact username."""

    def load_credentials(self, username: str) -> Credentials | None: ...


class StoreCredentialLoader:
    """CredentialLoader over a CredentialStore; disabled users are invisible."""

    def __init__(self, store: CredentialStore) -> None:
        self.store = store

    def load_credentials(self, username: str) -> Credentials | None:
        user = self.store.find_user_by_username(username, enabled_only=True)
        if user is None:
            return None
        return Credentials(
            user_id=user.id,
            username=user.username,
            password_hash=user.password_hash,
            role_names=tuple(user.role_names),
        )


@dataclass(frozen=True)
class LoginResult:
    """Session token and principal for a successful login."""

    token: str
    principal: Principal


class Authenticator:
    """
    All-or-nothing username/password authentication.

    on_rehash(user_id, new_hash) is called after a successful login whose
    stored hash was made with a lower cost than the hasher's current one.
    """

    def __init__(
        self,
        loader: CredentialLoader,
        hasher: PasswordHasher,
        sessions: SessionRegistry,
        on_rehash: Callable[[int, str], None] | None = None,
    ) -> None:
        self.loader = loader
        self.hasher = hasher
        self.sessions = sessions
        self.on_rehash = on_rehash

    def verify_credentials(self, username: str, password: str) -> Credentials:
        """Return the verified credentials or raise InvalidCredentials."""
        credentials = self.loader.load_credentials(username)
        if credentials is None:
            self.hasher.dummy_verify(password)
            logger.warning("Login failed: no enabled user '%s'", username)
            raise InvalidCredentials()
        if not self.hasher.verify(password, credentials.password_hash):
            logger.warning("Login failed: invalid password for '%s'", username)
            raise InvalidCredentials()
        return credentials

    def authenticate(
        self,
        username: str,
        password: str,
        presented_token: str | None = None,
    ) -> LoginResult:
        """
        Authenticate and open a session.

        presented_token is whatever session token the client sent with the
        login request; it is invalidated and never reused.

        Raises InvalidCredentials, ConcurrentSessionRejected or StoreUnavailable.
        """
        credentials = self.verify_credentials(username, password)
        principal = build_principal(credentials)
        entry = self.sessions.register(principal, presented_token=presented_token)
        self._upgrade_hash(credentials, password)
        logger.info("User logged in: %s", username)
        return LoginResult(token=entry.token, principal=principal)

    def _upgrade_hash(self, credentials: Credentials, password: str) -> None:
        if self.on_rehash is None or not self.hasher.needs_rehash(credentials.password_hash):
            return
        try:
            self.on_rehash(credentials.user_id, self.hasher.hash(password))
            logger.info("Upgraded password hash cost for '%s'", credentials.username)
        except StoreUnavailable:
            logger.warning(
                "Could not upgrade password hash for '%s'; will retry next login",
                credentials.username,
            )
