"""
Process-wide session table: one live session token per username.

A SessionRegistry is created at application start, passed to whoever needs
it and cleared at shutdown. All reads and writes go through one lock, so two
concurrent logins for the same user always leave exactly one live entry.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from usermanagement.core.config import SessionConcurrencyPolicy
from usermanagement.core.security import new_session_token
from usermanagement.services.errors import ConcurrentSessionRejected
from usermanagement.services.principal import Principal

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class SessionEntry:
    """A live session. last_access_at feeds idle-timeout checks at the boundary."""

    token: str
    principal: Principal
    created_at: datetime
    last_access_at: datetime

    @property
    def username(self) -> str:
        return self.principal.username


class SessionRegistry:
    """
    Issue, look up and invalidate session tokens.

    policy decides what a second login for a user with a live session does:
    ``evict_incumbent`` invalidates the old session, ``reject_newcomer``
    raises ConcurrentSessionRejected and keeps the old one.
    """

    def __init__(
        self,
        policy: SessionConcurrencyPolicy = "evict_incumbent",
        token_factory: Callable[[], str] = new_session_token,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        if policy not in ("evict_incumbent", "reject_newcomer"):
            raise ValueError(f"Unknown session concurrency policy: {policy}")
        self.policy = policy
        self._token_factory = token_factory
        self._clock = clock
        self._lock = threading.Lock()
        self._by_token: dict[str, SessionEntry] = {}
        self._by_username: dict[str, SessionEntry] = {}

    def register(self, principal: Principal, presented_token: str | None = None) -> SessionEntry:
        """
        Start a session for principal and return it.

        The token the client presented before logging in is invalidated and
        never handed back, so a pre-login identifier cannot be fixed on the
        victim's authenticated session.
        """
        with self._lock:
            incumbent = self._by_username.get(principal.username)
            # Logging in again from the client that holds the live session is not a second session.
            if incumbent is not None and incumbent.token != presented_token:
                if self.policy == "reject_newcomer":
                    logger.info("Login refused, session already live: user=%s", principal.username)
                    raise ConcurrentSessionRejected(principal.username)
                self._remove(incumbent.token)
                logger.info("Evicted previous session: user=%s", principal.username)
            if presented_token:
                self._remove(presented_token)

            token = self._mint(presented_token)
            now = self._clock()
            entry = SessionEntry(token=token, principal=principal, created_at=now, last_access_at=now)
            self._by_token[token] = entry
            self._by_username[principal.username] = entry
        logger.debug("Session registered: user=%s", principal.username)
        return entry

    def invalidate(self, token: str) -> bool:
        """End the session for token. Returns False if it was not live."""
        with self._lock:
            return self._remove(token) is not None

    def invalidate_user(self, username: str) -> bool:
        """End whatever session username currently holds."""
        with self._lock:
            entry = self._by_username.get(username)
            return entry is not None and self._remove(entry.token) is not None

    def is_live(self, token: str | None) -> Principal | None:
        """Return the principal for a live token, else None."""
        if not token:
            return None
        with self._lock:
            entry = self._by_token.get(token)
            return entry.principal if entry else None

    def get(self, token: str | None) -> SessionEntry | None:
        if not token:
            return None
        with self._lock:
            return self._by_token.get(token)

    def touch(self, token: str) -> bool:
        """Record an access now. Returns False if the token is not live."""
        with self._lock:
            entry = self._by_token.get(token)
            if entry is None:
                return False
            entry.last_access_at = self._clock()
            return True

    def now(self) -> datetime:
        """Current time on the registry's clock (used for idle-timeout checks)."""
        return self._clock()

    def clear(self) -> None:
        with self._lock:
            self._by_token.clear()
            self._by_username.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_token)

    def _mint(self, presented_token: str | None) -> str:
        token = self._token_factory()
        while token == presented_token or token in self._by_token:
            token = self._token_factory()
        return token

    def _remove(self, token: str) -> SessionEntry | None:
        entry = self._by_token.pop(token, None)
        if entry is not None and self._by_username.get(entry.username) is entry:
            del self._by_username[entry.username]
        return entry
