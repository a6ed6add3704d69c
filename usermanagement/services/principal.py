"""Loaded credentials and the authenticated principal built from them."""

from dataclasses import dataclass

from usermanagement.services.roles import resolve_authorities


@dataclass(frozen=True)
class Credentials:
    """What authentication needs from a stored, enabled user."""

    user_id: int
    username: str
    password_hash: str
    role_names: tuple[str, ...]

    def __repr__(self) -> str:
        # Keep the hash out of logs and tracebacks.
        return (
            f"Credentials(user_id={self.user_id!r}, username={self.username!r}, "
            f"role_names={self.role_names!r})"
        )


@dataclass(frozen=True)
class Principal:
    """
    Authenticated identity and its authorities.

    A snapshot taken at login; it is not re-resolved for later requests.
    """

    username: str
    authorities: tuple[str, ...]

    def has_authority(self, authority: str | None) -> bool:
        return authority is not None and authority in self.authorities


def build_principal(credentials: Credentials) -> Principal:
    """Turn verified credentials into a principal via the role resolver."""
    return Principal(
        username=credentials.username,
        authorities=resolve_authorities(credentials.role_names),
    )
