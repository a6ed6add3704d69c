"""Password hashing and session token minting."""

import secrets

import bcrypt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# bcrypt only uses the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

# Session tokens carry 256 bits of randomness.
SESSION_TOKEN_BYTES = 32

# Min/max lengths for registration field validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 100
NAME_MAX_LEN = 64
EMAIL_MAX_LEN = 64


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_cost(hashed: str | None) -> int | None:
    """Return the cost factor embedded in a bcrypt hash, or None if it is not one."""
    # $2b$12$<22 salt chars><31 hash chars>
    if not hashed or len(hashed) != 60:
        return None
    parts = hashed.split("$")
    if len(parts) != 4 or parts[1] not in ("2a", "2b", "2y"):
        return None
    try:
        return int(parts[2])
    except ValueError:
        return None


class PasswordHasher:
    """
    Salted, adaptive password hashing (bcrypt).

    Every hash embeds its salt and cost, so hashes created with an older, lower
    cost keep verifying after the configured cost is raised.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        # Reference hash for unknown users so that path costs one full bcrypt check.
        self._dummy_hash = self.hash(secrets.token_urlsafe(16))

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        return bcrypt.hashpw(
            _encode(plain_password), bcrypt.gensalt(rounds=self.rounds)
        ).decode("utf-8")

    def verify(self, plain_password: str, hashed: str | None) -> bool:
        """Verify a plain password against a stored hash. Malformed hashes never match."""
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_encode(plain_password), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def dummy_verify(self, plain_password: str) -> bool:
        """Spend the same work as verify() against a hash no password matches."""
        self.verify(plain_password, self._dummy_hash)
        return False

    def needs_rehash(self, hashed: str) -> bool:
        """True when hashed was produced with a lower cost than the configured one."""
        cost = hash_cost(hashed)
        return cost is None or cost < self.rounds


def new_session_token() -> str:
    """Mint an opaque, URL-safe session token."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
