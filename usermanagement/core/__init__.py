"""Core app configuration, database and password hashing."""

from usermanagement.core.config import get_settings, settings
from usermanagement.core.database import create_session_factory, get_db
from usermanagement.core.security import PasswordHasher

__all__ = ["PasswordHasher", "create_session_factory", "get_settings", "settings", "get_db"]
