"""SQLAlchemy ORM models."""

from usermanagement.models.base import Base
from usermanagement.models.user import Role, User, users_roles

__all__ = ["Base", "Role", "User", "users_roles"]
