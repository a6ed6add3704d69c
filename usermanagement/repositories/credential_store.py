"""
Credential store: persistence of users and roles behind a narrow interface.

Not-found is a normal None. Database failures are logged and re-raised as
StoreUnavailable; unique-index violations on save become DuplicateUsername or
DuplicateEmail so registration races surface as typed errors.
"""

import logging
from typing import Protocol

from sqlalchemy import func, inspect, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from usermanagement.models import Role, User
from usermanagement.services.errors import (
    DuplicateEmail,
    DuplicateUsername,
    StoreUnavailable,
    UserManagementError,
)

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Operations the core needs from persistence."""

    def find_user_by_username(self, username: str, enabled_only: bool = True) -> User | None: ...

    def find_user_by_email(self, email: str, enabled_only: bool = True) -> User | None: ...

    def find_user_by_id(self, user_id: int) -> User | None: ...

    def list_users(self, enabled_only: bool = False) -> list[User]: ...

    def save(self, user: User) -> User: ...

    def find_role_by_name(self, name: str) -> Role | None: ...

    def update_password_hash(self, user_id: int, password_hash: str) -> None: ...


class SqlAlchemyCredentialStore:
    """CredentialStore backed by a SQLAlchemy session (one per request)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _fail(self, operation: str, exc: SQLAlchemyError) -> StoreUnavailable:
        self.db.rollback()
        logger.error("Credential store %s failed: %s", operation, exc.__class__.__name__, exc_info=exc)
        return StoreUnavailable()

    def find_user_by_username(self, username: str, enabled_only: bool = True) -> User | None:
        stmt = select(User).where(User.username == username)
        if enabled_only:
            stmt = stmt.where(User.enabled.is_(True))
        try:
            return self.db.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise self._fail("find_user_by_username", e) from e

    def find_user_by_email(self, email: str, enabled_only: bool = True) -> User | None:
        stmt = select(User).where(User.email == email)
        if enabled_only:
            stmt = stmt.where(User.enabled.is_(True))
        try:
            return self.db.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise self._fail("find_user_by_email", e) from e

    def find_user_by_id(self, user_id: int) -> User | None:
        try:
            return self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise self._fail("find_user_by_id", e) from e

    def list_users(self, enabled_only: bool = False) -> list[User]:
        stmt = select(User).order_by(User.id)
        if enabled_only:
            stmt = stmt.where(User.enabled.is_(True))
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise self._fail("list_users", e) from e

    def find_role_by_name(self, name: str) -> Role | None:
        try:
            return self.db.scalars(select(Role).where(Role.name == name)).first()
        except SQLAlchemyError as e:
            raise self._fail("find_role_by_name", e) from e

    def save(self, user: User) -> User:
        """Insert or update user; assigns id on insert and refreshes timestamps."""
        user_id, username, email = user.id, user.username, user.email
        if inspect(user).persistent:
            # onupdate only fires for users columns; role changes write users_roles alone.
            user.updated_at = func.now()
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError as e:
            self.db.rollback()
            raise self._duplicate_error(user_id, username, email) from e
        except SQLAlchemyError as e:
            raise self._fail("save", e) from e

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        try:
            self.db.execute(
                update(User).where(User.id == user_id).values(password_hash=password_hash)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update_password_hash", e) from e

    def _duplicate_error(
        self, user_id: int | None, username: str, email: str
    ) -> UserManagementError:
        """Work out which unique key a rejected write collided with."""
        try:
            if self._taken(User.username == username, user_id):
                logger.info("Unique index rejected username: %s", username)
                return DuplicateUsername(username)
            if self._taken(User.email == email, user_id):
                logger.info("Unique index rejected email for username: %s", username)
                return DuplicateEmail(email)
        except SQLAlchemyError as e:
            return self._fail("save", e)
        logger.error("Integrity error saving user %s was not a duplicate key", username)
        return StoreUnavailable()

    def _taken(self, clause, user_id: int | None) -> bool:
        stmt = select(User.id).where(clause)
        if user_id is not None:
            stmt = stmt.where(User.id != user_id)
        return self.db.scalars(stmt).first() is not None
