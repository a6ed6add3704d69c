"""Error taxonomy for registration, authentication and access control."""

from typing import Literal

DenyReason = Literal["not_authenticated", "insufficient_authority"]


class UserManagementError(Exception):
    """Base class for expected, typed outcomes of the user management core."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UserAlreadyExists(UserManagementError):
    """Raised when a registration collides with an existing account."""


class DuplicateUsername(UserAlreadyExists):
    """Raised when the username is already taken (exact match, enabled or not)."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User already exists with username: {username}")


class DuplicateEmail(UserAlreadyExists):
    """Raised when the email address is already registered."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"User already exists with email: {email}")


class InvalidCredentials(UserManagementError):
    """
    Raised for any failed login.

    The message is identical for unknown users, wrong passwords and disabled
    accounts; the cause is only ever logged server-side.
    """

    MESSAGE = "Invalid username or password."

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


class AccessDenied(UserManagementError):
    """Raised when the access policy denies a request. reason is for logging only."""

    def __init__(self, reason: DenyReason) -> None:
        self.reason = reason
        super().__init__("Access denied")


class RoleConfigurationMissing(UserManagementError):
    """Raised when a required role (e.g. the default role) is not in the roles table."""

    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__(f"Required role is not configured: {role_name}")


class StoreUnavailable(UserManagementError):
    """Raised when the credential store fails; retryable and never 'not found'."""

    def __init__(self, message: str = "Credential store is unavailable.") -> None:
        super().__init__(message)


class UserNotFound(UserManagementError):
    """Raised when a user looked up by id does not exist."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User not found with id: {user_id}")


class ConcurrentSessionRejected(UserManagementError):
    """Raised when a user already has a live session and new logins are refused."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Maximum sessions for this user exceeded.")
