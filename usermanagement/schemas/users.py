"""Request/response schemas for registration and user listing."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from usermanagement.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from usermanagement.models import User

# local@domain.tld, no whitespace; full RFC 5322 is not attempted.
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RegistrationRequest(BaseModel):
    """Candidate account submitted for registration."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username"
    )
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
        repr=False,
    )
    first_name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN, description="First name")
    last_name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN, description="Last name")
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN, description="Email address")

    @field_validator("username", "first_name", "last_name", "email", mode="before")
    @classmethod
    def strip_whitespace(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not _EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email address")
        return v


class UserSummary(BaseModel):
    """User as returned to clients (never includes the password hash)."""

    id: int
    username: str
    first_name: str
    last_name: str
    email: str
    enabled: bool
    roles: list[str] = Field(default_factory=list, description="Assigned role names")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            enabled=user.enabled,
            roles=sorted(set(user.role_names)),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserSummary]
