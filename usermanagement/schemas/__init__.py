"""Pydantic request/response schemas."""

from usermanagement.schemas.auth import LoginRequest, LoginResponse, PrincipalSummary
from usermanagement.schemas.health import HealthResponse
from usermanagement.schemas.users import RegistrationRequest, UserSummary, UsersListResponse

__all__ = [
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "PrincipalSummary",
    "RegistrationRequest",
    "UserSummary",
    "UsersListResponse",
]
