"""Request/response schemas for login and the current principal."""

from pydantic import BaseModel, Field

from usermanagement.services.principal import Principal


class LoginRequest(BaseModel):
    """Credentials for login. Lengths are not checked so failures stay uniform."""

    username: str = Field(..., max_length=255, description="Username")
    password: str = Field(..., max_length=255, description="Password", repr=False)


class PrincipalSummary(BaseModel):
    """Authenticated user and the authorities granted at login."""

    username: str
    authorities: list[str]

    @classmethod
    def from_principal(cls, principal: Principal) -> "PrincipalSummary":
        return cls(username=principal.username, authorities=list(principal.authorities))


class LoginResponse(BaseModel):
    """Session token returned after successful login."""

    session_token: str = Field(..., description="Opaque session token")
    token_type: str = Field(default="bearer", description="Token type")
    principal: PrincipalSummary
