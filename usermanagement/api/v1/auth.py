"""Session login/logout and the request-level dependencies (access policy, current principal)."""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from usermanagement.core.database import get_db
from usermanagement.core.security import PasswordHasher
from usermanagement.repositories.credential_store import SqlAlchemyCredentialStore
from usermanagement.schemas.auth import LoginRequest, LoginResponse, PrincipalSummary
from usermanagement.services.access_control import AccessPolicy
from usermanagement.services.authentication import Authenticator, StoreCredentialLoader
from usermanagement.services.errors import (
    AccessDenied,
    ConcurrentSessionRejected,
    InvalidCredentials,
    StoreUnavailable,
)
from usermanagement.services.principal import Principal
from usermanagement.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

STORE_UNAVAILABLE_DETAIL = "Service temporarily unavailable. Please try again."


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_access_policy(request: Request) -> AccessPolicy:
    return request.app.state.access_policy


def get_credential_store(db: Annotated[Session, Depends(get_db)]) -> SqlAlchemyCredentialStore:
    return SqlAlchemyCredentialStore(db)


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    return credentials.credentials if credentials is not None else None


def enforce_access(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    sessions: Annotated[SessionRegistry, Depends(get_session_registry)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
) -> Principal | None:
    """
    App-wide dependency: resolve the session, apply the access policy.

    Idle sessions are invalidated before the check. The principal (or None)
    is left on request.state.principal for the route.
    """
    token = _bearer_token(credentials)
    entry = sessions.get(token)
    principal = None
    if entry is not None:
        idle_limit = timedelta(minutes=request.app.state.settings.SESSION_IDLE_TIMEOUT_MINUTES)
        if sessions.now() - entry.last_access_at > idle_limit:
            sessions.invalidate(entry.token)
            logger.info("Session expired after idle timeout: user=%s", entry.username)
        elif sessions.touch(entry.token):
            principal = entry.principal

    request.state.principal = principal
    try:
        policy.enforce(request.url.path, principal)
    except AccessDenied as e:
        if e.reason == "not_authenticated":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        ) from e
    return principal


def get_current_principal(request: Request) -> Principal:
    """Dependency: the authenticated principal. Raises 401 when the request is anonymous."""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[SqlAlchemyCredentialStore, Depends(get_credential_store)],
    sessions: Annotated[SessionRegistry, Depends(get_session_registry)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns a new session token.
    Include the token in the Authorization header as: Bearer <session_token>
    """
    authenticator = Authenticator(
        StoreCredentialLoader(store),
        hasher,
        sessions,
        on_rehash=store.update_password_hash,
    )
    try:
        result = authenticator.authenticate(
            body.username,
            body.password,
            presented_token=_bearer_token(credentials),
        )
    except InvalidCredentials as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        ) from e
    except ConcurrentSessionRejected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    except StoreUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORE_UNAVAILABLE_DETAIL,
        ) from e
    return LoginResponse(
        session_token=result.token,
        token_type="bearer",
        principal=PrincipalSummary.from_principal(result.principal),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    principal: Annotated[Principal, Depends(get_current_principal)],
    sessions: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> Response:
    """Invalidate the session presented with this request."""
    token = _bearer_token(credentials)
    if token:
        sessions.invalidate(token)
    logger.info("User logged out: %s", principal.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=PrincipalSummary)
def me(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> PrincipalSummary:
    """Return the current principal and its authorities."""
    return PrincipalSummary.from_principal(principal)
