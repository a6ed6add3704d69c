"""Self-service registration: creates an enabled account with the default role."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from usermanagement.api.v1.auth import (
    STORE_UNAVAILABLE_DETAIL,
    get_credential_store,
    get_password_hasher,
)
from usermanagement.core.security import PasswordHasher
from usermanagement.repositories.credential_store import SqlAlchemyCredentialStore
from usermanagement.schemas.users import RegistrationRequest, UserSummary
from usermanagement.services.errors import (
    RoleConfigurationMissing,
    StoreUnavailable,
    UserAlreadyExists,
)
from usermanagement.services.registration import register_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
def register(
    body: RegistrationRequest,
    request: Request,
    store: Annotated[SqlAlchemyCredentialStore, Depends(get_credential_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserSummary:
    """
    Register a new user.

    Username and email must be unused (409 otherwise). The account is enabled
    immediately and holds only the default role.
    """
    try:
        return register_user(
            store,
            hasher,
            body,
            default_role=request.app.state.settings.DEFAULT_ROLE,
        )
    except UserAlreadyExists as e:
        logger.warning("Registration rejected: %s", e.message)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    except RoleConfigurationMissing as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration is not available. Please contact an administrator.",
        ) from e
    except StoreUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORE_UNAVAILABLE_DETAIL,
        ) from e
