"""User administration endpoints (guarded by the ROLE_ADMIN rule)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from usermanagement.api.v1.auth import STORE_UNAVAILABLE_DETAIL, get_credential_store
from usermanagement.repositories.credential_store import SqlAlchemyCredentialStore
from usermanagement.schemas.users import UserSummary, UsersListResponse
from usermanagement.services.errors import StoreUnavailable, UserNotFound

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    store: Annotated[SqlAlchemyCredentialStore, Depends(get_credential_store)],
    enabled_only: bool = False,
) -> UsersListResponse:
    """List users ordered by id, optionally only enabled ones."""
    try:
        users = store.list_users(enabled_only=enabled_only)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE_DETAIL) from e
    return UsersListResponse(users=[UserSummary.from_user(u) for u in users])


@router.get("/{user_id}", response_model=UserSummary)
def get_user(
    user_id: int,
    store: Annotated[SqlAlchemyCredentialStore, Depends(get_credential_store)],
) -> UserSummary:
    """Return one user by id, enabled or not."""
    try:
        user = store.find_user_by_id(user_id)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE_DETAIL) from e
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=UserNotFound(user_id).message
        )
    return UserSummary.from_user(user)
