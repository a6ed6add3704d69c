"""Role-gated landing endpoints: employees, leaders (managers) and systems (admins)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from usermanagement.api.v1.auth import get_current_principal
from usermanagement.services.principal import Principal

router = APIRouter()


def _page(title: str, principal: Principal) -> dict[str, str | list[str]]:
    return {
        "page": title,
        "username": principal.username,
        "authorities": list(principal.authorities),
    }


@router.get("/home")
def home(principal: Annotated[Principal, Depends(get_current_principal)]) -> dict:
    """Employee home (ROLE_EMPLOYEE)."""
    return _page("home", principal)


@router.get("/leaders")
def leaders(principal: Annotated[Principal, Depends(get_current_principal)]) -> dict:
    """Leadership page (ROLE_MANAGER)."""
    return _page("leaders", principal)


@router.get("/systems")
def systems(principal: Annotated[Principal, Depends(get_current_principal)]) -> dict:
    """Systems administration page (ROLE_ADMIN)."""
    return _page("systems", principal)
