"""FastAPI router for the local session profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from promotor.core.dependencies import DatabaseSession
from promotor.modules.users.schemas import LoginRequest, UserProfileResponse
from promotor.modules.users.service import UserService

router = APIRouter(prefix="/session", tags=["Session"])


async def get_user_service(session: DatabaseSession) -> UserService:
    """Build the session service for a request."""
    return UserService(session)


Users = Annotated[UserService, Depends(get_user_service)]


@router.post(
    "/login",
    response_model=UserProfileResponse,
    summary="Start a local session",
    responses={422: {"description": "Password too short"}},
)
async def login(data: LoginRequest, service: Users) -> UserProfileResponse:
    """
    Record who is using this install.

    This is not authentication. The password is only checked for length.
    """
    profile = await service.login(data)
    return UserProfileResponse.model_validate(profile)


@router.get(
    "",
    response_model=UserProfileResponse,
    summary="Current session profile",
    responses={404: {"description": "Nobody is logged in"}},
)
async def current_session(service: Users) -> UserProfileResponse:
    profile = await service.current()
    return UserProfileResponse.model_validate(profile)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, summary="End the session")
async def logout(service: Users) -> None:
    await service.logout()
