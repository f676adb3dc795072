from __future__ import annotations

from fastapi import APIRouter, Depends, status

from src.application.dtos.common_dto import CurrentUserResponse
from src.infrastructure.api.dependencies import get_current_user
from src.infrastructure.auth.auth_adapter import UserInfo

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
    },
)


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get Current Caller",
    description="""
    Return the identity behind the presented credential.

    Accepts `Authorization: Bearer <token>` or the legacy `X-API-Key` header.

    **Authentication required**: Yes
    """,
    response_description="Identity of the authenticated caller",
)
def get_me(user: UserInfo = Depends(get_current_user)):
    """Get the authenticated caller."""
    return CurrentUserResponse(user_id=user.id, email=user.email)
