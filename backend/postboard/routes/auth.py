"""
Postboard Backend — Authentication Routes
===========================================

What:  POST /api/auth exchanges email + password for a token;
       GET /api/auth returns the caller's own profile.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.exceptions import NotFoundError
from postboard.routes.deps import get_current_user_id, get_token_service
from postboard.schemas.common import ErrorResponse
from postboard.schemas.user import LoginRequest, TokenResponse, UserResponse
from postboard.services.token_service import TokenService
from postboard.services.user_directory import user_directory
from postboard.validation import validated_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.get(
    "/auth",
    response_model=UserResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Token refers to an unknown user", "model": ErrorResponse},
    },
    summary="Get the authenticated user",
)
async def get_authenticated_user(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_directory.find_by_id(db, user_id)
    if user is None:
        raise NotFoundError(resource="user", resource_id=user_id)
    return UserResponse.model_validate(user)


@router.post(
    "/auth",
    response_model=TokenResponse,
    responses={
        400: {"description": "Validation failed or invalid credentials", "model": ErrorResponse},
    },
    summary="Log in and get a token",
)
async def login(
    payload: LoginRequest = validated_body(LoginRequest),
    db: AsyncSession = Depends(get_db_session),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """Unknown email and wrong password both answer 400 "Invalid credentials"."""
    user = await user_directory.authenticate(db, payload.email, payload.password)
    logger.info("User %s logged in", user.id)
    return TokenResponse(token=tokens.issue(str(user.id)))
