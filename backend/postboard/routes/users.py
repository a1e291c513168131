"""
Postboard Backend — User Registration Route
=============================================

What:  POST /api/users registers an account and returns a session token.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.routes.deps import get_token_service
from postboard.schemas.common import ErrorResponse
from postboard.schemas.user import RegisterRequest, TokenResponse
from postboard.services.token_service import TokenService
from postboard.services.user_directory import user_directory
from postboard.validation import validated_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.post(
    "/users",
    response_model=TokenResponse,
    responses={
        400: {"description": "Validation failed or email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a user",
)
async def register_user(
    payload: RegisterRequest = validated_body(RegisterRequest),
    db: AsyncSession = Depends(get_db_session),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """
    Creates the user and logs them straight in.

    Error responses:
        HTTP 400: field errors (ValidationError) or "User already exists" (DuplicateEmailError)
    """
    user = await user_directory.create(
        db,
        name=payload.name,
        email=payload.email,
        raw_password=payload.password,
    )
    return TokenResponse(token=tokens.issue(str(user.id)))
