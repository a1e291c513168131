"""
Postboard Backend — Post Route Handlers
=========================================

What:  Post CRUD plus like/unlike and comment/uncomment, all token-protected.
How:   Thin handlers: authenticate → validate body → call PostStore → return.

Status codes for a missing post differ per route and are part of the API:
    GET    /posts/{id}                      → 404
    DELETE /posts/{id}, PUT like/unlike     → 400 "Post not found"
    POST   /posts/comment/{id}, DELETE ...  → 404
A malformed id answers 400 everywhere.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.exceptions import BadRequestError, NotFoundError
from postboard.models.user import User
from postboard.routes.deps import get_current_user_id
from postboard.schemas.common import ErrorResponse, MessageResponse
from postboard.schemas.post import (
    CommentCreateRequest,
    CommentResponse,
    LikeResponse,
    PostCreateRequest,
    PostResponse,
)
from postboard.services.post_store import post_store
from postboard.services.user_directory import user_directory
from postboard.validation import validated_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])

_AUTH_ERROR = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}


@contextmanager
def missing_post_as_bad_request() -> Iterator[None]:
    """Re-raises a missing post as 400 for the routes that answer that way."""
    try:
        yield
    except NotFoundError as exc:
        raise BadRequestError(
            message="Post not found",
            error_code="post_not_found",
            context=exc.context,
        ) from exc


async def _load_author(db: AsyncSession, user_id: str) -> User:
    user = await user_directory.find_by_id(db, user_id)
    if user is None:
        raise NotFoundError(resource="user", resource_id=user_id)
    return user


# ══════════════════════════════════════════════════════════════════════════
# Posts
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "",
    response_model=PostResponse,
    responses={400: {"description": "Validation failed", "model": ErrorResponse}, **_AUTH_ERROR},
    summary="Create a post",
)
async def create_post(
    user_id: str = Depends(get_current_user_id),
    payload: PostCreateRequest = validated_body(PostCreateRequest),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    author = await _load_author(db, user_id)
    post = await post_store.create(db, author=author, text=payload.text)
    return PostResponse.model_validate(post)


@router.get(
    "",
    response_model=List[PostResponse],
    responses=_AUTH_ERROR,
    summary="List all posts, newest first",
)
async def list_posts(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    posts = await post_store.list(db)
    return [PostResponse.model_validate(post) for post in posts]


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses={
        400: {"description": "Malformed post id", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
        **_AUTH_ERROR,
    },
    summary="Get a post by id",
)
async def get_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    post = await post_store.get_by_id(db, post_id)
    return PostResponse.model_validate(post)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Post not found or malformed id", "model": ErrorResponse},
        401: {"description": "Missing token, or caller is not the author", "model": ErrorResponse},
    },
    summary="Delete your own post",
)
async def delete_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    with missing_post_as_bad_request():
        await post_store.delete(db, post_id, caller_id=user_id)
    return MessageResponse(msg="Post removed")


# ══════════════════════════════════════════════════════════════════════════
# Likes
# ══════════════════════════════════════════════════════════════════════════


@router.put(
    "/like/{post_id}",
    response_model=List[LikeResponse],
    responses={400: {"description": "Post not found or already liked", "model": ErrorResponse}, **_AUTH_ERROR},
    summary="Like a post",
)
async def like_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeResponse]:
    with missing_post_as_bad_request():
        likes = await post_store.add_like(db, post_id, user_id)
    return [LikeResponse.model_validate(like) for like in likes]


@router.put(
    "/unlike/{post_id}",
    response_model=List[LikeResponse],
    responses={400: {"description": "Post not found or not liked", "model": ErrorResponse}, **_AUTH_ERROR},
    summary="Remove your like from a post",
)
async def unlike_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeResponse]:
    with missing_post_as_bad_request():
        likes = await post_store.remove_like(db, post_id, user_id)
    return [LikeResponse.model_validate(like) for like in likes]


# ══════════════════════════════════════════════════════════════════════════
# Comments
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/comment/{post_id}",
    response_model=List[CommentResponse],
    responses={
        400: {"description": "Validation failed or malformed id", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
        **_AUTH_ERROR,
    },
    summary="Comment on a post",
)
async def comment_on_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    payload: CommentCreateRequest = validated_body(CommentCreateRequest),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    author = await _load_author(db, user_id)
    comments = await post_store.add_comment(db, post_id, author=author, text=payload.text)
    return [CommentResponse.model_validate(c) for c in comments]


@router.delete(
    "/comment/{post_id}/{comment_id}",
    response_model=List[CommentResponse],
    responses={
        401: {"description": "Missing token, or caller wrote neither comment nor post", "model": ErrorResponse},
        404: {"description": "Post or comment not found", "model": ErrorResponse},
    },
    summary="Delete a comment",
)
async def delete_comment(
    post_id: str,
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    """The comment's author or the post's author may delete a comment."""
    comments = await post_store.remove_comment(db, post_id, comment_id, caller_id=user_id)
    return [CommentResponse.model_validate(c) for c in comments]
