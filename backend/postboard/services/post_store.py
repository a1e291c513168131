"""
Postboard Backend — Post Store
================================

What:  Creates, lists, fetches and deletes posts, and updates their embedded
       like and comment lists.
How:   Stateless repository over the `posts` table. Each mutation loads the
       whole post row, builds new sub-lists and writes the row back.
Who:   Called by the /api/posts route handlers.

Consistency model:
    Read-modify-write with no locking. Two requests mutating the same post
    concurrently both read the old lists; the later commit wins and the
    earlier change is lost. Likes/comments are low-value, single-user
    actions, so last-write-wins is accepted and no version column exists.

Error mapping:
    malformed post id       → InvalidIdError
    missing post            → NotFoundError
    duplicate / absent like → AlreadyLikedError / NotLikedError
    missing comment         → CommentNotFoundError
    caller not the owner    → ForbiddenError
    store failure           → DatabaseError (details logged only)
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.exceptions import (
    AlreadyLikedError,
    CommentNotFoundError,
    DatabaseError,
    ForbiddenError,
    InvalidIdError,
    NotFoundError,
    NotLikedError,
)
from postboard.models.post import Post
from postboard.models.user import User

logger = logging.getLogger(__name__)

Identifier = Union[str, uuid.UUID]


def parse_post_id(raw: Identifier) -> uuid.UUID:
    """Raises InvalidIdError unless `raw` is a well-formed UUID."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError as e:
        raise InvalidIdError(resource="post", raw_id=str(raw)) from e


def _canonical(raw: Identifier) -> str:
    """Lower-case hyphenated form when `raw` is a UUID, else `raw` unchanged."""
    try:
        return str(uuid.UUID(str(raw)))
    except ValueError:
        return str(raw)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def _store_errors(operation: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(context={"operation": operation, **context}) from e


class PostStore:
    """Repository for Post documents and their embedded likes/comments."""

    async def _load(self, db: AsyncSession, post_id: Identifier) -> Post:
        key = parse_post_id(post_id)
        with _store_errors("get_post", post_id=str(key)):
            post = await db.get(Post, key)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(key))
        return post

    async def _save(self, db: AsyncSession, post: Post, operation: str) -> None:
        with _store_errors(operation, post_id=str(post.id)):
            await db.flush()

    # ── Posts ─────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, author: User, text: str) -> Post:
        """Creates a post, copying the author's current name and avatar into it."""
        post = Post(
            user_id=author.id,
            name=author.name,
            avatar=author.avatar,
            text=text,
            likes=[],
            comments=[],
        )
        db.add(post)
        await self._save(db, post, "create_post")
        logger.info("Post %s created by %s", post.id, author.id)
        return post

    async def list(self, db: AsyncSession) -> List[Post]:
        """All posts, newest first."""
        with _store_errors("list_posts"):
            result = await db.execute(select(Post).order_by(Post.created_at.desc()))
            return list(result.scalars().all())

    async def get_by_id(self, db: AsyncSession, post_id: Identifier) -> Post:
        return await self._load(db, post_id)

    async def delete(self, db: AsyncSession, post_id: Identifier, caller_id: Identifier) -> None:
        """
        Deletes a post together with its likes and comments.

        Raises:
            ForbiddenError: caller is not the post's author
        """
        post = await self._load(db, post_id)
        if str(post.user_id) != _canonical(caller_id):
            raise ForbiddenError(context={"post_id": str(post.id), "caller_id": str(caller_id)})

        with _store_errors("delete_post", post_id=str(post.id)):
            await db.delete(post)
            await db.flush()
        logger.info("Post %s deleted by its author", post.id)

    # ── Likes ─────────────────────────────────────────────────────────────

    async def add_like(
        self, db: AsyncSession, post_id: Identifier, user_id: Identifier
    ) -> List[Dict[str, Any]]:
        """
        Prepends a like by `user_id`; returns the new like list.

        Raises:
            AlreadyLikedError: the user already likes this post
        """
        post = await self._load(db, post_id)
        uid = _canonical(user_id)
        if any(like.get("user_id") == uid for like in post.likes or []):
            raise AlreadyLikedError(context={"post_id": str(post.id)})

        post.likes = [{"user_id": uid, "created_at": _utcnow_iso()}, *(post.likes or [])]
        await self._save(db, post, "add_like")
        return post.likes

    async def remove_like(
        self, db: AsyncSession, post_id: Identifier, user_id: Identifier
    ) -> List[Dict[str, Any]]:
        """
        Removes the user's like; returns the new like list.

        Raises:
            NotLikedError: the user has not liked this post
        """
        post = await self._load(db, post_id)
        uid = _canonical(user_id)
        likes = list(post.likes or [])
        index = next((i for i, like in enumerate(likes) if like.get("user_id") == uid), None)
        if index is None:
            raise NotLikedError(context={"post_id": str(post.id)})

        del likes[index]
        post.likes = likes
        await self._save(db, post, "remove_like")
        return post.likes

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(
        self, db: AsyncSession, post_id: Identifier, author: User, text: str
    ) -> List[Dict[str, Any]]:
        """Prepends a comment with the author's name/avatar snapshot."""
        post = await self._load(db, post_id)
        comment = {
            "id": str(uuid.uuid4()),
            "user_id": str(author.id),
            "name": author.name,
            "avatar": author.avatar,
            "text": text,
            "created_at": _utcnow_iso(),
        }
        post.comments = [comment, *(post.comments or [])]
        await self._save(db, post, "add_comment")
        return post.comments

    async def remove_comment(
        self,
        db: AsyncSession,
        post_id: Identifier,
        comment_id: Identifier,
        caller_id: Identifier,
    ) -> List[Dict[str, Any]]:
        """
        Removes exactly the comment `comment_id`.

        The comment's author and the post's author may remove it.

        Raises:
            CommentNotFoundError: no comment with that id on this post
            ForbiddenError:       caller wrote neither the comment nor the post
        """
        post = await self._load(db, post_id)
        cid = _canonical(comment_id)
        caller = _canonical(caller_id)

        comments = list(post.comments or [])
        index = next((i for i, c in enumerate(comments) if c.get("id") == cid), None)
        if index is None:
            raise CommentNotFoundError(comment_id=cid)

        if caller not in (comments[index].get("user_id"), str(post.user_id)):
            raise ForbiddenError(context={"post_id": str(post.id), "comment_id": cid})

        del comments[index]
        post.comments = comments
        await self._save(db, post, "remove_comment")
        return post.comments


# ── Singleton Instance ────────────────────────────────────────────────────
post_store = PostStore()
