"""
Postboard Backend — Post SQLAlchemy Model
===========================================

What:  ORM model for the `posts` table (the Post Store's storage).
How:   One row is one post document. Likes and comments are embedded JSON
       sub-lists (JSONB on PostgreSQL) owned by the post and deleted with it.

Embedded shapes (timestamps are ISO-8601 strings):
    like:    {"user_id": "<uuid>", "created_at": "..."}
    comment: {"id": "<uuid>", "user_id": "<uuid>", "name": "...",
              "avatar": "...", "text": "...", "created_at": "..."}

Both lists are kept newest-first. Updates replace the whole list, never
mutate it in place, so SQLAlchemy always sees the change.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from postboard.database import Base

DocumentList = JSON().with_variant(JSONB(), "postgresql")


class Post(Base):
    """
    A post with its likes and comments.

    Author name/avatar are a snapshot taken at creation time, not a join.
    `user_id` is a weak reference: deleting users is not supported, and no
    foreign key cascades exist.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    avatar: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    text: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    likes: Mapped[List[Dict[str, Any]]] = mapped_column(
        DocumentList, nullable=False, default=list
    )

    comments: Mapped[List[Dict[str, Any]]] = mapped_column(
        DocumentList, nullable=False, default=list
    )

    # B-tree on created_at serves the newest-first feed scan
    __table_args__ = (
        Index("idx_posts_created_at", "created_at"),
        Index("idx_posts_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, user_id={self.user_id}, "
            f"likes={len(self.likes or [])}, comments={len(self.comments or [])})>"
        )
