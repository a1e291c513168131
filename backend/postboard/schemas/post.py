"""
Postboard Backend — Post Schemas
==================================

What:  Request bodies for posts/comments and the response shapes for posts
       and their embedded likes and comments.
How:   Response models read straight from the ORM row (`from_attributes`);
       embedded JSON entries are parsed back into UUIDs and datetimes.
"""

import uuid
from datetime import datetime
from typing import Annotated, ClassVar, List

from pydantic import BaseModel, Field, StringConstraints

from postboard.schemas.common import FieldMessages, messages_for

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=5000)]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreateRequest(BaseModel):
    """POST /api/posts"""
    text: Text

    field_messages: ClassVar[FieldMessages] = messages_for("text", "Text is required")


class CommentCreateRequest(BaseModel):
    """POST /api/posts/comment/{post_id}"""
    text: Text

    field_messages: ClassVar[FieldMessages] = messages_for("text", "Text is required")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class LikeResponse(BaseModel):
    user_id: uuid.UUID
    created_at: datetime


class CommentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    avatar: str
    text: str
    created_at: datetime


class PostResponse(BaseModel):
    """
    A post as clients see it.

    `name` and `avatar` are the author's values at the time of posting.
    `likes` and `comments` are newest-first.
    """
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    avatar: str
    text: str
    created_at: datetime
    likes: List[LikeResponse] = Field(default_factory=list)
    comments: List[CommentResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}
