"""
Postboard Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table (the User Directory's storage).
How:   Portable column types so the same model runs on PostgreSQL (asyncpg)
       and SQLite (aiosqlite, tests).

Table notes:
    - email is stored lower-cased and carries a unique index; the directory
      still checks for an existing row before inserting
    - password holds an argon2 hash string (algorithm, parameters, salt, digest)
    - avatar is derived from the email once, at registration
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from postboard.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        Created by registration. No exposed operation updates or deletes it.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Never serialized into any response model
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    avatar: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("uq_users_email", "email", unique=True),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
