"""
Postboard Backend — User Directory
====================================

What:  Stores credentials and profile data; looks users up by id or email.
How:   Stateless repository over the `users` table. Every method receives the
       request's AsyncSession; the session dependency owns commit/rollback.
Who:   Registration, login and the GET /api/auth route; the post routes use
       it to fetch the author snapshot.

Passwords are hashed with argon2 (random salt per hash, encoded in the hash
string). Hashing runs in a worker thread so the event loop keeps serving
other requests.

Email uniqueness: `create` checks `find_by_email` before inserting. Two
concurrent registrations can both pass that check; the unique index on
`users.email` then rejects the second insert, which is reported as
DuplicateEmailError like the normal case.
"""

import asyncio
import hashlib
import logging
import uuid
from typing import Optional, Union
from urllib.parse import urlencode

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.exceptions import DatabaseError, DuplicateEmailError, InvalidCredentialsError
from postboard.models.user import User

logger = logging.getLogger(__name__)

GRAVATAR_BASE = "https://www.gravatar.com/avatar/"
GRAVATAR_OPTIONS = {"s": "200", "r": "pg", "d": "mm"}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def gravatar_url(email: str) -> str:
    """Avatar URL derived from the email: same email, same avatar."""
    digest = hashlib.md5(normalize_email(email).encode("utf-8")).hexdigest()
    return f"{GRAVATAR_BASE}{digest}?{urlencode(GRAVATAR_OPTIONS)}"


class UserDirectory:
    """Repository for User documents."""

    def __init__(self, hasher: Optional[PasswordHasher] = None):
        self._hasher = hasher or PasswordHasher()

    # ── Lookups ───────────────────────────────────────────────────────────

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == normalize_email(email)))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(context={"operation": "find_by_email"}) from e

    async def find_by_id(self, db: AsyncSession, user_id: Union[str, uuid.UUID]) -> Optional[User]:
        """Returns None for unknown and for malformed ids alike."""
        try:
            key = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            return None

        try:
            return await db.get(User, key)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", key, str(e))
            raise DatabaseError(context={"operation": "find_by_id", "user_id": str(key)}) from e

    # ── Registration ──────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, name: str, email: str, raw_password: str) -> User:
        """
        Registers a new user.

        Raises:
            DuplicateEmailError: a user with this email already exists
            DatabaseError:       the insert failed for any other reason
        """
        email = normalize_email(email)
        if await self.find_by_email(db, email) is not None:
            raise DuplicateEmailError()

        password_hash = await asyncio.to_thread(self._hasher.hash, raw_password)
        user = User(
            name=name,
            email=email,
            avatar=gravatar_url(email),
            password=password_hash,
        )
        db.add(user)

        try:
            await db.flush()
        except IntegrityError as e:
            # Lost the race against a concurrent registration
            logger.warning("Unique index rejected duplicate registration")
            raise DuplicateEmailError() from e
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "create_user"}) from e

        logger.info("User registered: %s", user.id)
        return user

    # ── Credentials ───────────────────────────────────────────────────────

    async def verify_password(self, user: User, raw_password: str) -> bool:
        try:
            return await asyncio.to_thread(self._hasher.verify, user.password, raw_password)
        except VerificationError:
            return False
        except InvalidHashError:
            logger.error("Stored password hash for user %s is not a valid argon2 hash", user.id)
            return False

    async def authenticate(self, db: AsyncSession, email: str, raw_password: str) -> User:
        """
        Looks up the user and checks the password.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        user = await self.find_by_email(db, email)
        if user is None or not await self.verify_password(user, raw_password):
            raise InvalidCredentialsError()
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
user_directory = UserDirectory()
