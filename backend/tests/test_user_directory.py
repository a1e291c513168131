"""
Postboard Backend — User Directory Unit Tests
===============================================

What:  Tests for registration, lookup and credential checks.
How:   Runs against the in-memory SQLite database from conftest, with a
       cheap argon2 configuration so hashing stays fast.

What we test:
    ✅ Passwords are stored as argon2 hashes, never in clear
    ✅ Email uniqueness (case-insensitive), including the insert race
    ✅ Unknown email and wrong password both fail login the same way
    ✅ Gravatar URL is a pure function of the email
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from argon2 import PasswordHasher
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from postboard.exceptions import DatabaseError, DuplicateEmailError, InvalidCredentialsError
from postboard.models.user import User
from postboard.services.user_directory import UserDirectory, gravatar_url, normalize_email


def _fast_directory() -> UserDirectory:
    return UserDirectory(hasher=PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


async def _user_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()


class TestRegistration:

    def setup_method(self):
        self.directory = _fast_directory()

    @pytest.mark.asyncio
    async def test_create_hashes_password(self, db_session):
        user = await self.directory.create(db_session, "Ann", "ann@example.com", "secret1")

        assert user.id is not None
        assert user.password != "secret1"
        assert user.password.startswith("$argon2")
        assert user.avatar == gravatar_url("ann@example.com")

    @pytest.mark.asyncio
    async def test_email_is_normalized(self, db_session):
        user = await self.directory.create(db_session, "Ann", "  Ann@Example.COM ", "secret1")
        assert user.email == "ann@example.com"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, db_session):
        await self.directory.create(db_session, "Ann", "ann@example.com", "secret1")

        with pytest.raises(DuplicateEmailError, match="User already exists"):
            await self.directory.create(db_session, "Other Ann", "ANN@example.com", "secret2")

        assert await _user_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_unique_index_catches_concurrent_registration(self, db_session):
        """Both registrations pass the lookup; the second insert hits the index."""
        await self.directory.create(db_session, "Ann", "ann@example.com", "secret1")

        with patch.object(self.directory, "find_by_email", AsyncMock(return_value=None)):
            with pytest.raises(DuplicateEmailError):
                await self.directory.create(db_session, "Ann Again", "ann@example.com", "secret1")

    @pytest.mark.asyncio
    async def test_lookup_failure_becomes_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError):
            await self.directory.create(mock_db_session, "Ann", "ann@example.com", "secret1")
        mock_db_session.add.assert_not_called()


class TestCredentials:

    def setup_method(self):
        self.directory = _fast_directory()

    @pytest.mark.asyncio
    async def test_verify_password(self, db_session):
        user = await self.directory.create(db_session, "Ann", "ann@example.com", "secret1")

        assert await self.directory.verify_password(user, "secret1") is True
        assert await self.directory.verify_password(user, "secret2") is False

    @pytest.mark.asyncio
    async def test_verify_password_with_corrupt_hash(self):
        user = User(name="Ann", email="ann@example.com", password="plaintext", avatar="")
        assert await self.directory.verify_password(user, "plaintext") is False

    @pytest.mark.asyncio
    async def test_authenticate_success(self, db_session):
        created = await self.directory.create(db_session, "Ann", "ann@example.com", "secret1")
        user = await self.directory.authenticate(db_session, "Ann@Example.com", "secret1")
        assert user.id == created.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password",
        [("ann@example.com", "wrong-password"), ("nobody@example.com", "secret1")],
    )
    async def test_authenticate_failure_is_uniform(self, db_session, email, password):
        await self.directory.create(db_session, "Ann", "ann@example.com", "secret1")

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await self.directory.authenticate(db_session, email, password)
        assert exc_info.value.message == "Invalid credentials"


class TestLookups:

    def setup_method(self):
        self.directory = _fast_directory()

    @pytest.mark.asyncio
    async def test_find_by_id(self, db_session):
        created = await self.directory.create(db_session, "Ann", "ann@example.com", "secret1")

        assert (await self.directory.find_by_id(db_session, str(created.id))).email == "ann@example.com"
        assert await self.directory.find_by_id(db_session, uuid4()) is None

    @pytest.mark.asyncio
    async def test_find_by_malformed_id(self, mock_db_session):
        assert await self.directory.find_by_id(mock_db_session, "not-a-uuid") is None
        mock_db_session.get.assert_not_awaited()


class TestGravatar:

    def test_deterministic_and_case_insensitive(self):
        assert gravatar_url("Ann@Example.com") == gravatar_url(" ann@example.com")

    def test_url_shape(self):
        url = gravatar_url("ann@example.com")
        assert url.startswith("https://www.gravatar.com/avatar/")
        assert url.endswith("?s=200&r=pg&d=mm")
        assert gravatar_url("bob@example.com") != url

    def test_normalize_email(self):
        assert normalize_email("  Bob@Example.ORG ") == "bob@example.org"
