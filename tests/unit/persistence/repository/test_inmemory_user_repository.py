"""Unit tests for InMemoryUserRepository."""

import asyncio
from uuid import uuid4

import pytest

from authhost.domain.error import DuplicateUsernameError, IdentityAlreadyLinkedError
from authhost.domain.model import ExternalIdentity, User
from authhost.domain.value import (
    ADMIN_ROLE,
    AuthProvider,
    ExternalIdentityId,
    UserId,
    Username,
)
from authhost.persistence.repository.inmemory import InMemoryUserRepository


def _user(username: str | None = None) -> User:
    return User(
        id=UserId(uuid4()),
        username=Username(username) if username else None,
    )


def _identity(user_id: UserId, external_id: str = "42", token: str = "t1") -> ExternalIdentity:
    return ExternalIdentity(
        id=ExternalIdentityId(uuid4()),
        user_id=user_id,
        provider=AuthProvider.GOOGLE,
        external_id=external_id,
        access_token=token,
    )


class TestUsers:
    """Tests for user storage."""

    @pytest.mark.asyncio
    async def test_duplicate_username(self):
        repo = InMemoryUserRepository()
        await repo.create_user(_user("alice"))

        with pytest.raises(DuplicateUsernameError):
            await repo.create_user(_user("Alice"))

    @pytest.mark.asyncio
    async def test_users_without_username_do_not_clash(self):
        repo = InMemoryUserRepository()

        await repo.create_user(_user())
        await repo.create_user(_user())

    @pytest.mark.asyncio
    async def test_roles_are_loaded_with_user(self):
        """Should return the user's roles from find_by_id and find_by_username."""
        # Arrange
        repo = InMemoryUserRepository()
        user = _user("alice")
        await repo.create_user(user)

        # Act
        await repo.assign_roles(user.id, [ADMIN_ROLE])

        # Assert
        assert (await repo.find_by_id(user.id)).roles == frozenset({ADMIN_ROLE})
        assert (await repo.find_by_username(Username("alice"))).roles == frozenset(
            {ADMIN_ROLE}
        )
        assert await repo.roles_of(user.id) == {ADMIN_ROLE}


class TestIdentities:
    """Tests for external identity links."""

    @pytest.mark.asyncio
    async def test_identity_belongs_to_one_user(self):
        # Arrange
        repo = InMemoryUserRepository()
        owner, other = _user(), _user()
        await repo.create_user(owner)
        await repo.create_user(other)
        await repo.link_external_identity(owner.id, _identity(owner.id))

        # Act & Assert
        with pytest.raises(IdentityAlreadyLinkedError):
            await repo.link_external_identity(other.id, _identity(other.id))
        assert (await repo.find_by_external_identity(AuthProvider.GOOGLE, "42")).id == owner.id

    @pytest.mark.asyncio
    async def test_relink_keeps_row_and_updates_tokens(self):
        repo = InMemoryUserRepository()
        user = _user()
        await repo.create_user(user)
        first = await repo.link_external_identity(user.id, _identity(user.id, token="t1"))

        second = await repo.link_external_identity(user.id, _identity(user.id, token="t2"))

        assert second.id == first.id
        assert second.access_token == "t2"
        assert len(await repo.find_identities(user.id)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_create_with_identity_links_once(self):
        """Should let exactly one of two racing creates link the identity."""
        # Arrange
        repo = InMemoryUserRepository()
        first, second = _user(), _user()

        # Act
        results = await asyncio.gather(
            repo.create_user_with_identity(first, _identity(first.id)),
            repo.create_user_with_identity(second, _identity(second.id)),
            return_exceptions=True,
        )

        # Assert
        errors = [r for r in results if isinstance(r, IdentityAlreadyLinkedError)]
        assert len(errors) == 1
        assert await repo.find_by_id(second.id) is None
        assert (await repo.find_by_external_identity(AuthProvider.GOOGLE, "42")).id == first.id

    @pytest.mark.asyncio
    async def test_delete_user_removes_identities_and_roles(self):
        repo = InMemoryUserRepository()
        user = _user()
        await repo.create_user_with_identity(user, _identity(user.id))
        await repo.assign_roles(user.id, [ADMIN_ROLE])

        await repo.delete_user(user.id)

        assert await repo.find_by_id(user.id) is None
        assert await repo.find_by_external_identity(AuthProvider.GOOGLE, "42") is None
        assert await repo.roles_of(user.id) == set()
