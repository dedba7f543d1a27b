"""Unit tests for UserService."""

import asyncio
from uuid import uuid4

import pytest

from authhost.config import SeedUser
from authhost.domain.error import (
    DuplicateUsernameError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)
from authhost.domain.model import User
from authhost.domain.service import UserService
from authhost.domain.value import (
    ADMIN_ROLE,
    AuthProvider,
    ExternalIdentityClaim,
    ProfileClaims,
    ProviderTokens,
    RoleName,
    UserId,
    Username,
)
from authhost.persistence.repository.inmemory import InMemoryUserRepository
from authhost.util.clock import FrozenClock
from authhost.util.password import digest_ha1, verify_password
from tests.conftest import T0, make_auth_settings


def _service() -> tuple[UserService, InMemoryUserRepository]:
    repo = InMemoryUserRepository()
    return UserService(repo, make_auth_settings(), FrozenClock(T0)), repo


def _claim(external_id: str = "42", token: str = "tok-1") -> ExternalIdentityClaim:
    return ExternalIdentityClaim(
        provider=AuthProvider.GITHUB,
        external_id=external_id,
        claims=ProfileClaims(
            username="octocat",
            email="octocat@example.com",
            avatar_url="https://example.com/octocat.png",
        ),
        tokens=ProviderTokens(access_token=token),
    )


class TestRegister:
    """Tests for UserService.register()."""

    @pytest.mark.asyncio
    async def test_register_stores_both_hashes(self):
        """Should store a password hash and the Digest HA1."""
        # Arrange
        service, repo = _service()

        # Act
        user = await service.register("Alice", "correct horse", email="a@example.com")

        # Assert
        stored = await repo.find_by_username(Username("alice"))
        assert stored is not None
        assert stored.id == user.id
        assert stored.display_name == "Alice"
        assert stored.password_hash != "correct horse"
        assert verify_password("correct horse", stored.password_hash)
        assert stored.digest_ha1_hash == digest_ha1("alice", "authhost", "correct horse")
        assert stored.created_at == T0

    @pytest.mark.asyncio
    async def test_username_taken_case_insensitively(self):
        """Should reject a username differing only by case."""
        # Arrange
        service, _ = _service()
        await service.register("alice", "correct horse")

        # Act & Assert
        with pytest.raises(DuplicateUsernameError):
            await service.register("ALICE", "another password")

    @pytest.mark.asyncio
    async def test_short_password_rejected(self):
        service, repo = _service()

        with pytest.raises(ValidationError):
            await service.register("alice", "short")

        assert await repo.find_by_username(Username("alice")) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", ["", "   ", "has space", "-leading", "a" * 256])
    async def test_invalid_username_rejected(self, username):
        service, _ = _service()

        with pytest.raises(ValidationError):
            await service.register(username, "correct horse")


class TestResolveExternalLogin:
    """Tests for UserService.resolve_external_login()."""

    @pytest.mark.asyncio
    async def test_new_identity_creates_user(self):
        """Should create a user without username and link the identity."""
        # Arrange
        service, repo = _service()

        # Act
        user = await service.resolve_external_login(_claim())

        # Assert
        assert user.username is None
        assert user.email == "octocat@example.com"
        assert user.display_name == "octocat"
        assert user.profile["avatar_url"] == "https://example.com/octocat.png"
        identities = await repo.find_identities(user.id)
        assert len(identities) == 1
        assert identities[0].provider is AuthProvider.GITHUB
        assert identities[0].external_id == "42"
        assert identities[0].access_token == "tok-1"
        assert identities[0].last_login_at == T0

    @pytest.mark.asyncio
    async def test_known_identity_returns_same_user_and_refreshes_tokens(self):
        """Should return the linked user and store the new token."""
        # Arrange
        service, repo = _service()
        first = await service.resolve_external_login(_claim(token="tok-1"))

        # Act
        second = await service.resolve_external_login(_claim(token="tok-2"))

        # Assert
        assert second.id == first.id
        identities = await repo.find_identities(first.id)
        assert len(identities) == 1
        assert identities[0].access_token == "tok-2"

    @pytest.mark.asyncio
    async def test_same_external_id_on_other_provider_is_another_user(self):
        service, _ = _service()
        github_user = await service.resolve_external_login(_claim())
        google_claim = _claim().model_copy(update={"provider": AuthProvider.GOOGLE})

        google_user = await service.resolve_external_login(google_claim)

        assert google_user.id != github_user.id

    @pytest.mark.asyncio
    async def test_concurrent_first_logins_resolve_to_one_user(self):
        """Should link the identity once when two callbacks race."""
        # Arrange
        service, repo = _service()

        # Act
        users = await asyncio.gather(
            *(service.resolve_external_login(_claim()) for _ in range(5))
        )

        # Assert
        assert len({u.id for u in users}) == 1
        owner = await repo.find_by_external_identity(AuthProvider.GITHUB, "42")
        assert owner is not None
        assert owner.id == users[0].id

    @pytest.mark.asyncio
    async def test_lost_race_uses_existing_user(self, monkeypatch):
        """Should fall back to the winner when create-and-link conflicts."""
        # Arrange
        service, repo = _service()
        winner = await service.resolve_external_login(_claim())
        calls = []
        original = repo.find_by_external_identity

        async def miss_first_lookup(provider, external_id):
            calls.append(external_id)
            if len(calls) == 1:
                return None
            return await original(provider, external_id)

        monkeypatch.setattr(repo, "find_by_external_identity", miss_first_lookup)

        # Act
        user = await service.resolve_external_login(_claim(token="tok-2"))

        # Assert
        assert user.id == winner.id
        assert len(calls) == 2


class TestChangePassword:
    """Tests for UserService.change_password()."""

    @pytest.mark.asyncio
    async def test_change_password_replaces_both_hashes(self):
        # Arrange
        service, repo = _service()
        user = await service.register("alice", "correct horse")

        # Act
        await service.change_password(user.id, "battery staple", "correct horse")

        # Assert
        stored = await repo.find_by_id(user.id)
        assert verify_password("battery staple", stored.password_hash)
        assert not verify_password("correct horse", stored.password_hash)
        assert stored.digest_ha1_hash == digest_ha1("alice", "authhost", "battery staple")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("current", [None, "wrong password"])
    async def test_current_password_must_match(self, current):
        service, _ = _service()
        user = await service.register("alice", "correct horse")

        with pytest.raises(InvalidCredentialError):
            await service.change_password(user.id, "battery staple", current)

    @pytest.mark.asyncio
    async def test_external_user_cannot_set_password(self):
        service, _ = _service()
        user = await service.resolve_external_login(_claim())

        with pytest.raises(ValidationError):
            await service.change_password(user.id, "battery staple")

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        service, _ = _service()

        with pytest.raises(NotFoundError):
            await service.change_password(UserId(uuid4()), "battery staple")


class TestRoles:
    """Tests for role assignment."""

    @pytest.mark.asyncio
    async def test_assign_and_unassign(self):
        """Should grant and revoke roles, ignoring duplicates."""
        # Arrange
        service, _ = _service()
        user = await service.register("alice", "correct horse")
        editor = RoleName("Editor")

        # Act
        await service.assign_roles(user.id, [ADMIN_ROLE, editor])
        await service.assign_roles(user.id, [ADMIN_ROLE])

        # Assert
        assert await service.roles_of(user.id) == {ADMIN_ROLE, editor}
        assert (await service.get_by_id(user.id)).has_role(ADMIN_ROLE)

        await service.unassign_roles(user.id, [ADMIN_ROLE, RoleName("Never")])
        assert await service.roles_of(user.id) == {editor}

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        service, _ = _service()

        with pytest.raises(NotFoundError):
            await service.assign_roles(UserId(uuid4()), [ADMIN_ROLE])
        with pytest.raises(NotFoundError):
            await service.unassign_roles(UserId(uuid4()), [ADMIN_ROLE])

    @pytest.mark.asyncio
    async def test_get_by_username(self):
        service, _ = _service()
        user = await service.register("alice", "correct horse")

        assert (await service.get_by_username(" ALICE ")).id == user.id
        with pytest.raises(NotFoundError):
            await service.get_by_username("bob")
        with pytest.raises(NotFoundError):
            await service.get_by_username("not a username")


class TestDelete:
    """Tests for UserService.delete()."""

    @pytest.mark.asyncio
    async def test_delete_removes_user_and_identities(self):
        # Arrange
        service, repo = _service()
        user = await service.resolve_external_login(_claim())

        # Act
        await service.delete(user.id)

        # Assert
        assert await repo.find_by_id(user.id) is None
        assert await repo.find_by_external_identity(AuthProvider.GITHUB, "42") is None
        with pytest.raises(NotFoundError):
            await service.delete(user.id)


class TestEnsureSeedUsers:
    """Tests for UserService.ensure_seed_users()."""

    @pytest.mark.asyncio
    async def test_creates_missing_users_once(self):
        """Should create seed users with roles and leave existing ones alone."""
        # Arrange
        service, repo = _service()
        seeds = [
            SeedUser(username="admin", password="admin-password", roles=["Admin"]),
            SeedUser(username="user", password="user-password"),
        ]

        # Act
        first = await service.ensure_seed_users(seeds)
        second = await service.ensure_seed_users(
            [SeedUser(username="admin", password="other-password")]
        )

        # Assert
        assert first == 2
        assert second == 0
        admin = await repo.find_by_username(Username("admin"))
        assert admin.has_role(ADMIN_ROLE)
        assert verify_password("admin-password", admin.password_hash)

    @pytest.mark.asyncio
    async def test_seed_username_clash_with_existing_user(self):
        service, repo = _service()
        await repo.create_user(User(id=UserId(uuid4()), username=Username("admin")))

        assert await service.ensure_seed_users([SeedUser(username="Admin", password="x" * 8)]) == 0
