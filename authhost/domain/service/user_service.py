"""User domain service."""

from typing import Iterable
from uuid import uuid4

import logfire
from pydantic import ValidationError as PydanticValidationError

from authhost.config import AuthSettings, SeedUser
from authhost.domain.error import (
    IdentityAlreadyLinkedError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)
from authhost.domain.model import ExternalIdentity, User
from authhost.domain.repository import UserRepository
from authhost.domain.value import (
    ExternalIdentityClaim,
    ExternalIdentityId,
    RoleName,
    UserId,
    Username,
)
from authhost.util.clock import Clock
from authhost.util.password import digest_ha1, hash_password, verify_password

from .base import Service

MIN_PASSWORD_LENGTH = 8


class UserService(Service):
    """Domain service for user operations."""

    def __init__(
        self,
        user_repository: UserRepository,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
            auth_settings: Hashing parameters and Digest realm
            clock: Time source
        """
        self.user_repository = user_repository
        self.auth_settings = auth_settings
        self.clock = clock

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            return user

    def _credential_fields(self, username: Username, password: str) -> dict:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        return {
            "password_hash": hash_password(
                password, self.auth_settings.password_hash_iterations
            ),
            "digest_ha1_hash": digest_ha1(
                username.root, self.auth_settings.digest_realm, password
            ),
        }

    async def register(
        self,
        username: str,
        password: str,
        email: str | None = None,
        display_name: str | None = None,
    ) -> User:
        """Register a credential user.

        Args:
            username: Desired username, matched case-insensitively
            password: Plain text password
            email: Optional email
            display_name: Optional display name, defaults to the username

        Returns:
            The created user

        Raises:
            ValidationError: If the username or password is not acceptable
            DuplicateUsernameError: If the username is taken
        """
        try:
            name = Username(username)
        except PydanticValidationError as e:
            raise ValidationError(str(e.errors()[0]["msg"])) from e

        with logfire.span("user_service.register", username=name.root):
            now = self.clock.now()
            user = User(
                id=UserId(uuid4()),
                username=name,
                email=email,
                display_name=display_name or username.strip(),
                created_at=now,
                updated_at=now,
                **self._credential_fields(name, password),
            )
            await self.user_repository.create_user(user)
            logfire.info("User registered", user_id=str(user.id), username=name.root)
            return user

    def _identity_from_claim(
        self, user_id: UserId, claim: ExternalIdentityClaim
    ) -> ExternalIdentity:
        now = self.clock.now()
        tokens = claim.tokens
        return ExternalIdentity(
            id=ExternalIdentityId(uuid4()),
            user_id=user_id,
            provider=claim.provider,
            external_id=claim.external_id,
            access_token=tokens.access_token if tokens else None,
            refresh_token=tokens.refresh_token if tokens else None,
            token_expires_at=tokens.expires_at if tokens else None,
            claims=claim.claims.model_dump(mode="json", exclude_none=True),
            created_at=now,
            updated_at=now,
            last_login_at=now,
        )

    async def _relink(self, user: User, claim: ExternalIdentityClaim) -> User:
        await self.user_repository.link_external_identity(
            user.id, self._identity_from_claim(user.id, claim)
        )
        return user

    async def resolve_external_login(self, claim: ExternalIdentityClaim) -> User:
        """Find or create the user behind an external identity claim.

        A known identity gets fresh token metadata and ``last_login_at``.
        An unknown identity creates a new user and links it atomically. If
        another request links the same identity first, its user is used.

        Args:
            claim: Normalized claim from the provider

        Returns:
            The user the identity belongs to
        """
        with logfire.span(
            "user_service.resolve_external_login",
            provider=claim.provider.value,
            external_id=claim.external_id,
        ):
            user = await self.user_repository.find_by_external_identity(
                claim.provider, claim.external_id
            )
            if user:
                logfire.info(
                    "Returning external user",
                    user_id=str(user.id),
                    provider=claim.provider.value,
                )
                return await self._relink(user, claim)

            now = self.clock.now()
            profile = claim.claims
            user = User(
                id=UserId(uuid4()),
                email=profile.email,
                display_name=profile.display_name or profile.username,
                profile={
                    key: value
                    for key, value in (
                        ("avatar_url", profile.avatar_url),
                        ("provider_username", profile.username),
                    )
                    if value is not None
                },
                created_at=now,
                updated_at=now,
            )
            try:
                await self.user_repository.create_user_with_identity(
                    user, self._identity_from_claim(user.id, claim)
                )
            except IdentityAlreadyLinkedError:
                winner = await self.user_repository.find_by_external_identity(
                    claim.provider, claim.external_id
                )
                if winner is None:
                    raise
                logfire.info(
                    "Lost identity link race, using existing user",
                    user_id=str(winner.id),
                    provider=claim.provider.value,
                )
                return await self._relink(winner, claim)

            logfire.info(
                "User created from external identity",
                user_id=str(user.id),
                provider=claim.provider.value,
            )
            return user

    async def change_password(
        self,
        user_id: UserId,
        new_password: str,
        current_password: str | None = None,
    ) -> User:
        """Set a new password for a credential user.

        Args:
            user_id: User ID
            new_password: Plain text new password
            current_password: Must match the stored password when one is set

        Returns:
            The updated user

        Raises:
            NotFoundError: If user not found
            ValidationError: If the user has no username or the password is weak
            InvalidCredentialError: If current_password does not match
        """
        with logfire.span("user_service.change_password", user_id=str(user_id)):
            user = await self.get_by_id(user_id)
            if user.username is None:
                raise ValidationError("User has no username to sign in with")

            if user.password_hash is not None:
                if current_password is None or not verify_password(
                    current_password, user.password_hash
                ):
                    logfire.warn("Current password mismatch", user_id=str(user_id))
                    raise InvalidCredentialError("Current password is incorrect")

            updated = user.model_copy(
                update={
                    "updated_at": self.clock.now(),
                    **self._credential_fields(user.username, new_password),
                }
            )
            saved = await self.user_repository.update(updated)
            logfire.info("Password changed", user_id=str(user_id))
            return saved

    async def get_by_username(self, username: str) -> User:
        """Get credential user by username.

        Raises:
            NotFoundError: If no user has that username
        """
        with logfire.span("user_service.get_by_username", username=username):
            try:
                name = Username(username)
            except PydanticValidationError:
                raise NotFoundError("User", username)
            user = await self.user_repository.find_by_username(name)
            if not user:
                logfire.warn("User not found", username=name.root)
                raise NotFoundError("User", name.root)
            return user

    async def identities_of(self, user_id: UserId) -> list[ExternalIdentity]:
        return await self.user_repository.find_identities(user_id)

    async def roles_of(self, user_id: UserId) -> set[RoleName]:
        return await self.user_repository.roles_of(user_id)

    async def assign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Grant roles to an existing user.

        Raises:
            NotFoundError: If user not found
        """
        roles = list(roles)
        with logfire.span(
            "user_service.assign_roles",
            user_id=str(user_id),
            roles=[r.root for r in roles],
        ):
            await self.get_by_id(user_id)
            await self.user_repository.assign_roles(user_id, roles)
            logfire.info("Roles assigned", user_id=str(user_id), count=len(roles))

    async def unassign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Revoke roles from an existing user.

        Raises:
            NotFoundError: If user not found
        """
        roles = list(roles)
        with logfire.span(
            "user_service.unassign_roles",
            user_id=str(user_id),
            roles=[r.root for r in roles],
        ):
            await self.get_by_id(user_id)
            await self.user_repository.unassign_roles(user_id, roles)
            logfire.info("Roles unassigned", user_id=str(user_id), count=len(roles))

    async def delete(self, user_id: UserId) -> None:
        """Delete a user with identities and role memberships.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.delete", user_id=str(user_id)):
            await self.get_by_id(user_id)
            await self.user_repository.delete_user(user_id)
            logfire.info("User deleted", user_id=str(user_id))

    async def ensure_seed_users(self, seed_users: Iterable[SeedUser]) -> int:
        """Create configured users that do not exist yet.

        Existing users are left untouched, passwords included.

        Returns:
            Number of users created
        """
        created = 0
        with logfire.span("user_service.ensure_seed_users"):
            for seed in seed_users:
                existing = await self.user_repository.find_by_username(
                    Username(seed.username)
                )
                if existing:
                    continue
                user = await self.register(
                    seed.username, seed.password, seed.email, seed.display_name
                )
                if seed.roles:
                    await self.user_repository.assign_roles(
                        user.id, [RoleName(role) for role in seed.roles]
                    )
                created += 1
            if created:
                logfire.info("Seed users created", count=created)
            return created
