"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from authhost.domain.model.external_identity import ExternalIdentity
from authhost.domain.model.user import User
from authhost.domain.value import AuthProvider, RoleName, UserId, Username


class UserRepository(ABC):
    """Repository for the User aggregate, its external identities and roles.

    Single source of truth for "does this identity exist, and what roles
    does it have". Uniqueness of usernames and of ``(provider,
    external_id)`` pairs is enforced by the storage layer.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_username(self, username: Username) -> Optional[User]:
        """Find a credential user by username.

        Args:
            username: Normalized username

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_external_identity(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[User]:
        """Find the user linked to an external provider identity.

        Args:
            provider: The identity provider
            external_id: The user's ID on that provider

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_user(self, user: User) -> UserId:
        """Create a user.

        Args:
            user: The user to create

        Returns:
            The new user's ID

        Raises:
            DuplicateUsernameError: If the username is taken
        """
        pass

    @abstractmethod
    async def create_user_with_identity(
        self, user: User, identity: ExternalIdentity
    ) -> UserId:
        """Create a user and link an external identity atomically.

        Either both become visible or neither does.

        Args:
            user: The user to create
            identity: Identity to link, ``user_id`` must equal ``user.id``

        Returns:
            The new user's ID

        Raises:
            DuplicateUsernameError: If the username is taken
            IdentityAlreadyLinkedError: If the identity is already linked
        """
        pass

    @abstractmethod
    async def link_external_identity(
        self, user_id: UserId, identity: ExternalIdentity
    ) -> ExternalIdentity:
        """Link an external identity to an existing user.

        Linking a pair already linked to the same user updates its token
        metadata and claims.

        Args:
            user_id: Owner of the identity
            identity: Identity to link

        Returns:
            The stored identity

        Raises:
            IdentityAlreadyLinkedError: If the pair belongs to another user
        """
        pass

    @abstractmethod
    async def find_identities(self, user_id: UserId) -> list[ExternalIdentity]:
        """Get all identities linked to a user, oldest first."""
        pass

    @abstractmethod
    async def roles_of(self, user_id: UserId) -> set[RoleName]:
        """Get the role names held by a user."""
        pass

    @abstractmethod
    async def assign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Grant roles to a user. Already held roles are ignored."""
        pass

    @abstractmethod
    async def unassign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Revoke roles from a user. Roles not held are ignored."""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update a user's profile or credentials.

        Raises:
            DuplicateUsernameError: If a changed username is taken
        """
        pass

    @abstractmethod
    async def delete_user(self, user_id: UserId) -> None:
        """Delete a user together with identities and role memberships."""
        pass
