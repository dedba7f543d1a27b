"""In-memory user repository for testing."""

from typing import Iterable, Optional

from authhost.domain.error import DuplicateUsernameError, IdentityAlreadyLinkedError
from authhost.domain.model import ExternalIdentity, User
from authhost.domain.repository.user import UserRepository
from authhost.domain.value import AuthProvider, RoleName, UserId, Username


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing.

    Users, identity links and roles share one object so create-and-link is
    atomic. No method awaits between checking and mutating state.
    """

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}
        self._identities: dict[tuple[AuthProvider, str], ExternalIdentity] = {}
        self._roles: dict[UserId, set[RoleName]] = {}

    def _with_roles(self, user: User | None) -> Optional[User]:
        if user is None:
            return None
        return user.model_copy(
            update={"roles": frozenset(self._roles.get(user.id, set()))}
        )

    def _check_username_free(self, user: User) -> None:
        if user.username is None:
            return
        for other in self._users.values():
            if other.id != user.id and other.username == user.username:
                raise DuplicateUsernameError()

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self._with_roles(self._users.get(user_id))

    async def find_by_username(self, username: Username) -> Optional[User]:
        """Find a user by username."""
        for user in self._users.values():
            if user.username == username:
                return self._with_roles(user)
        return None

    async def find_by_external_identity(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[User]:
        """Find the user linked to a provider identity."""
        identity = self._identities.get((provider, external_id))
        if identity is None:
            return None
        return self._with_roles(self._users.get(identity.user_id))

    async def create_user(self, user: User) -> UserId:
        """Store a new user."""
        self._check_username_free(user)
        self._users[user.id] = user.model_copy(update={"roles": frozenset()})
        self._roles[user.id] = set(user.roles)
        return user.id

    async def create_user_with_identity(
        self, user: User, identity: ExternalIdentity
    ) -> UserId:
        """Store a new user and its first identity, or neither."""
        self._check_username_free(user)
        if (identity.provider, identity.external_id) in self._identities:
            raise IdentityAlreadyLinkedError()
        self._users[user.id] = user.model_copy(update={"roles": frozenset()})
        self._roles[user.id] = set(user.roles)
        self._identities[(identity.provider, identity.external_id)] = (
            identity.model_copy(update={"user_id": user.id})
        )
        return user.id

    async def link_external_identity(
        self, user_id: UserId, identity: ExternalIdentity
    ) -> ExternalIdentity:
        """Link an identity, refreshing token metadata on re-link."""
        key = (identity.provider, identity.external_id)
        existing = self._identities.get(key)
        if existing is not None and existing.user_id != user_id:
            raise IdentityAlreadyLinkedError()

        if existing is None:
            stored = identity.model_copy(update={"user_id": user_id})
        else:
            stored = existing.model_copy(
                update={
                    "access_token": identity.access_token,
                    "refresh_token": identity.refresh_token,
                    "token_expires_at": identity.token_expires_at,
                    "claims": identity.claims,
                    "updated_at": identity.updated_at,
                    "last_login_at": identity.last_login_at,
                }
            )
        self._identities[key] = stored
        return stored

    async def find_identities(self, user_id: UserId) -> list[ExternalIdentity]:
        """Get all identities linked to a user, oldest first."""
        identities = [i for i in self._identities.values() if i.user_id == user_id]
        return sorted(identities, key=lambda i: i.created_at)

    async def roles_of(self, user_id: UserId) -> set[RoleName]:
        """Get the role names held by a user."""
        return set(self._roles.get(user_id, set()))

    async def assign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Grant roles to a user."""
        if user_id in self._users:
            self._roles.setdefault(user_id, set()).update(roles)

    async def unassign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Revoke roles from a user."""
        self._roles.get(user_id, set()).difference_update(roles)

    async def update(self, user: User) -> User:
        """Replace a stored user, roles excluded."""
        self._check_username_free(user)
        self._users[user.id] = user.model_copy(update={"roles": frozenset()})
        return self._with_roles(self._users[user.id])

    async def delete_user(self, user_id: UserId) -> None:
        """Delete a user with identities and roles."""
        self._users.pop(user_id, None)
        self._roles.pop(user_id, None)
        for key in [k for k, i in self._identities.items() if i.user_id == user_id]:
            del self._identities[key]
