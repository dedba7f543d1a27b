"""PostgreSQL implementation of User repository."""

from typing import Iterable, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from authhost.domain.error import IdentityAlreadyLinkedError
from authhost.domain.model import ExternalIdentity, User
from authhost.domain.repository import UserRepository
from authhost.domain.value import AuthProvider, RoleName, UserId, Username
from authhost.persistence.mappers import (
    external_identity_to_dict,
    row_to_external_identity,
    row_to_user,
    user_to_dict,
)
from authhost.persistence.repository.errors import storage_errors
from authhost.persistence.tables import (
    UQ_EXTERNAL_IDENTITY,
    external_identities_table,
    user_roles_table,
    users_table,
)


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository.

    Writes that must be all-or-nothing run inside a SAVEPOINT so a unique
    violation leaves the request transaction usable.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _role_names(self, user_id: UserId) -> list[str]:
        stmt = select(user_roles_table.c.role).where(
            user_roles_table.c.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _first_user(self, stmt) -> Optional[User]:
        with storage_errors("find_user"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()
            if not row:
                return None
            return row_to_user(dict(row), await self._role_names(row["id"]))

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return await self._first_user(
            select(users_table).where(users_table.c.id == user_id)
        )

    async def find_by_username(self, username: Username) -> Optional[User]:
        """Find a credential user by normalized username."""
        return await self._first_user(
            select(users_table).where(users_table.c.username == username.root)
        )

    async def find_by_external_identity(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[User]:
        """Find the user linked to a provider identity."""
        stmt = (
            select(users_table)
            .select_from(
                users_table.join(
                    external_identities_table,
                    users_table.c.id == external_identities_table.c.user_id,
                )
            )
            .where(external_identities_table.c.provider == provider.value)
            .where(external_identities_table.c.external_id == external_id)
        )
        return await self._first_user(stmt)

    async def create_user(self, user: User) -> UserId:
        """Insert a user and its roles."""
        with storage_errors("create_user"):
            async with self.session.begin_nested():
                await self.session.execute(
                    users_table.insert().values(**user_to_dict(user))
                )
                await self._insert_roles(user.id, user.roles)
        return user.id

    async def create_user_with_identity(
        self, user: User, identity: ExternalIdentity
    ) -> UserId:
        """Insert a user and its first identity in one SAVEPOINT."""
        with storage_errors("create_user_with_identity"):
            async with self.session.begin_nested():
                await self.session.execute(
                    users_table.insert().values(**user_to_dict(user))
                )
                await self.session.execute(
                    external_identities_table.insert().values(
                        **external_identity_to_dict(identity)
                    )
                )
                await self._insert_roles(user.id, user.roles)
        return user.id

    async def link_external_identity(
        self, user_id: UserId, identity: ExternalIdentity
    ) -> ExternalIdentity:
        """Insert or refresh an identity link in a single statement.

        The conflict update only applies when the existing row belongs to
        the same user; no returned row means another user owns the pair.
        """
        values = external_identity_to_dict(identity)
        values["user_id"] = user_id
        stmt = insert(external_identities_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            constraint=UQ_EXTERNAL_IDENTITY,
            set_={
                "access_token": stmt.excluded.access_token,
                "refresh_token": stmt.excluded.refresh_token,
                "token_expires_at": stmt.excluded.token_expires_at,
                "claims": stmt.excluded.claims,
                "updated_at": stmt.excluded.updated_at,
                "last_login_at": stmt.excluded.last_login_at,
            },
            where=external_identities_table.c.user_id == stmt.excluded.user_id,
        ).returning(external_identities_table)

        with storage_errors("link_external_identity"):
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
                row = result.mappings().first()

        if row is None:
            raise IdentityAlreadyLinkedError()
        return row_to_external_identity(dict(row))

    async def find_identities(self, user_id: UserId) -> list[ExternalIdentity]:
        """Get all identities linked to a user, oldest first."""
        stmt = (
            select(external_identities_table)
            .where(external_identities_table.c.user_id == user_id)
            .order_by(external_identities_table.c.created_at)
        )
        with storage_errors("find_identities"):
            result = await self.session.execute(stmt)
            return [row_to_external_identity(dict(row)) for row in result.mappings()]

    async def roles_of(self, user_id: UserId) -> set[RoleName]:
        """Get the role names held by a user."""
        with storage_errors("roles_of"):
            return {RoleName(role) for role in await self._role_names(user_id)}

    async def _insert_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        rows = [{"user_id": user_id, "role": role.root} for role in roles]
        if not rows:
            return
        stmt = insert(user_roles_table).values(rows).on_conflict_do_nothing()
        await self.session.execute(stmt)

    async def assign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Grant roles, ignoring those already held."""
        with storage_errors("assign_roles"):
            await self._insert_roles(user_id, roles)

    async def unassign_roles(self, user_id: UserId, roles: Iterable[RoleName]) -> None:
        """Revoke roles, ignoring those not held."""
        names = [role.root for role in roles]
        if not names:
            return
        stmt = delete(user_roles_table).where(
            user_roles_table.c.user_id == user_id,
            user_roles_table.c.role.in_(names),
        )
        with storage_errors("unassign_roles"):
            await self.session.execute(stmt)

    async def update(self, user: User) -> User:
        """Update profile and credential columns of a user."""
        values = user_to_dict(user)
        values.pop("id")
        values.pop("created_at")
        stmt = update(users_table).where(users_table.c.id == user.id).values(**values)
        with storage_errors("update_user"):
            async with self.session.begin_nested():
                await self.session.execute(stmt)
        return user

    async def delete_user(self, user_id: UserId) -> None:
        """Delete a user; identities, roles and sessions cascade."""
        with storage_errors("delete_user"):
            await self.session.execute(
                delete(users_table).where(users_table.c.id == user_id)
            )
