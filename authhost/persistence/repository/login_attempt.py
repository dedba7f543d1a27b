"""PostgreSQL implementation of LoginAttempt repository."""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import case, delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authhost.domain.model import LoginAttemptWindow
from authhost.domain.repository import LoginAttemptRepository
from authhost.domain.value import Username
from authhost.persistence.mappers import row_to_login_attempt
from authhost.persistence.repository.errors import storage_errors
from authhost.persistence.tables import login_attempts_table


class PostgresLoginAttemptRepository(LoginAttemptRepository):
    """PostgreSQL implementation of LoginAttemptRepository.

    Counters are written in their own short transactions, not the request
    transaction: a failed login rolls the request back, and the attempt
    must still be counted.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: Factory for independent sessions
        """
        self.session_factory = session_factory

    async def get(self, username: Username) -> Optional[LoginAttemptWindow]:
        """Current counter for a username."""
        stmt = select(login_attempts_table).where(
            login_attempts_table.c.username == username.root
        )
        with storage_errors("get_login_attempts"):
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                row = result.mappings().first()
        return row_to_login_attempt(dict(row)) if row else None

    async def reserve_attempt(
        self, username: Username, now: datetime, window: timedelta
    ) -> int:
        """Count an attempt with one upsert statement.

        A closed window restarts at ``now`` with a count of one.
        """
        table = login_attempts_table
        window_open = table.c.window_started_at > now - window
        stmt = insert(table).values(
            username=username.root, attempts=1, window_started_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.username],
            set_={
                "attempts": case((window_open, table.c.attempts + 1), else_=1),
                "window_started_at": case(
                    (window_open, table.c.window_started_at), else_=now
                ),
            },
        ).returning(table.c.attempts)
        with storage_errors("reserve_login_attempt"):
            async with self.session_factory.begin() as session:
                result = await session.execute(stmt)
                return result.scalar_one()

    async def reset(self, username: Username) -> None:
        """Clear the counter."""
        stmt = delete(login_attempts_table).where(
            login_attempts_table.c.username == username.root
        )
        with storage_errors("reset_login_attempts"):
            async with self.session_factory.begin() as session:
                await session.execute(stmt)
