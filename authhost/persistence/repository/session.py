"""PostgreSQL implementation of Session repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from authhost.domain.model import Session
from authhost.domain.repository import SessionRepository
from authhost.domain.value import SessionId, UserId
from authhost.persistence.mappers import row_to_session, session_to_dict
from authhost.persistence.repository.errors import storage_errors
from authhost.persistence.tables import sessions_table


class PostgresSessionRepository(SessionRepository):
    """PostgreSQL implementation of SessionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def save(self, session: Session) -> Session:
        """Insert a newly issued session."""
        stmt = insert(sessions_table).values(**session_to_dict(session))
        with storage_errors("save_session"):
            await self.session.execute(stmt)
        return session

    async def find_by_id(self, session_id: SessionId) -> Optional[Session]:
        """Find a session by ID."""
        stmt = select(sessions_table).where(sessions_table.c.id == session_id)
        with storage_errors("find_session"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()
        return row_to_session(dict(row)) if row else None

    async def extend(
        self, session_id: SessionId, expires_at: datetime, now: datetime
    ) -> Optional[Session]:
        """Extend an active session; never touches ``revoked_at``."""
        stmt = (
            update(sessions_table)
            .where(sessions_table.c.id == session_id)
            .where(sessions_table.c.revoked_at.is_(None))
            .where(sessions_table.c.expires_at > now)
            .values(
                expires_at=func.greatest(sessions_table.c.expires_at, expires_at),
                last_seen_at=now,
            )
            .returning(*sessions_table.c)
        )
        with storage_errors("extend_session"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()
        return row_to_session(dict(row)) if row else None

    async def revoke(self, session_id: SessionId, revoked_at: datetime) -> bool:
        """Mark one session revoked."""
        stmt = (
            update(sessions_table)
            .where(sessions_table.c.id == session_id)
            .where(sessions_table.c.revoked_at.is_(None))
            .values(revoked_at=revoked_at)
        )
        with storage_errors("revoke_session"):
            result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: UserId, revoked_at: datetime) -> int:
        """Mark every unrevoked session of a user revoked."""
        stmt = (
            update(sessions_table)
            .where(sessions_table.c.user_id == user_id)
            .where(sessions_table.c.revoked_at.is_(None))
            .values(revoked_at=revoked_at)
        )
        with storage_errors("revoke_user_sessions"):
            result = await self.session.execute(stmt)
        return result.rowcount

    async def delete_reclaimable(self, now: datetime) -> int:
        """Delete expired or revoked sessions."""
        stmt = delete(sessions_table).where(
            or_(
                sessions_table.c.expires_at <= now,
                sessions_table.c.revoked_at.is_not(None),
            )
        )
        with storage_errors("reclaim_sessions"):
            result = await self.session.execute(stmt)
        return result.rowcount
