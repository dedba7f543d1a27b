"""Session repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from authhost.domain.model.session import Session
from authhost.domain.value import SessionId, UserId


class SessionRepository(ABC):
    """Storage for issued sessions."""

    @abstractmethod
    async def save(self, session: Session) -> Session:
        """Insert a newly issued session."""
        pass

    @abstractmethod
    async def find_by_id(self, session_id: SessionId) -> Optional[Session]:
        """Find a session by ID, revoked and expired ones included."""
        pass

    @abstractmethod
    async def extend(
        self, session_id: SessionId, expires_at: datetime, now: datetime
    ) -> Optional[Session]:
        """Move the expiry of a session still active at ``now``.

        A single conditional write: a session revoked or expired since it
        was read is left untouched. The expiry never moves backwards.

        Returns:
            The updated session, or None if it was no longer active
        """
        pass

    @abstractmethod
    async def revoke(self, session_id: SessionId, revoked_at: datetime) -> bool:
        """Mark a session revoked.

        Returns:
            True if an unrevoked session was revoked
        """
        pass

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UserId, revoked_at: datetime) -> int:
        """Mark every unrevoked session of a user revoked.

        Returns:
            Number of sessions revoked
        """
        pass

    @abstractmethod
    async def delete_reclaimable(self, now: datetime) -> int:
        """Delete sessions that are expired or revoked at ``now``.

        Returns:
            Number of sessions deleted
        """
        pass
