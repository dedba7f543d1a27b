"""In-memory session repository.

Used by tests and as the ``memory`` session store for single-process
deployments.
"""

from datetime import datetime
from typing import Optional

from authhost.domain.model import Session
from authhost.domain.repository.session import SessionRepository
from authhost.domain.value import SessionId, SessionStatus, UserId


class InMemorySessionRepository(SessionRepository):
    """In-memory implementation of SessionRepository."""

    def __init__(self) -> None:
        self._sessions: dict[SessionId, Session] = {}

    async def save(self, session: Session) -> Session:
        """Insert a newly issued session."""
        self._sessions[session.id] = session
        return session

    async def find_by_id(self, session_id: SessionId) -> Optional[Session]:
        """Find a session by ID."""
        return self._sessions.get(session_id)

    async def extend(
        self, session_id: SessionId, expires_at: datetime, now: datetime
    ) -> Optional[Session]:
        """Extend an active session; no await between check and write."""
        session = self._sessions.get(session_id)
        if session is None or session.status_at(now) is not SessionStatus.ACTIVE:
            return None
        extended = session.model_copy(
            update={
                "expires_at": max(expires_at, session.expires_at),
                "last_seen_at": now,
            }
        )
        self._sessions[session_id] = extended
        return extended

    async def revoke(self, session_id: SessionId, revoked_at: datetime) -> bool:
        """Mark one session revoked."""
        session = self._sessions.get(session_id)
        if session is None or session.revoked_at is not None:
            return False
        self._sessions[session_id] = session.model_copy(
            update={"revoked_at": revoked_at}
        )
        return True

    async def revoke_all_for_user(self, user_id: UserId, revoked_at: datetime) -> int:
        """Mark every unrevoked session of a user revoked."""
        count = 0
        for session_id, session in list(self._sessions.items()):
            if session.user_id == user_id and session.revoked_at is None:
                self._sessions[session_id] = session.model_copy(
                    update={"revoked_at": revoked_at}
                )
                count += 1
        return count

    async def delete_reclaimable(self, now: datetime) -> int:
        """Delete expired or revoked sessions."""
        reclaimable = [
            session_id
            for session_id, session in self._sessions.items()
            if session.status_at(now) is not SessionStatus.ACTIVE
        ]
        for session_id in reclaimable:
            del self._sessions[session_id]
        return len(reclaimable)
