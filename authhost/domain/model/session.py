"""Authenticated session entity."""

from datetime import datetime, timedelta
from typing import Optional

from authhost.domain.model.common import DomainModel
from authhost.domain.value import AuthProvider, SessionId, SessionStatus, UserId


class Session(DomainModel):
    """Time-bounded proof of a prior authentication.

    Expiry is not stored as a state: ``status_at`` derives it from
    ``expires_at`` so it is evaluated lazily on every validation.
    """

    id: SessionId
    user_id: UserId
    provider: AuthProvider
    created_at: datetime
    expires_at: datetime
    last_seen_at: datetime
    ttl_seconds: int  # Lifetime granted at issue, reused on rolling refresh
    rolling: bool = False
    revoked_at: Optional[datetime] = None

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)

    def status_at(self, now: datetime) -> SessionStatus:
        """Lifecycle state of this session at ``now``."""
        if self.revoked_at is not None:
            return SessionStatus.REVOKED
        if now >= self.expires_at:
            return SessionStatus.EXPIRED
        return SessionStatus.ACTIVE
