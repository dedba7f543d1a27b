"""Session domain service."""

import secrets
from datetime import timedelta

import logfire

from authhost.config import AuthSettings
from authhost.domain.error import (
    NotFoundError,
    SessionExpiredError,
    SessionNotFoundError,
)
from authhost.domain.model.session import Session
from authhost.domain.repository import SessionRepository, UserRepository
from authhost.domain.value import (
    AuthProvider,
    SessionId,
    SessionOptions,
    SessionStatus,
    UserId,
)
from authhost.util.clock import Clock

from .base import Service

# 32 random bytes, 256 bits of entropy
SESSION_TOKEN_BYTES = 32


class SessionService(Service):
    """Issues, validates, refreshes and revokes sessions.

    Expiry is evaluated lazily against the clock on every call; expired
    records stay in storage until the reclaimer deletes them.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        user_repository: UserRepository,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> None:
        """Initialize session service.

        Args:
            session_repository: Session storage
            user_repository: User repository, checked at issue time
            auth_settings: Default ttl and rolling policy
            clock: Time source
        """
        self.session_repository = session_repository
        self.user_repository = user_repository
        self.auth_settings = auth_settings
        self.clock = clock

    def default_options(
        self, ttl: timedelta | None = None, rolling: bool | None = None
    ) -> SessionOptions:
        """Session options from configuration.

        A requested ttl is only honored when it is shorter than the default,
        and rolling is only honored when rolling sessions are enabled.
        """
        default_ttl = timedelta(seconds=self.auth_settings.default_session_ttl_seconds)
        if ttl is None or ttl > default_ttl:
            ttl = default_ttl
        if rolling is None:
            rolling = self.auth_settings.rolling_sessions_enabled
        return SessionOptions(
            ttl=ttl, rolling=rolling and self.auth_settings.rolling_sessions_enabled
        )

    async def issue(
        self, user_id: UserId, options: SessionOptions, provider: AuthProvider
    ) -> Session:
        """Issue a new session for a user.

        Args:
            user_id: Authenticated user
            options: Lifetime and rolling flag
            provider: Provider the user authenticated with

        Returns:
            The stored session

        Raises:
            NotFoundError: If the user does not exist
        """
        with logfire.span(
            "session_service.issue", user_id=str(user_id), provider=provider.value
        ):
            if await self.user_repository.find_by_id(user_id) is None:
                logfire.warn("Cannot issue session for unknown user", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))

            now = self.clock.now()
            session = Session(
                id=SessionId(secrets.token_urlsafe(SESSION_TOKEN_BYTES)),
                user_id=user_id,
                provider=provider,
                created_at=now,
                expires_at=now + options.ttl,
                last_seen_at=now,
                ttl_seconds=int(options.ttl.total_seconds()),
                rolling=options.rolling,
            )
            saved = await self.session_repository.save(session)
            logfire.info(
                "Session issued",
                user_id=str(user_id),
                provider=provider.value,
                expires_at=saved.expires_at.isoformat(),
                rolling=saved.rolling,
            )
            return saved

    async def _get_active(self, session_id: SessionId) -> Session:
        session = await self.session_repository.find_by_id(session_id)
        if session is None:
            raise SessionNotFoundError()

        status = session.status_at(self.clock.now())
        if status is SessionStatus.REVOKED:
            raise SessionNotFoundError()
        if status is SessionStatus.EXPIRED:
            raise SessionExpiredError()
        return session

    async def get(self, session_id: SessionId) -> Session:
        """Get an active session.

        Raises:
            SessionNotFoundError: If the session is unknown or revoked
            SessionExpiredError: If the session is past its expiry
        """
        with logfire.span("session_service.get"):
            return await self._get_active(session_id)

    async def validate(self, session_id: SessionId) -> UserId:
        """Resolve a session token to its user.

        Args:
            session_id: Session token

        Returns:
            ID of the session's user

        Raises:
            SessionNotFoundError: If the session is unknown or revoked
            SessionExpiredError: If the session is past its expiry
        """
        with logfire.span("session_service.validate"):
            session = await self._get_active(session_id)
            return session.user_id

    async def refresh(self, session_id: SessionId) -> Session:
        """Extend a rolling session by its original ttl.

        Called for every authenticated request as well as for an explicit
        refresh. The new expiry is capped at ``created_at`` plus the
        configured maximum lifetime. Non-rolling sessions are returned
        unchanged.

        Raises:
            SessionNotFoundError: If the session is unknown or revoked
            SessionExpiredError: If the session is past its expiry
        """
        with logfire.span("session_service.refresh"):
            session = await self._get_active(session_id)
            if not session.rolling:
                return session

            now = self.clock.now()
            cap = session.created_at + timedelta(
                seconds=self.auth_settings.rolling_max_lifetime_seconds
            )
            extended = await self.session_repository.extend(
                session_id, min(now + session.ttl, cap), now
            )
            if extended is None:
                # Revoked or expired after it was read
                await self._get_active(session_id)
                raise SessionNotFoundError()

            logfire.info(
                "Session refreshed",
                user_id=str(extended.user_id),
                expires_at=extended.expires_at.isoformat(),
            )
            return extended

    async def revoke(self, session_id: SessionId) -> None:
        """Revoke a session. Revoking an unknown or revoked session is a no-op."""
        with logfire.span("session_service.revoke"):
            revoked = await self.session_repository.revoke(session_id, self.clock.now())
            logfire.info("Session revoke requested", revoked=revoked)

    async def revoke_all(self, user_id: UserId) -> int:
        """Revoke every session of a user.

        Returns:
            Number of sessions revoked
        """
        with logfire.span("session_service.revoke_all", user_id=str(user_id)):
            count = await self.session_repository.revoke_all_for_user(
                user_id, self.clock.now()
            )
            logfire.info("Sessions revoked", user_id=str(user_id), count=count)
            return count

    async def reclaim_expired(self) -> int:
        """Delete expired and revoked session records.

        Returns:
            Number of records deleted
        """
        with logfire.span("session_service.reclaim_expired"):
            count = await self.session_repository.delete_reclaimable(self.clock.now())
            if count:
                logfire.info("Expired sessions reclaimed", count=count)
            return count
