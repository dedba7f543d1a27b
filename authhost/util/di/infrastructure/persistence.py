"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from authhost.config import Settings
from authhost.domain.repository import (
    LoginAttemptRepository,
    SessionRepository,
    UserRepository,
)
from authhost.persistence.database import create_engine, create_session_factory
from authhost.persistence.repository import (
    PostgresLoginAttemptRepository,
    PostgresSessionRepository,
    PostgresUserRepository,
)
from authhost.persistence.repository.inmemory import InMemorySessionRepository
from authhost.util.di.base import ProviderBase
from authhost.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL.

    Sessions can be kept in process memory instead (``AUTH__SESSION_STORE=memory``)
    for single-instance deployments; users and lockout counters always live
    in the database.
    """

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_engine(self, settings: Settings) -> AsyncEngine:
        """Provide database engine."""
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        return engine

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_memory_session_store(self) -> InMemorySessionRepository:
        """Provide the process-wide session store used when sessions are not in the database."""
        return InMemorySessionRepository()

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        The session is automatically committed at the end of the request
        if no exception occurred, or rolled back if an exception was raised.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_user_repository(self, session: AsyncSession) -> UserRepository:
        """Provide User repository."""
        return PostgresUserRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_session_repository(
        self,
        settings: Settings,
        session: AsyncSession,
        memory_store: InMemorySessionRepository,
    ) -> SessionRepository:
        """Provide Session repository for the configured store."""
        if settings.auth.session_store == "memory":
            return memory_store
        return PostgresSessionRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_login_attempt_repository(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> LoginAttemptRepository:
        """Provide LoginAttempt repository.

        Uses its own transactions so failure counts survive a rolled back request.
        """
        return PostgresLoginAttemptRepository(session_factory)
