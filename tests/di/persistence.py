"""Mock persistence providers for testing."""

from dishka import Scope, provide

from authhost.domain.repository import (
    LoginAttemptRepository,
    SessionRepository,
    UserRepository,
)
from authhost.persistence.repository.inmemory import (
    InMemoryLoginAttemptRepository,
    InMemorySessionRepository,
    InMemoryUserRepository,
)
from authhost.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Repositories are APP-scoped so state survives from one request to the
    next, like a database would. Each test builds its own container, which
    keeps tests isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_user_repository(self) -> UserRepository:
        """Provide in-memory user repository."""
        return InMemoryUserRepository()

    @provide(scope=Scope.APP)
    def get_session_repository(self) -> SessionRepository:
        """Provide in-memory session repository."""
        return InMemorySessionRepository()

    @provide(scope=Scope.APP)
    def get_login_attempt_repository(self) -> LoginAttemptRepository:
        """Provide in-memory login attempt repository."""
        return InMemoryLoginAttemptRepository()
