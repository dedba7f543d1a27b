"""Domain layer DI providers."""

from dishka import Scope, provide

from authhost.config import AuthSettings
from authhost.domain.repository import (
    LoginAttemptRepository,
    SessionRepository,
    UserRepository,
)
from authhost.domain.service import (
    AuthService,
    CredentialService,
    OAuthClient,
    SessionService,
    UserService,
)
from authhost.domain.value import AuthProvider
from authhost.util.clock import Clock
from authhost.util.di.base import ProviderBase
from authhost.util.digest import DigestNonceIssuer


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[AuthProvider, OAuthClient]
    ) -> AuthService:
        """Provide external identity domain service.

        Args:
            oauth_clients: Dictionary mapping enabled providers to their OAuth clients

        Returns:
            AuthService dispatching to the enabled OAuth clients
        """
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_credential_service(
        self,
        user_repository: UserRepository,
        login_attempt_repository: LoginAttemptRepository,
        nonce_issuer: DigestNonceIssuer,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> CredentialService:
        """Provide credential verification domain service."""
        return CredentialService(
            user_repository=user_repository,
            login_attempt_repository=login_attempt_repository,
            nonce_issuer=nonce_issuer,
            auth_settings=auth_settings,
            clock=clock,
        )

    @provide
    def get_session_service(
        self,
        session_repository: SessionRepository,
        user_repository: UserRepository,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> SessionService:
        """Provide session domain service."""
        return SessionService(
            session_repository=session_repository,
            user_repository=user_repository,
            auth_settings=auth_settings,
            clock=clock,
        )

    @provide
    def get_user_service(
        self, user_repository: UserRepository, auth_settings: AuthSettings, clock: Clock
    ) -> UserService:
        """Provide user domain service."""
        return UserService(
            user_repository=user_repository, auth_settings=auth_settings, clock=clock
        )
