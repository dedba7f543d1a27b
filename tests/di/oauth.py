"""Mock OAuth providers for testing."""

from dishka import Scope, provide

from authhost.adapter.oauth import MockOAuthClient
from authhost.config import Settings
from authhost.domain.service.auth_service import OAuthClient
from authhost.domain.value import AuthProvider
from authhost.util.di.infrastructure.oauth import OAuthProvider


class MockOAuthProvider(OAuthProvider):
    """Mock OAuth provider: one mock client per enabled external provider."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_oauth_clients(self, settings: Settings) -> dict[AuthProvider, OAuthClient]:
        """Provide mock OAuth clients."""
        return {
            provider: MockOAuthClient(provider, slow_seconds=0.5)
            for provider in settings.auth.enabled_providers
            if not provider.is_credential_scheme
        }
