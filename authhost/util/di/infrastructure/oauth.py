"""OAuth infrastructure providers for external identity providers."""

from dishka import Scope, provide
import logfire

from authhost.adapter.oauth import OAUTH_CLIENT_CLASSES
from authhost.config import Settings
from authhost.domain.service.auth_service import OAuthClient
from authhost.domain.value import AuthProvider
from authhost.util.clock import Clock
from authhost.util.di.base import ProviderBase
from authhost.util.error import ConfigurationError

_PLACEHOLDER = "CHANGE_ME_IN_PRODUCTION"


class OAuthProvider(ProviderBase):
    """OAuth component base."""

    __mock_component__ = "oauth"


class ProdOAuthProvider(OAuthProvider):
    """Production OAuth provider talking to the real identity providers."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_oauth_clients(
        self, settings: Settings, clock: Clock
    ) -> dict[AuthProvider, OAuthClient]:
        """Provide OAuth clients for every enabled external provider.

        Clients are APP-scoped: pending authorization state must survive
        from the login redirect to the callback request.

        Returns:
            Dictionary mapping AuthProvider to OAuthClient

        Raises:
            ConfigurationError: If an enabled provider still has placeholder
                credentials outside development and test
        """
        auth = settings.auth
        clients: dict[AuthProvider, OAuthClient] = {}
        for provider, client_class in OAUTH_CLIENT_CLASSES.items():
            if provider not in auth.enabled_providers:
                continue

            credentials = getattr(auth, provider.value)
            if _PLACEHOLDER in (credentials.client_id, credentials.client_secret):
                if settings.environment in ("staging", "production"):
                    raise ConfigurationError(
                        f"{provider.value} OAuth credentials must be configured"
                    )
                logfire.warn(
                    "OAuth provider uses placeholder credentials",
                    provider=provider.value,
                )

            clients[provider] = client_class(
                client_id=credentials.client_id,
                client_secret=credentials.client_secret,
                redirect_uri=auth.callback_url(provider),
                scope=credentials.scope,
                timeout=auth.provider_timeout_seconds,
                state_ttl=auth.oauth_state_ttl_seconds,
                clock=clock,
            )

        logfire.info(
            "OAuth clients configured", providers=sorted(p.value for p in clients)
        )
        return clients
