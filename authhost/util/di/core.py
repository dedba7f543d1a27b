"""Core DI providers (non-mockable)."""

from datetime import timedelta

from dishka import Scope, provide

from authhost.config import AuthSettings, Settings
from authhost.util.clock import Clock
from authhost.util.di.base import ProviderBase
from authhost.util.digest import DigestNonceIssuer


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide
    def provide_clock(self) -> Clock:
        return Clock()

    @provide
    def provide_nonce_issuer(self, auth_settings: AuthSettings) -> DigestNonceIssuer:
        """Provide HTTP Digest nonce issuer."""
        return DigestNonceIssuer(
            secret=auth_settings.digest_nonce_secret,
            ttl=timedelta(seconds=auth_settings.digest_nonce_ttl_seconds),
        )
