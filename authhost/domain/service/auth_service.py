"""External identity domain service."""

import asyncio

import logfire

from authhost.domain.error import ProviderRejectedError, ProviderUnreachableError
from authhost.domain.value.types import AuthProvider, ExternalIdentityClaim

from .base import Service


class OAuthClient:
    """Generic OAuth client interface for all external providers."""

    provider: AuthProvider

    async def initiate_authorization(self, state: str) -> str:
        """Initiate OAuth authorization flow.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        raise NotImplementedError

    async def complete_authorization(
        self, code: str, state: str
    ) -> ExternalIdentityClaim:
        """Complete OAuth authorization flow.

        Args:
            code: Authorization code from OAuth callback
            state: State parameter for verification

        Returns:
            Normalized identity claim

        Raises:
            ProviderUnreachableError: On network errors, timeouts or 5xx
            ProviderRejectedError: If the provider refuses the code or state
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service for multi-provider external authentication.

    Dispatches to one OAuth client per enabled provider.
    """

    def __init__(self, oauth_clients: dict[AuthProvider, OAuthClient]) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of provider to OAuth client implementation
        """
        self.oauth_clients = oauth_clients

    def _client(self, provider: AuthProvider) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client:
            logfire.warn("Provider not enabled", provider=provider.value)
            raise ProviderRejectedError(f"Provider not enabled: {provider.value}")
        return client

    def supports(self, provider: AuthProvider) -> bool:
        return provider in self.oauth_clients

    async def initiate_login(self, provider: AuthProvider, state: str) -> str:
        """Initiate OAuth login flow for any provider.

        Args:
            provider: Authentication provider to use
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to

        Raises:
            ProviderRejectedError: If provider is not enabled
        """
        with logfire.span("auth_service.initiate_login", provider=provider.value):
            return await self._client(provider).initiate_authorization(state)

    async def exchange(
        self, provider: AuthProvider, code: str, state: str, timeout: float
    ) -> ExternalIdentityClaim:
        """Exchange an authorization code for a normalized identity claim.

        The exchange is abandoned when it takes longer than ``timeout``
        seconds. No retry is attempted.

        Args:
            provider: Provider that issued the code
            code: Authorization code from the callback
            state: State parameter from the callback
            timeout: Upper bound in seconds for the whole exchange

        Returns:
            Identity claim from the provider

        Raises:
            ProviderRejectedError: If provider is not enabled or refuses the code
            ProviderUnreachableError: On network failure or timeout
        """
        client = self._client(provider)
        with logfire.span("auth_service.exchange", provider=provider.value):
            try:
                claim = await asyncio.wait_for(
                    client.complete_authorization(code, state), timeout=timeout
                )
            except asyncio.TimeoutError:
                logfire.warn(
                    "Provider exchange timed out",
                    provider=provider.value,
                    timeout=timeout,
                )
                raise ProviderUnreachableError(
                    f"{provider.value} did not respond within {timeout:g}s"
                )

            if claim.provider is not provider:
                logfire.error(
                    "Provider client returned claim for another provider",
                    provider=provider.value,
                    claim_provider=claim.provider.value,
                )
                raise ProviderRejectedError()

            logfire.info(
                "Provider exchange completed",
                provider=provider.value,
                external_id=claim.external_id,
            )
            return claim
