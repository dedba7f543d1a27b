"""Start OAuth login use case."""

import secrets

import logfire
from pydantic import BaseModel

from authhost.application.usecase.base import BaseUseCase
from authhost.config import AuthSettings
from authhost.domain.error import ProviderRejectedError
from authhost.domain.service import AuthService
from authhost.domain.value import AuthProvider


class StartLoginRequest(BaseModel):
    """Start login request."""

    provider: AuthProvider


class StartLoginResponse(BaseModel):
    """Where to send the user to sign in with the provider."""

    authorization_url: str
    state: str


class StartLoginUseCase(BaseUseCase[StartLoginRequest, StartLoginResponse]):
    """Use case for starting an OAuth authorization code flow."""

    def __init__(self, auth_service: AuthService, auth_settings: AuthSettings) -> None:
        self.auth_service = auth_service
        self.auth_settings = auth_settings

    async def execute(self, request: StartLoginRequest) -> StartLoginResponse:
        """Generate a CSRF state and build the provider authorization URL.

        Raises:
            ProviderRejectedError: If the provider is a credential scheme or
                is not enabled
        """
        provider = request.provider
        if (
            provider.is_credential_scheme
            or provider not in self.auth_settings.enabled_providers
        ):
            raise ProviderRejectedError(f"Provider not enabled: {provider.value}")

        state = secrets.token_urlsafe(32)
        url = await self.auth_service.initiate_login(provider, state)
        logfire.info("OAuth login started", provider=provider.value)
        return StartLoginResponse(authorization_url=url, state=state)
