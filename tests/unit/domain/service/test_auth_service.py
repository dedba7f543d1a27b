"""Unit tests for AuthService."""

import pytest

from authhost.adapter.oauth import MockOAuthClient
from authhost.adapter.oauth.mock import REJECTED_CODE, SLOW_CODE, UNREACHABLE_CODE
from authhost.domain.error import ProviderRejectedError, ProviderUnreachableError
from authhost.domain.service import AuthService
from authhost.domain.value import AuthProvider


def _service(clients: dict | None = None) -> AuthService:
    return AuthService(
        {
            AuthProvider.GITHUB: MockOAuthClient(AuthProvider.GITHUB, slow_seconds=1.0),
            **(clients or {}),
        }
    )


class TestInitiateLogin:
    """Tests for AuthService.initiate_login()."""

    @pytest.mark.asyncio
    async def test_returns_authorization_url(self):
        service = _service()

        url = await service.initiate_login(AuthProvider.GITHUB, "state-1")

        assert "state=state-1" in url
        assert service.oauth_clients[AuthProvider.GITHUB].initiated_states == ["state-1"]

    @pytest.mark.asyncio
    async def test_disabled_provider(self):
        service = _service()

        assert not service.supports(AuthProvider.VK)
        with pytest.raises(ProviderRejectedError):
            await service.initiate_login(AuthProvider.VK, "state-1")


class TestExchange:
    """Tests for AuthService.exchange()."""

    @pytest.mark.asyncio
    async def test_returns_claim(self):
        """Should return the normalized claim of the provider."""
        # Arrange
        service = _service()

        # Act
        claim = await service.exchange(AuthProvider.GITHUB, "abc", "s", timeout=1.0)

        # Assert
        assert claim.provider is AuthProvider.GITHUB
        assert claim.external_id == "github-abc"

    @pytest.mark.asyncio
    async def test_timeout_is_unreachable(self):
        """Should abandon an exchange slower than the timeout."""
        service = _service()

        with pytest.raises(ProviderUnreachableError):
            await service.exchange(AuthProvider.GITHUB, SLOW_CODE, "s", timeout=0.05)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "code, error",
        [
            (REJECTED_CODE, ProviderRejectedError),
            (UNREACHABLE_CODE, ProviderUnreachableError),
        ],
    )
    async def test_client_errors_propagate(self, code, error):
        service = _service()

        with pytest.raises(error):
            await service.exchange(AuthProvider.GITHUB, code, "s", timeout=1.0)

    @pytest.mark.asyncio
    async def test_disabled_provider(self):
        service = _service()

        with pytest.raises(ProviderRejectedError):
            await service.exchange(AuthProvider.GOOGLE, "abc", "s", timeout=1.0)

    @pytest.mark.asyncio
    async def test_claim_for_other_provider_is_rejected(self):
        """Should reject a claim whose provider differs from the requested one."""
        # Arrange
        service = _service({AuthProvider.GOOGLE: MockOAuthClient(AuthProvider.FACEBOOK)})

        # Act & Assert
        with pytest.raises(ProviderRejectedError):
            await service.exchange(AuthProvider.GOOGLE, "abc", "s", timeout=1.0)
