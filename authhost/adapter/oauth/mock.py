"""Mock OAuth client for testing.

Returns deterministic identities derived from the authorization code
without making real API calls.
"""

import asyncio

from authhost.domain.error import ProviderRejectedError, ProviderUnreachableError
from authhost.domain.service.auth_service import OAuthClient
from authhost.domain.value.types import (
    AuthProvider,
    ExternalIdentityClaim,
    ProfileClaims,
    ProviderTokens,
)

# Codes with special behavior
REJECTED_CODE = "rejected"
UNREACHABLE_CODE = "unreachable"
SLOW_CODE = "slow"
NO_EMAIL_CODE = "no-email"


class MockOAuthClient(OAuthClient):
    """Mock OAuth client for one provider.

    ``code`` selects the outcome: ``rejected`` and ``unreachable`` raise the
    matching provider error, ``slow`` sleeps for ``slow_seconds``, anything
    else completes with external id ``<provider>-<code>``.
    """

    def __init__(self, provider: AuthProvider, slow_seconds: float = 5.0):
        self.provider = provider
        self.slow_seconds = slow_seconds
        self.initiated_states: list[str] = []

    async def initiate_authorization(self, state: str) -> str:
        self.initiated_states.append(state)
        return f"https://{self.provider.value}.example/oauth/authorize?state={state}&mock=true"

    async def complete_authorization(
        self, code: str, state: str
    ) -> ExternalIdentityClaim:
        if code == REJECTED_CODE:
            raise ProviderRejectedError()
        if code == UNREACHABLE_CODE:
            raise ProviderUnreachableError()
        if code == SLOW_CODE:
            await asyncio.sleep(self.slow_seconds)

        return ExternalIdentityClaim(
            provider=self.provider,
            external_id=f"{self.provider.value}-{code}",
            claims=ProfileClaims(
                username=f"mock_{code}",
                email=None if code == NO_EMAIL_CODE else f"{code}@{self.provider.value}.example",
                display_name=f"Mock {self.provider.value.title()} User",
                avatar_url="https://example.com/avatar.jpg",
            ),
            tokens=ProviderTokens(access_token=f"mock-token-{code}"),
        )
