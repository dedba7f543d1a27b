"""Digest challenge use case."""

from pydantic import BaseModel

from authhost.application.usecase.base import BaseUseCase
from authhost.config import AuthSettings
from authhost.util.clock import Clock
from authhost.util.digest import DigestNonceIssuer, challenge_header


class DigestChallengeRequest(BaseModel):
    """Digest challenge request."""

    # Set when the client's nonce expired so it retries without prompting
    stale: bool = False


class DigestChallengeResponse(BaseModel):
    """Value for the ``WWW-Authenticate`` header."""

    www_authenticate: str


class DigestChallengeUseCase(BaseUseCase[DigestChallengeRequest, DigestChallengeResponse]):
    """Use case for issuing a fresh HTTP Digest challenge."""

    def __init__(
        self, nonce_issuer: DigestNonceIssuer, auth_settings: AuthSettings, clock: Clock
    ) -> None:
        self.nonce_issuer = nonce_issuer
        self.auth_settings = auth_settings
        self.clock = clock

    async def execute(self, request: DigestChallengeRequest) -> DigestChallengeResponse:
        nonce = self.nonce_issuer.issue(self.clock.now())
        return DigestChallengeResponse(
            www_authenticate=challenge_header(
                self.auth_settings.digest_realm, nonce, stale=request.stale
            )
        )
