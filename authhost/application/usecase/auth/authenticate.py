"""Authenticate use case.

Single entry point for every way of signing in: form credentials, HTTP
Basic, HTTP Digest and OAuth callbacks from external identity providers.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal, Union

import logfire
from pydantic import BaseModel, Field

from authhost.adapter.http_auth import (
    parse_basic_authorization,
    parse_digest_authorization,
)
from authhost.application.usecase.base import BaseUseCase
from authhost.config import AuthSettings
from authhost.domain.error import (
    AuthError,
    AuthInternalError,
    InvalidCredentialError,
    ProviderRejectedError,
)
from authhost.domain.service import (
    AuthService,
    CredentialService,
    SessionService,
    UserService,
)
from authhost.domain.value import AuthProvider, ExternalIdentityClaim, UserId


class CredentialsPayload(BaseModel):
    """Form post with username and password."""

    kind: Literal["credentials"] = "credentials"
    username: str
    password: str


class BasicPayload(BaseModel):
    """Raw ``Authorization: Basic ...`` header."""

    kind: Literal["basic"] = "basic"
    authorization: str


class DigestPayload(BaseModel):
    """Raw ``Authorization: Digest ...`` header and the request method."""

    kind: Literal["digest"] = "digest"
    authorization: str
    method: str = "POST"


class OAuthCallbackPayload(BaseModel):
    """Parameters of an OAuth provider callback."""

    kind: Literal["oauth_callback"] = "oauth_callback"
    code: str
    state: str


AuthPayload = Union[CredentialsPayload, BasicPayload, DigestPayload, OAuthCallbackPayload]


class AuthenticateRequest(BaseModel):
    """Authenticate request."""

    provider: AuthProvider
    payload: AuthPayload = Field(discriminator="kind")
    # Keep the session alive while used ("remember me")
    remember_me: bool | None = None
    # Shorter lifetime than the configured default
    ttl_seconds: int | None = Field(default=None, gt=0)


class AuthenticateResponse(BaseModel):
    """Authenticate response: a session token for the user."""

    session_id: str
    user_id: str
    provider: AuthProvider
    expires_at: datetime
    rolling: bool


@dataclass
class AuthAttempt:
    """Record of one authentication attempt. Logged, never persisted."""

    provider: AuthProvider
    payload_kind: str
    started: float
    outcome: str = "pending"
    error_kind: str | None = None
    user_id: str | None = None

    def succeeded(self, user_id: str) -> None:
        self.outcome = "success"
        self.user_id = user_id

    def failed(self, error_kind: str) -> None:
        self.outcome = "failure"
        self.error_kind = error_kind

    def log(self) -> None:
        fields = {
            "provider": self.provider.value,
            "payload_kind": self.payload_kind,
            "outcome": self.outcome,
            "error_kind": self.error_kind,
            "user_id": self.user_id,
            "duration_ms": round((time.monotonic() - self.started) * 1000, 1),
        }
        if self.outcome == "success":
            logfire.info("Authentication attempt", **fields)
        else:
            logfire.warn("Authentication attempt", **fields)


_PAYLOAD_FOR_PROVIDER = {
    AuthProvider.CREDENTIALS: CredentialsPayload,
    AuthProvider.BASIC: BasicPayload,
    AuthProvider.DIGEST: DigestPayload,
}


class AuthenticateUseCase(BaseUseCase[AuthenticateRequest, AuthenticateResponse]):
    """Use case for signing a user in with any enabled provider."""

    def __init__(
        self,
        credential_service: CredentialService,
        auth_service: AuthService,
        user_service: UserService,
        session_service: SessionService,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize authenticate use case.

        Args:
            credential_service: Verifies locally stored credentials
            auth_service: Exchanges OAuth codes with external providers
            user_service: Resolves or creates users for external identities
            session_service: Issues the session
            auth_settings: Enabled providers, timeouts and required claims
        """
        self.credential_service = credential_service
        self.auth_service = auth_service
        self.user_service = user_service
        self.session_service = session_service
        self.auth_settings = auth_settings

    async def execute(self, request: AuthenticateRequest) -> AuthenticateResponse:
        """Execute authentication.

        Steps:
        1. Reject providers that are not enabled
        2. Verify the credential, or exchange the OAuth code and resolve
           the user behind the external identity
        3. Issue a session

        Args:
            request: Provider and provider-specific payload

        Returns:
            Session token, expiry and user id

        Raises:
            AuthError: Any subclass from verification, the provider exchange
                or user resolution, unchanged. Storage faults and unexpected
                errors surface as AuthInternalError.
        """
        attempt = AuthAttempt(
            provider=request.provider,
            payload_kind=request.payload.kind,
            started=time.monotonic(),
        )
        with logfire.span("authenticate", provider=request.provider.value):
            try:
                response = await self._authenticate(request)
                attempt.succeeded(response.user_id)
                return response
            except AuthError as e:
                attempt.failed(e.kind)
                raise
            except Exception as e:
                logfire.exception(
                    "Unexpected error during authentication",
                    provider=request.provider.value,
                )
                attempt.failed(AuthInternalError.kind)
                raise AuthInternalError() from e
            finally:
                attempt.log()

    async def _authenticate(self, request: AuthenticateRequest) -> AuthenticateResponse:
        provider = request.provider
        if provider not in self.auth_settings.enabled_providers:
            raise ProviderRejectedError(f"Provider not enabled: {provider.value}")

        if provider.is_credential_scheme:
            user_id = await self._verify_credential(provider, request.payload)
        else:
            user_id = await self._external_login(provider, request.payload)

        options = self.session_service.default_options(
            ttl=(
                timedelta(seconds=request.ttl_seconds)
                if request.ttl_seconds
                else None
            ),
            rolling=request.remember_me,
        )
        session = await self.session_service.issue(user_id, options, provider)
        return AuthenticateResponse(
            session_id=session.id,
            user_id=str(session.user_id),
            provider=session.provider,
            expires_at=session.expires_at,
            rolling=session.rolling,
        )

    async def _verify_credential(
        self, provider: AuthProvider, payload: AuthPayload
    ) -> UserId:
        if not isinstance(payload, _PAYLOAD_FOR_PROVIDER[provider]):
            raise InvalidCredentialError(f"Expected {provider.value} credentials")

        if isinstance(payload, CredentialsPayload):
            return await self.credential_service.verify(
                payload.username, payload.password, provider
            )
        if isinstance(payload, BasicPayload):
            username, password = parse_basic_authorization(payload.authorization)
            return await self.credential_service.verify(username, password, provider)
        if isinstance(payload, DigestPayload):
            credential = parse_digest_authorization(payload.authorization, payload.method)
            return await self.credential_service.verify(
                credential.username, credential, provider
            )
        raise InvalidCredentialError(f"Expected {provider.value} credentials")

    async def _external_login(
        self, provider: AuthProvider, payload: AuthPayload
    ) -> UserId:
        if not isinstance(payload, OAuthCallbackPayload):
            raise ProviderRejectedError(f"Expected an OAuth callback for {provider.value}")

        claim = await self.auth_service.exchange(
            provider,
            payload.code,
            payload.state,
            timeout=self.auth_settings.provider_timeout_seconds,
        )
        self._check_required_claims(claim)
        user = await self.user_service.resolve_external_login(claim)
        return user.id

    def _check_required_claims(self, claim: ExternalIdentityClaim) -> None:
        missing = sorted(
            name
            for name in self.auth_settings.required_claims
            if claim.claims.get(name) in (None, "")
        )
        if missing:
            logfire.warn(
                "Provider did not supply required claims",
                provider=claim.provider.value,
                missing=missing,
            )
            raise ProviderRejectedError(
                f"Identity provider did not supply required claims: {', '.join(missing)}"
            )
