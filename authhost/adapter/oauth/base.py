"""Shared OAuth 2.0 authorization code client.

Provider clients subclass ``OAuth2Client`` and supply endpoints and a
profile parser. Transport failures and provider refusals are translated to
the domain's ``ProviderUnreachableError`` and ``ProviderRejectedError`` here,
so provider subclasses only deal with the happy path.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlencode

import httpx
import logfire

from authhost.adapter.error import ProviderError
from authhost.domain.error import ProviderRejectedError, ProviderUnreachableError
from authhost.domain.service.auth_service import OAuthClient
from authhost.domain.value.types import (
    AuthProvider,
    ExternalIdentityClaim,
    ProfileClaims,
    ProviderTokens,
)
from authhost.util.clock import Clock


class OAuth2Client(OAuthClient):
    """OAuth 2.0 authorization code flow over httpx."""

    provider: AuthProvider
    authorize_url: str
    token_url: str
    user_info_url: str
    default_scope: str = ""

    # Some providers only accept GET on the token endpoint
    token_method: str = "POST"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scope: str = "",
        timeout: float = 30.0,
        state_ttl: float = 600.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize OAuth client.

        Args:
            client_id: OAuth client ID registered with the provider
            client_secret: OAuth client secret
            redirect_uri: Callback URL registered with the provider
            scope: Space separated scopes, empty for the provider default
            timeout: Per request timeout in seconds
            state_ttl: Seconds a login may take from redirect to callback
            transport: httpx transport override, used by tests
            clock: Time source for state expiry
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope or self.default_scope
        self.timeout = timeout
        self.state_ttl = timedelta(seconds=state_ttl)
        self._transport = transport
        self.clock = clock or Clock()

        # Pending authorizations keyed by state: issue time and per-flow data
        # such as a PKCE verifier. Single process only.
        self._pending: dict[str, tuple[datetime, str]] = {}

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _begin(self, state: str) -> dict[str, str]:
        """Record a pending authorization and return extra authorize params."""
        self._remember(state)
        return {}

    def _remember(self, state: str, flow_data: str = "") -> None:
        now = self.clock.now()
        self._evict_expired(now)
        self._pending[state] = (now, flow_data)

    def _evict_expired(self, now: datetime) -> None:
        expired = [
            state
            for state, (issued_at, _) in self._pending.items()
            if issued_at + self.state_ttl <= now
        ]
        for state in expired:
            del self._pending[state]
        if expired:
            logfire.info(
                "Abandoned OAuth authorizations dropped",
                provider=self.provider.value,
                count=len(expired),
            )

    def authorization_params(self, state: str) -> dict[str, str]:
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        if self.scope:
            params["scope"] = self.scope
        return params

    async def initiate_authorization(self, state: str) -> str:
        params = {**self.authorization_params(state), **self._begin(state)}
        logfire.info(
            "OAuth authorization initiated",
            provider=self.provider.value,
            redirect_uri=self.redirect_uri,
        )
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(
        self, code: str, state: str
    ) -> ExternalIdentityClaim:
        self._evict_expired(self.clock.now())
        if state not in self._pending:
            logfire.warn("Unknown OAuth state", provider=self.provider.value)
            raise ProviderRejectedError("Unknown or expired authorization state")
        _, flow_data = self._pending.pop(state)

        try:
            async with self._http_client() as client:
                token_payload = await self._exchange_code(client, code, flow_data)
                profile = await self._fetch_profile(client, token_payload)
        except httpx.TimeoutException as e:
            logfire.warn("OAuth provider timed out", provider=self.provider.value)
            raise ProviderUnreachableError() from e
        except httpx.HTTPError as e:
            logfire.error(
                "OAuth provider HTTP error", provider=self.provider.value, error=str(e)
            )
            raise ProviderUnreachableError() from e
        except ProviderError as e:
            logfire.error(
                "OAuth provider error",
                provider=self.provider.value,
                status_code=e.status_code,
                error=str(e),
            )
            if e.status_code is not None and e.status_code >= 500:
                raise ProviderUnreachableError() from e
            raise ProviderRejectedError() from e

        external_id = self._external_id(profile, token_payload)
        if not external_id:
            logfire.error("OAuth profile has no user id", provider=self.provider.value)
            raise ProviderRejectedError("Identity provider returned no user id")

        claim = ExternalIdentityClaim(
            provider=self.provider,
            external_id=external_id,
            claims=self._parse_claims(profile, token_payload),
            tokens=self._parse_tokens(token_payload),
        )
        logfire.info(
            "OAuth authorization completed",
            provider=self.provider.value,
            external_id=external_id,
        )
        return claim

    def _token_request(self, code: str, flow_data: str) -> dict[str, Any]:
        """Keyword arguments for the token endpoint request."""
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if self.token_method == "GET":
            return {"params": data}
        return {"data": data, "headers": {"Accept": "application/json"}}

    async def _exchange_code(
        self, client: httpx.AsyncClient, code: str, flow_data: str
    ) -> dict[str, Any]:
        response = await client.request(
            self.token_method, self.token_url, **self._token_request(code, flow_data)
        )
        payload = self._json(response, "token exchange")
        if "error" in payload or not payload.get("access_token"):
            raise ProviderError(
                f"Token exchange refused: {payload.get('error', 'no access_token')}",
                status_code=response.status_code,
            )
        return payload

    def _profile_request(self, token_payload: dict[str, Any]) -> dict[str, Any]:
        """Keyword arguments for the user info request."""
        return {
            "headers": {"Authorization": f"Bearer {token_payload['access_token']}"}
        }

    async def _fetch_profile(
        self, client: httpx.AsyncClient, token_payload: dict[str, Any]
    ) -> dict[str, Any]:
        response = await client.get(
            self.user_info_url, **self._profile_request(token_payload)
        )
        return self._json(response, "user info")

    def _json(self, response: httpx.Response, step: str) -> dict[str, Any]:
        if response.status_code >= 400:
            raise ProviderError(
                f"{step} failed: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{step} returned invalid JSON", status_code=response.status_code
            ) from e
        if not isinstance(payload, dict):
            raise ProviderError(
                f"{step} returned unexpected payload", status_code=response.status_code
            )
        return payload

    def _parse_tokens(self, token_payload: dict[str, Any]) -> ProviderTokens:
        expires_at = None
        expires_in = token_payload.get("expires_in")
        if isinstance(expires_in, (int, float)) and expires_in > 0:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return ProviderTokens(
            access_token=token_payload["access_token"],
            refresh_token=token_payload.get("refresh_token"),
            expires_at=expires_at,
        )

    def _external_id(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> str | None:
        """Permanent provider user id, None if the profile lacks one."""
        value = profile.get("id")
        return str(value) if value not in (None, "") else None

    def _parse_claims(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> ProfileClaims:
        raise NotImplementedError


def text_or_none(value: Any) -> str | None:
    """Provider profile field as a non-empty string, else None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
