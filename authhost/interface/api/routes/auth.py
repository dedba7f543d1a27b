"""Authentication routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from authhost.application.usecase.auth import (
    AuthenticateUseCase,
    DigestChallengeUseCase,
    GetCurrentUserUseCase,
    LogoutUseCase,
    RefreshSessionUseCase,
    StartLoginUseCase,
)
from authhost.application.usecase.auth.authenticate import (
    AuthenticateRequest,
    AuthenticateResponse,
    BasicPayload,
    CredentialsPayload,
    DigestPayload,
    OAuthCallbackPayload,
)
from authhost.application.usecase.auth.digest_challenge import DigestChallengeRequest
from authhost.application.usecase.auth.get_current_user import (
    GetCurrentUserRequest,
    GetCurrentUserResponse,
)
from authhost.application.usecase.auth.logout import (
    LogoutRequest,
    RefreshSessionRequest,
    RefreshSessionResponse,
)
from authhost.application.usecase.auth.start_login import (
    StartLoginRequest,
    StartLoginResponse,
)
from authhost.config import Settings
from authhost.domain.error import (
    InvalidCredentialError,
    ProviderRejectedError,
    SessionExpiredError,
    SessionNotFoundError,
    StaleNonceError,
)
from authhost.domain.value import AuthProvider
from authhost.interface.api.security import (
    clear_session_cookie,
    require_session_token,
    session_token,
    set_session_cookie,
)
from authhost.interface.error import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)


class SessionOptions(BaseModel):
    """Optional session parameters accepted by every sign-in endpoint."""

    # Keep the session alive while used ("remember me")
    remember_me: bool | None = None
    ttl_seconds: int | None = Field(default=None, gt=0)


class CredentialsLoginRequest(SessionOptions):
    """Username and password sign-in."""

    username: str
    password: str


class LogoutResponse(BaseModel):
    """Logout response."""

    success: bool
    message: str


class AuthStatusResponse(BaseModel):
    """Response for checking authentication status.

    Used by /auth/me to return current user if authenticated,
    or indicate unauthenticated state without raising an error.
    """

    authenticated: bool
    user: GetCurrentUserResponse | None = None


async def _sign_in(
    authenticate: AuthenticateUseCase,
    settings: Settings,
    response: Response,
    request: AuthenticateRequest,
) -> AuthenticateResponse:
    result = await authenticate.execute(request)
    set_session_cookie(response, settings, result.session_id, result.expires_at)
    return result


@router.post("/credentials", response_model=AuthenticateResponse)
async def login_with_credentials(
    body: CredentialsLoginRequest,
    response: Response,
    authenticate: FromDishka[AuthenticateUseCase],
    settings: FromDishka[Settings],
) -> AuthenticateResponse:
    """Sign in with username and password.

    Example:
        POST /auth/credentials
        {"username": "alice", "password": "correct horse", "remember_me": true}

        Response:
        {
            "session_id": "...",
            "user_id": "123e4567-e89b-12d3-a456-426614174000",
            "provider": "credentials",
            "expires_at": "2025-01-29T12:34:56Z",
            "rolling": true
        }
    """
    return await _sign_in(
        authenticate,
        settings,
        response,
        AuthenticateRequest(
            provider=AuthProvider.CREDENTIALS,
            payload=CredentialsPayload(username=body.username, password=body.password),
            remember_me=body.remember_me,
            ttl_seconds=body.ttl_seconds,
        ),
    )


@router.post("/basic", response_model=AuthenticateResponse)
async def login_with_basic(
    request: Request,
    response: Response,
    authenticate: FromDishka[AuthenticateUseCase],
    settings: FromDishka[Settings],
    remember_me: bool | None = None,
):
    """Sign in with an ``Authorization: Basic`` header.

    Without the header the response is a 401 Basic challenge.
    """
    authorization = request.headers.get("authorization")
    if not authorization:
        return error_response(
            status.HTTP_401_UNAUTHORIZED,
            InvalidCredentialError.kind,
            "Basic credentials required",
            headers={
                "WWW-Authenticate": f'Basic realm="{settings.auth.digest_realm}"'
            },
        )

    return await _sign_in(
        authenticate,
        settings,
        response,
        AuthenticateRequest(
            provider=AuthProvider.BASIC,
            payload=BasicPayload(authorization=authorization),
            remember_me=remember_me,
        ),
    )


async def _digest_challenge(
    challenge: DigestChallengeUseCase, message: str, stale: bool = False
) -> JSONResponse:
    result = await challenge.execute(DigestChallengeRequest(stale=stale))
    return error_response(
        status.HTTP_401_UNAUTHORIZED,
        InvalidCredentialError.kind,
        message,
        headers={"WWW-Authenticate": result.www_authenticate},
    )


@router.post("/digest", response_model=AuthenticateResponse)
async def login_with_digest(
    request: Request,
    response: Response,
    authenticate: FromDishka[AuthenticateUseCase],
    challenge: FromDishka[DigestChallengeUseCase],
    settings: FromDishka[Settings],
    remember_me: bool | None = None,
):
    """Sign in with an ``Authorization: Digest`` header.

    Without the header, or with credentials that do not verify, the
    response is a 401 carrying a fresh Digest challenge. An expired nonce
    gets ``stale=true`` so clients retry without asking the user again.
    """
    authorization = request.headers.get("authorization")
    if not authorization:
        return await _digest_challenge(challenge, "Digest credentials required")

    try:
        return await _sign_in(
            authenticate,
            settings,
            response,
            AuthenticateRequest(
                provider=AuthProvider.DIGEST,
                payload=DigestPayload(
                    authorization=authorization, method=request.method
                ),
                remember_me=remember_me,
            ),
        )
    except StaleNonceError as e:
        return await _digest_challenge(challenge, e.message, stale=True)
    except InvalidCredentialError as e:
        return await _digest_challenge(challenge, e.message)


@router.post("/login", response_model=StartLoginResponse)
async def initiate_login(
    request: StartLoginRequest,
    start_login: FromDishka[StartLoginUseCase],
) -> StartLoginResponse:
    """Initiate an OAuth login with an external identity provider.

    Example:
        POST /auth/login
        {"provider": "github"}

        Response:
        {
            "authorization_url": "https://github.com/login/oauth/authorize?...",
            "state": "..."
        }
    """
    logger.info(f"Initiating {request.provider.value} login")
    return await start_login.execute(request)


@router.get("/callback/{provider}", response_model=AuthenticateResponse)
async def oauth_callback(
    provider: AuthProvider,
    response: Response,
    authenticate: FromDishka[AuthenticateUseCase],
    settings: FromDishka[Settings],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> AuthenticateResponse:
    """Complete an OAuth login from the provider redirect.

    Example:
        GET /auth/callback/github?code=abc123&state=xyz789
    """
    logger.info(f"OAuth callback received: provider={provider.value}")
    if error or not code or not state:
        # User denied consent, or the provider sent a broken redirect
        logger.warning(f"OAuth callback without code: provider={provider.value}, error={error}")
        raise ProviderRejectedError()

    return await _sign_in(
        authenticate,
        settings,
        response,
        AuthenticateRequest(
            provider=provider,
            payload=OAuthCallbackPayload(code=code, state=state),
        ),
    )


@router.get("/me", response_model=AuthStatusResponse)
async def get_current_user(
    request: Request,
    response: Response,
    get_current_user_use_case: FromDishka[GetCurrentUserUseCase],
    settings: FromDishka[Settings],
) -> AuthStatusResponse:
    """Get current user if authenticated, or return unauthenticated status.

    Safe to call without a session: returns ``authenticated=false``
    instead of an error. A rolling session is extended and its cookie
    re-issued with the new expiry.
    """
    token = session_token(request, settings.auth.cookie_name)
    if token is None:
        return AuthStatusResponse(authenticated=False)

    try:
        user = await get_current_user_use_case.execute(
            GetCurrentUserRequest(session_id=token)
        )
    except (SessionExpiredError, SessionNotFoundError):
        return AuthStatusResponse(authenticated=False)
    set_session_cookie(response, settings, token, user.session_expires_at)
    return AuthStatusResponse(authenticated=True, user=user)


@router.post("/refresh", response_model=RefreshSessionResponse)
async def refresh_session(
    request: Request,
    response: Response,
    refresh: FromDishka[RefreshSessionUseCase],
    settings: FromDishka[Settings],
) -> RefreshSessionResponse:
    """Extend a rolling session. Non-rolling sessions are returned unchanged."""
    token = require_session_token(request, settings.auth.cookie_name)
    result = await refresh.execute(RefreshSessionRequest(session_id=token))
    set_session_cookie(response, settings, result.session_id, result.expires_at)
    return result


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    logout_use_case: FromDishka[LogoutUseCase],
    settings: FromDishka[Settings],
) -> LogoutResponse:
    """Revoke the current session and clear the session cookie.

    Logging out twice, or without a session, still succeeds.
    """
    token = session_token(request, settings.auth.cookie_name)
    if token is not None:
        await logout_use_case.execute(LogoutRequest(session_id=token))
    clear_session_cookie(response, settings)
    return LogoutResponse(success=True, message="Successfully logged out")
