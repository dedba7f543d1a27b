"""Session token transport: HTTP-only cookie or ``Authorization: Bearer``."""

from datetime import datetime

from fastapi import Request, Response

from authhost.config import Settings
from authhost.domain.error import SessionNotFoundError


def session_token(request: Request, cookie_name: str) -> str | None:
    """Session token from the Bearer header, falling back to the cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(cookie_name) or None


def require_session_token(request: Request, cookie_name: str) -> str:
    """Session token of the caller.

    Raises:
        SessionNotFoundError: If the request carries no token
    """
    token = session_token(request, cookie_name)
    if token is None:
        raise SessionNotFoundError()
    return token


def _secure_cookies(settings: Settings) -> bool:
    return settings.environment in ("staging", "production")


def set_session_cookie(
    response: Response, settings: Settings, session_id: str, expires_at: datetime
) -> None:
    response.set_cookie(
        key=settings.auth.cookie_name,
        value=session_id,
        httponly=True,
        secure=_secure_cookies(settings),
        samesite="lax",
        path="/",
        expires=expires_at,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    # Must match the attributes the cookie was set with
    response.delete_cookie(
        key=settings.auth.cookie_name,
        path="/",
        secure=_secure_cookies(settings),
        httponly=True,
        samesite="lax",
    )
