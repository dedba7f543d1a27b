"""Logout and session refresh use cases."""

from datetime import datetime

from pydantic import BaseModel

from authhost.application.usecase.base import BaseUseCase
from authhost.domain.service import SessionService
from authhost.domain.value import SessionId


class LogoutRequest(BaseModel):
    """Logout request."""

    session_id: str


class LogoutResponse(BaseModel):
    """Logout response."""

    success: bool


class LogoutUseCase(BaseUseCase[LogoutRequest, LogoutResponse]):
    """Use case for revoking the caller's session. Idempotent."""

    def __init__(self, session_service: SessionService) -> None:
        self.session_service = session_service

    async def execute(self, request: LogoutRequest) -> LogoutResponse:
        await self.session_service.revoke(SessionId(request.session_id))
        return LogoutResponse(success=True)


class RefreshSessionRequest(BaseModel):
    """Refresh session request."""

    session_id: str


class RefreshSessionResponse(BaseModel):
    """Session state after refresh."""

    session_id: str
    expires_at: datetime
    rolling: bool


class RefreshSessionUseCase(BaseUseCase[RefreshSessionRequest, RefreshSessionResponse]):
    """Use case for extending a rolling session."""

    def __init__(self, session_service: SessionService) -> None:
        self.session_service = session_service

    async def execute(self, request: RefreshSessionRequest) -> RefreshSessionResponse:
        """Extend the session if it is rolling.

        Raises:
            SessionNotFoundError: If the session is unknown or revoked
            SessionExpiredError: If the session expired
        """
        session = await self.session_service.refresh(SessionId(request.session_id))
        return RefreshSessionResponse(
            session_id=session.id,
            expires_at=session.expires_at,
            rolling=session.rolling,
        )
