"""Get current user use case."""

from datetime import datetime

from pydantic import BaseModel

from authhost.application.usecase.base import BaseUseCase
from authhost.domain.service import SessionService, UserService
from authhost.domain.value import AuthProvider, SessionId


class GetCurrentUserRequest(BaseModel):
    """Get current user request."""

    session_id: str


class IdentityInfo(BaseModel):
    """Linked external identity for response."""

    provider: AuthProvider
    external_id: str
    last_login_at: datetime | None


class GetCurrentUserResponse(BaseModel):
    """Get current user response."""

    user_id: str
    username: str | None
    email: str | None
    display_name: str | None
    roles: list[str]
    identities: list[IdentityInfo]
    session_provider: AuthProvider
    session_expires_at: datetime
    created_at: datetime


class GetCurrentUserUseCase(BaseUseCase[GetCurrentUserRequest, GetCurrentUserResponse]):
    """Use case for getting the user behind a session."""

    def __init__(
        self, session_service: SessionService, user_service: UserService
    ) -> None:
        """Initialize get current user use case.

        Args:
            session_service: Session domain service
            user_service: User domain service
        """
        self.session_service = session_service
        self.user_service = user_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Execute get current user flow.

        A rolling session is extended, as on every authenticated request.

        Raises:
            SessionNotFoundError: If the session is unknown or revoked
            SessionExpiredError: If the session expired
            NotFoundError: If the user no longer exists
        """
        session = await self.session_service.refresh(SessionId(request.session_id))
        user = await self.user_service.get_by_id(session.user_id)
        identities = await self.user_service.identities_of(user.id)

        return GetCurrentUserResponse(
            user_id=str(user.id),
            username=user.username.root if user.username else None,
            email=user.email,
            display_name=user.display_name,
            roles=sorted(role.root for role in user.roles),
            identities=[
                IdentityInfo(
                    provider=identity.provider,
                    external_id=identity.external_id,
                    last_login_at=identity.last_login_at,
                )
                for identity in identities
            ],
            session_provider=session.provider,
            session_expires_at=session.expires_at,
            created_at=user.created_at,
        )
