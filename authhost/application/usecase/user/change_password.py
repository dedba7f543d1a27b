"""Change password use case."""

from pydantic import BaseModel

from authhost.application.usecase.base import BaseUseCase
from authhost.domain.service import SessionService, UserService
from authhost.domain.value import SessionId


class ChangePasswordRequest(BaseModel):
    """Change password request."""

    session_id: str
    current_password: str | None = None
    new_password: str


class ChangePasswordResponse(BaseModel):
    """Change password response."""

    revoked_sessions: int


class ChangePasswordUseCase(BaseUseCase[ChangePasswordRequest, ChangePasswordResponse]):
    """Use case for changing the caller's password.

    Every session of the user is revoked afterwards, the caller's included.
    """

    def __init__(
        self, user_service: UserService, session_service: SessionService
    ) -> None:
        self.user_service = user_service
        self.session_service = session_service

    async def execute(self, request: ChangePasswordRequest) -> ChangePasswordResponse:
        """Execute change password flow.

        Raises:
            SessionNotFoundError: If the session is unknown or revoked
            SessionExpiredError: If the session expired
            InvalidCredentialError: If the current password does not match
            ValidationError: If the new password is not acceptable
        """
        user_id = await self.session_service.validate(SessionId(request.session_id))
        await self.user_service.change_password(
            user_id, request.new_password, request.current_password
        )
        revoked = await self.session_service.revoke_all(user_id)
        return ChangePasswordResponse(revoked_sessions=revoked)
