"""Delete account use case."""

from pydantic import BaseModel

from authhost.application.usecase.base import BaseUseCase
from authhost.domain.service import SessionService, UserService
from authhost.domain.value import SessionId


class DeleteAccountRequest(BaseModel):
    """Delete account request."""

    session_id: str


class DeleteAccountResponse(BaseModel):
    """Delete account response."""

    user_id: str
    revoked_sessions: int


class DeleteAccountUseCase(BaseUseCase[DeleteAccountRequest, DeleteAccountResponse]):
    """Use case for deleting the caller's account.

    Sessions are revoked before the user row goes away, so a memory
    session store without foreign keys ends up in the same state.
    """

    def __init__(
        self, user_service: UserService, session_service: SessionService
    ) -> None:
        self.user_service = user_service
        self.session_service = session_service

    async def execute(self, request: DeleteAccountRequest) -> DeleteAccountResponse:
        user_id = await self.session_service.validate(SessionId(request.session_id))
        revoked = await self.session_service.revoke_all(user_id)
        await self.user_service.delete(user_id)
        return DeleteAccountResponse(user_id=str(user_id), revoked_sessions=revoked)
