"""Register use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel, Field

from authhost.application.usecase.base import BaseUseCase
from authhost.domain.service import SessionService, UserService
from authhost.domain.value import AuthProvider


class RegisterRequest(BaseModel):
    """Register request."""

    username: str = Field(min_length=1, max_length=255)
    password: str
    email: str | None = None
    display_name: str | None = None
    # Issue a session right away
    auto_login: bool = False


class RegisterResponse(BaseModel):
    """Register response."""

    user_id: str
    username: str | None
    session_id: str | None = None
    expires_at: datetime | None = None


class RegisterUseCase(BaseUseCase[RegisterRequest, RegisterResponse]):
    """Use case for creating a credential user."""

    def __init__(
        self, user_service: UserService, session_service: SessionService
    ) -> None:
        """Initialize register use case.

        Args:
            user_service: User domain service
            session_service: Session domain service, used for auto login
        """
        self.user_service = user_service
        self.session_service = session_service

    async def execute(self, request: RegisterRequest) -> RegisterResponse:
        """Register a user, optionally signing them in.

        Raises:
            ValidationError: If username or password is not acceptable
            DuplicateUsernameError: If the username is taken
        """
        user = await self.user_service.register(
            username=request.username,
            password=request.password,
            email=request.email,
            display_name=request.display_name,
        )
        response = RegisterResponse(
            user_id=str(user.id),
            username=user.username.root if user.username else None,
        )

        if request.auto_login:
            session = await self.session_service.issue(
                user.id,
                self.session_service.default_options(),
                AuthProvider.CREDENTIALS,
            )
            response.session_id = session.id
            response.expires_at = session.expires_at
            logfire.info("Registered user signed in", user_id=str(user.id))

        return response
