"""Role administration use cases."""

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from authhost.application.usecase.base import BaseUseCase
from authhost.domain.error import NotAuthorizedError, ValidationError
from authhost.domain.model import User
from authhost.domain.service import SessionService, UserService
from authhost.domain.value import ADMIN_ROLE, RoleName, SessionId


class RolesRequest(BaseModel):
    """Assign or unassign roles for a user, requested by an admin."""

    session_id: str
    username: str
    roles: list[str] = Field(min_length=1)


class RolesResponse(BaseModel):
    """Roles held by the user afterwards."""

    user_id: str
    username: str
    roles: list[str]


class _RoleAdministration:
    def __init__(
        self, user_service: UserService, session_service: SessionService
    ) -> None:
        self.user_service = user_service
        self.session_service = session_service

    async def _authorize(self, request: RolesRequest) -> User:
        """Check the caller is an admin and return the target user."""
        session = await self.session_service.refresh(SessionId(request.session_id))
        actor_id = session.user_id
        if ADMIN_ROLE not in await self.user_service.roles_of(actor_id):
            raise NotAuthorizedError(ADMIN_ROLE.root)
        return await self.user_service.get_by_username(request.username)

    @staticmethod
    def _role_names(roles: list[str]) -> list[RoleName]:
        try:
            return [RoleName(role.strip()) for role in roles]
        except PydanticValidationError as e:
            raise ValidationError(str(e.errors()[0]["msg"])) from e

    async def _response(self, user: User) -> RolesResponse:
        roles = await self.user_service.roles_of(user.id)
        return RolesResponse(
            user_id=str(user.id),
            username=user.username.root if user.username else "",
            roles=sorted(role.root for role in roles),
        )


class AssignRolesUseCase(_RoleAdministration, BaseUseCase[RolesRequest, RolesResponse]):
    """Use case for granting roles. Admin only."""

    async def execute(self, request: RolesRequest) -> RolesResponse:
        """Grant roles to the user named in the request.

        Raises:
            NotAuthorizedError: If the caller is not an admin
            NotFoundError: If the target user does not exist
        """
        user = await self._authorize(request)
        await self.user_service.assign_roles(user.id, self._role_names(request.roles))
        return await self._response(user)


class UnassignRolesUseCase(
    _RoleAdministration, BaseUseCase[RolesRequest, RolesResponse]
):
    """Use case for revoking roles. Admin only."""

    async def execute(self, request: RolesRequest) -> RolesResponse:
        """Revoke roles from the user named in the request.

        Raises:
            NotAuthorizedError: If the caller is not an admin
            NotFoundError: If the target user does not exist
        """
        user = await self._authorize(request)
        await self.user_service.unassign_roles(
            user.id, self._role_names(request.roles)
        )
        return await self._response(user)
