"""Role administration routes. Callers need the Admin role."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from authhost.application.usecase.user import AssignRolesUseCase, UnassignRolesUseCase
from authhost.application.usecase.user.assign_roles import RolesRequest, RolesResponse
from authhost.config import Settings
from authhost.interface.api.security import require_session_token

router = APIRouter(prefix="/roles", tags=["roles"], route_class=DishkaRoute)


class RolesAPIRequest(BaseModel):
    """Target user and the roles to grant or revoke."""

    username: str
    roles: list[str] = Field(min_length=1)


@router.post("/assign", response_model=RolesResponse)
async def assign_roles(
    body: RolesAPIRequest,
    request: Request,
    assign_roles_use_case: FromDishka[AssignRolesUseCase],
    settings: FromDishka[Settings],
) -> RolesResponse:
    """Grant roles to a user.

    Example:
        POST /roles/assign
        {"username": "bob", "roles": ["Editor"]}

        Response:
        {"user_id": "...", "username": "bob", "roles": ["Editor"]}
    """
    token = require_session_token(request, settings.auth.cookie_name)
    return await assign_roles_use_case.execute(
        RolesRequest(session_id=token, username=body.username, roles=body.roles)
    )


@router.post("/unassign", response_model=RolesResponse)
async def unassign_roles(
    body: RolesAPIRequest,
    request: Request,
    unassign_roles_use_case: FromDishka[UnassignRolesUseCase],
    settings: FromDishka[Settings],
) -> RolesResponse:
    """Revoke roles from a user. Roles the user does not hold are ignored."""
    token = require_session_token(request, settings.auth.cookie_name)
    return await unassign_roles_use_case.execute(
        RolesRequest(session_id=token, username=body.username, roles=body.roles)
    )
