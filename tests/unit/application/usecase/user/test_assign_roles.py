"""Unit tests for role administration use cases."""

import pytest
from dishka import AsyncContainer

from authhost.application.usecase.user.assign_roles import (
    AssignRolesUseCase,
    RolesRequest,
    UnassignRolesUseCase,
)
from authhost.application.usecase.user.register import RegisterRequest, RegisterUseCase
from authhost.domain.error import NotAuthorizedError, NotFoundError, ValidationError
from authhost.domain.service import UserService
from authhost.domain.value import ADMIN_ROLE
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def _session_for(env: AsyncContainer, username: str, admin: bool = False) -> str:
    register = await env.get(RegisterUseCase)
    response = await register.execute(
        RegisterRequest(username=username, password="correct horse", auto_login=True)
    )
    if admin:
        user_service = await env.get(UserService)
        user = await user_service.get_by_username(username)
        await user_service.assign_roles(user.id, [ADMIN_ROLE])
    assert response.session_id is not None
    return response.session_id


class TestAssignRoles:
    """Tests for AssignRolesUseCase and UnassignRolesUseCase."""

    @pytest.mark.asyncio
    async def test_admin_assigns_and_unassigns(self, unit_env: AsyncContainer):
        """Should return the target's roles after each change."""
        # Arrange
        admin_session = await _session_for(unit_env, "root", admin=True)
        await _session_for(unit_env, "bob")
        assign = await unit_env.get(AssignRolesUseCase)
        unassign = await unit_env.get(UnassignRolesUseCase)

        # Act
        assigned = await assign.execute(
            RolesRequest(session_id=admin_session, username="bob", roles=["Editor", "Viewer"])
        )
        unassigned = await unassign.execute(
            RolesRequest(session_id=admin_session, username="BOB", roles=["Viewer"])
        )

        # Assert
        assert assigned.username == "bob"
        assert assigned.roles == ["Editor", "Viewer"]
        assert unassigned.roles == ["Editor"]

    @pytest.mark.asyncio
    async def test_non_admin_is_refused(self, unit_env: AsyncContainer):
        session = await _session_for(unit_env, "bob")
        assign = await unit_env.get(AssignRolesUseCase)

        with pytest.raises(NotAuthorizedError):
            await assign.execute(
                RolesRequest(session_id=session, username="bob", roles=["Admin"])
            )

    @pytest.mark.asyncio
    async def test_unknown_target(self, unit_env: AsyncContainer):
        admin_session = await _session_for(unit_env, "root", admin=True)
        assign = await unit_env.get(AssignRolesUseCase)

        with pytest.raises(NotFoundError):
            await assign.execute(
                RolesRequest(session_id=admin_session, username="nobody", roles=["Editor"])
            )

    @pytest.mark.asyncio
    async def test_invalid_role_name(self, unit_env: AsyncContainer):
        admin_session = await _session_for(unit_env, "root", admin=True)
        assign = await unit_env.get(AssignRolesUseCase)

        with pytest.raises(ValidationError):
            await assign.execute(
                RolesRequest(session_id=admin_session, username="root", roles=["   "])
            )
