"""Registration and account routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel

from authhost.application.usecase.user import (
    ChangePasswordUseCase,
    DeleteAccountUseCase,
    RegisterUseCase,
)
from authhost.application.usecase.user.change_password import (
    ChangePasswordRequest,
    ChangePasswordResponse,
)
from authhost.application.usecase.user.delete_account import (
    DeleteAccountRequest,
    DeleteAccountResponse,
)
from authhost.application.usecase.user.register import (
    RegisterRequest,
    RegisterResponse,
)
from authhost.config import Settings
from authhost.interface.api.security import (
    clear_session_cookie,
    require_session_token,
    set_session_cookie,
)

router = APIRouter(tags=["users"], route_class=DishkaRoute)


class ChangePasswordAPIRequest(BaseModel):
    """API request for changing the caller's password."""

    current_password: str | None = None
    new_password: str


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    response: Response,
    register_use_case: FromDishka[RegisterUseCase],
    settings: FromDishka[Settings],
) -> RegisterResponse:
    """Register a username/password user.

    Example:
        POST /register
        {"username": "alice", "password": "correct horse", "auto_login": true}

        Response:
        {
            "user_id": "123e4567-e89b-12d3-a456-426614174000",
            "username": "alice",
            "session_id": "...",
            "expires_at": "2025-01-29T12:34:56Z"
        }
    """
    result = await register_use_case.execute(request)
    if result.session_id and result.expires_at:
        set_session_cookie(response, settings, result.session_id, result.expires_at)
    return result


@router.post("/users/me/password", response_model=ChangePasswordResponse)
async def change_password(
    body: ChangePasswordAPIRequest,
    request: Request,
    response: Response,
    change_password_use_case: FromDishka[ChangePasswordUseCase],
    settings: FromDishka[Settings],
) -> ChangePasswordResponse:
    """Change the caller's password.

    All sessions of the user are revoked, so the caller signs in again.
    """
    token = require_session_token(request, settings.auth.cookie_name)
    result = await change_password_use_case.execute(
        ChangePasswordRequest(
            session_id=token,
            current_password=body.current_password,
            new_password=body.new_password,
        )
    )
    clear_session_cookie(response, settings)
    return result


@router.delete("/users/me", response_model=DeleteAccountResponse)
async def delete_account(
    request: Request,
    response: Response,
    delete_account_use_case: FromDishka[DeleteAccountUseCase],
    settings: FromDishka[Settings],
) -> DeleteAccountResponse:
    """Delete the caller's account and revoke all of its sessions."""
    token = require_session_token(request, settings.auth.cookie_name)
    result = await delete_account_use_case.execute(
        DeleteAccountRequest(session_id=token)
    )
    clear_session_cookie(response, settings)
    return result
