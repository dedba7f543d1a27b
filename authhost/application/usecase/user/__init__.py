"""User use cases."""

from .assign_roles import AssignRolesUseCase, UnassignRolesUseCase
from .change_password import ChangePasswordUseCase
from .delete_account import DeleteAccountUseCase
from .register import RegisterUseCase

__all__ = [
    "AssignRolesUseCase",
    "ChangePasswordUseCase",
    "DeleteAccountUseCase",
    "RegisterUseCase",
    "UnassignRolesUseCase",
]
