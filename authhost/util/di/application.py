"""Application layer DI providers."""

from dishka import Scope, provide

from authhost.application.usecase.auth import (
    AuthenticateUseCase,
    DigestChallengeUseCase,
    GetCurrentUserUseCase,
    LogoutUseCase,
    RefreshSessionUseCase,
    StartLoginUseCase,
)
from authhost.application.usecase.user import (
    AssignRolesUseCase,
    ChangePasswordUseCase,
    DeleteAccountUseCase,
    RegisterUseCase,
    UnassignRolesUseCase,
)
from authhost.config import AuthSettings
from authhost.domain.service import (
    AuthService,
    CredentialService,
    SessionService,
    UserService,
)
from authhost.util.clock import Clock
from authhost.util.di.base import ProviderBase
from authhost.util.digest import DigestNonceIssuer


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    scope = Scope.REQUEST

    # Auth use cases
    @provide
    def get_authenticate_use_case(
        self,
        credential_service: CredentialService,
        auth_service: AuthService,
        user_service: UserService,
        session_service: SessionService,
        auth_settings: AuthSettings,
    ) -> AuthenticateUseCase:
        """Provide authenticate use case."""
        return AuthenticateUseCase(
            credential_service=credential_service,
            auth_service=auth_service,
            user_service=user_service,
            session_service=session_service,
            auth_settings=auth_settings,
        )

    @provide
    def get_start_login_use_case(
        self, auth_service: AuthService, auth_settings: AuthSettings
    ) -> StartLoginUseCase:
        """Provide start OAuth login use case."""
        return StartLoginUseCase(auth_service=auth_service, auth_settings=auth_settings)

    @provide
    def get_digest_challenge_use_case(
        self,
        nonce_issuer: DigestNonceIssuer,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> DigestChallengeUseCase:
        """Provide digest challenge use case."""
        return DigestChallengeUseCase(
            nonce_issuer=nonce_issuer, auth_settings=auth_settings, clock=clock
        )

    @provide
    def get_current_user_use_case(
        self, session_service: SessionService, user_service: UserService
    ) -> GetCurrentUserUseCase:
        """Provide get current user use case."""
        return GetCurrentUserUseCase(
            session_service=session_service, user_service=user_service
        )

    @provide
    def get_logout_use_case(self, session_service: SessionService) -> LogoutUseCase:
        """Provide logout use case."""
        return LogoutUseCase(session_service=session_service)

    @provide
    def get_refresh_session_use_case(
        self, session_service: SessionService
    ) -> RefreshSessionUseCase:
        """Provide refresh session use case."""
        return RefreshSessionUseCase(session_service=session_service)

    # User use cases
    @provide
    def get_register_use_case(
        self, user_service: UserService, session_service: SessionService
    ) -> RegisterUseCase:
        """Provide register use case."""
        return RegisterUseCase(user_service=user_service, session_service=session_service)

    @provide
    def get_change_password_use_case(
        self, user_service: UserService, session_service: SessionService
    ) -> ChangePasswordUseCase:
        """Provide change password use case."""
        return ChangePasswordUseCase(
            user_service=user_service, session_service=session_service
        )

    @provide
    def get_delete_account_use_case(
        self, user_service: UserService, session_service: SessionService
    ) -> DeleteAccountUseCase:
        """Provide delete account use case."""
        return DeleteAccountUseCase(
            user_service=user_service, session_service=session_service
        )

    @provide
    def get_assign_roles_use_case(
        self, user_service: UserService, session_service: SessionService
    ) -> AssignRolesUseCase:
        """Provide assign roles use case."""
        return AssignRolesUseCase(
            user_service=user_service, session_service=session_service
        )

    @provide
    def get_unassign_roles_use_case(
        self, user_service: UserService, session_service: SessionService
    ) -> UnassignRolesUseCase:
        """Provide unassign roles use case."""
        return UnassignRolesUseCase(
            user_service=user_service, session_service=session_service
        )
