"""Application layer DI providers."""

from dishka import Scope, provide

from idlink.application.usecase.account import (
    ConfirmLinkUseCase,
    DeactivateAccountUseCase,
    FindLinkCandidatesUseCase,
    GetAccountProfileUseCase,
    GetBackupCodesStatusUseCase,
    RegenerateBackupCodesUseCase,
)
from idlink.application.usecase.auth import (
    AuthenticateUseCase,
    GetCurrentUserUseCase,
    OAuthLoginUseCase,
    RegisterUseCase,
    RequestPhoneCodeUseCase,
    VerifyPhoneUseCase,
)
from idlink.config import LinkingSettings
from idlink.domain.service import (
    ActivityService,
    AuthService,
    CandidateService,
    CredentialService,
    GroupService,
    JWTService,
    LinkingService,
    TwoFactorService,
    UserIdentityService,
    UserService,
)
from idlink.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_authenticate_use_case(
        self,
        credential_service: CredentialService,
        group_service: GroupService,
        linking_service: LinkingService,
        user_service: UserService,
        activity_service: ActivityService,
        jwt_service: JWTService,
        linking_settings: LinkingSettings,
    ) -> AuthenticateUseCase:
        """Provide authenticate use case."""
        return AuthenticateUseCase(
            credential_service=credential_service,
            group_service=group_service,
            linking_service=linking_service,
            user_service=user_service,
            activity_service=activity_service,
            jwt_service=jwt_service,
            linking_settings=linking_settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_oauth_login_use_case(
        self,
        auth_service: AuthService,
        authenticate_use_case: AuthenticateUseCase,
        activity_service: ActivityService,
    ) -> OAuthLoginUseCase:
        """Provide OAuth login use case."""
        return OAuthLoginUseCase(
            auth_service=auth_service,
            authenticate_use_case=authenticate_use_case,
            activity_service=activity_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_current_user_use_case(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        group_service: GroupService,
    ) -> GetCurrentUserUseCase:
        """Provide get current user use case."""
        return GetCurrentUserUseCase(
            jwt_service=jwt_service,
            user_service=user_service,
            group_service=group_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_register_use_case(
        self,
        user_service: UserService,
        credential_service: CredentialService,
        candidate_service: CandidateService,
        activity_service: ActivityService,
        authenticate_use_case: AuthenticateUseCase,
    ) -> RegisterUseCase:
        """Provide register use case."""
        return RegisterUseCase(
            user_service=user_service,
            credential_service=credential_service,
            candidate_service=candidate_service,
            activity_service=activity_service,
            authenticate_use_case=authenticate_use_case,
        )

    @provide(scope=Scope.REQUEST)
    def get_request_phone_code_use_case(
        self, credential_service: CredentialService, user_service: UserService
    ) -> RequestPhoneCodeUseCase:
        """Provide request phone code use case."""
        return RequestPhoneCodeUseCase(
            credential_service=credential_service, user_service=user_service
        )

    @provide(scope=Scope.REQUEST)
    def get_verify_phone_use_case(
        self,
        credential_service: CredentialService,
        user_service: UserService,
        activity_service: ActivityService,
        authenticate_use_case: AuthenticateUseCase,
    ) -> VerifyPhoneUseCase:
        """Provide verify phone use case."""
        return VerifyPhoneUseCase(
            credential_service=credential_service,
            user_service=user_service,
            activity_service=activity_service,
            authenticate_use_case=authenticate_use_case,
        )

    # Account use cases
    @provide(scope=Scope.REQUEST)
    def get_find_link_candidates_use_case(
        self,
        user_service: UserService,
        candidate_service: CandidateService,
        credential_service: CredentialService,
    ) -> FindLinkCandidatesUseCase:
        """Provide find link candidates use case."""
        return FindLinkCandidatesUseCase(
            user_service=user_service,
            candidate_service=candidate_service,
            credential_service=credential_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_confirm_link_use_case(
        self,
        user_service: UserService,
        candidate_service: CandidateService,
        group_service: GroupService,
        linking_service: LinkingService,
    ) -> ConfirmLinkUseCase:
        """Provide confirm link use case."""
        return ConfirmLinkUseCase(
            user_service=user_service,
            candidate_service=candidate_service,
            group_service=group_service,
            linking_service=linking_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_deactivate_account_use_case(
        self, group_service: GroupService
    ) -> DeactivateAccountUseCase:
        """Provide deactivate account use case."""
        return DeactivateAccountUseCase(group_service=group_service)

    @provide(scope=Scope.REQUEST)
    def get_account_profile_use_case(
        self,
        user_service: UserService,
        user_identity_service: UserIdentityService,
        group_service: GroupService,
    ) -> GetAccountProfileUseCase:
        """Provide get account profile use case."""
        return GetAccountProfileUseCase(
            user_service=user_service,
            user_identity_service=user_identity_service,
            group_service=group_service,
        )

    # Two-factor use cases
    @provide(scope=Scope.REQUEST)
    def get_backup_codes_status_use_case(
        self, two_factor_service: TwoFactorService
    ) -> GetBackupCodesStatusUseCase:
        """Provide backup codes status use case."""
        return GetBackupCodesStatusUseCase(two_factor_service=two_factor_service)

    @provide(scope=Scope.REQUEST)
    def get_regenerate_backup_codes_use_case(
        self, two_factor_service: TwoFactorService
    ) -> RegenerateBackupCodesUseCase:
        """Provide regenerate backup codes use case."""
        return RegenerateBackupCodesUseCase(two_factor_service=two_factor_service)
