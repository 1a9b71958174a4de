"""Domain layer DI providers."""

from dishka import Scope, provide

from idlink.adapter.sms import VerifySmsClient
from idlink.config import AuthSettings, LinkingSettings, SmsSettings, TwoFactorSettings
from idlink.domain.repository import (
    ActivityRepository,
    UserIdentityRepository,
    UserRepository,
)
from idlink.domain.service import (
    ActivityService,
    AuthService,
    CandidateService,
    CredentialService,
    GroupService,
    JWTService,
    LinkingService,
    OAuthClient,
    TwoFactorService,
    UserIdentityService,
    UserService,
)
from idlink.domain.value import AuthProvider
from idlink.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self,
        oauth_clients: dict[AuthProvider, OAuthClient],
        auth_settings: AuthSettings,
    ) -> AuthService:
        """Provide multi-provider authentication domain service.

        Args:
            oauth_clients: Dictionary mapping providers to their OAuth clients
            auth_settings: Authentication settings

        Returns:
            AuthService configured with all available OAuth clients
        """
        return AuthService(oauth_clients=oauth_clients, auth_settings=auth_settings)

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_activity_service(
        self, activity_repository: ActivityRepository
    ) -> ActivityService:
        """Provide activity event domain service."""
        return ActivityService(activity_repository=activity_repository)

    @provide
    def get_user_service(self, user_repository: UserRepository) -> UserService:
        """Provide user domain service."""
        return UserService(user_repository=user_repository)

    @provide
    def get_user_identity_service(
        self, user_identity_repository: UserIdentityRepository
    ) -> UserIdentityService:
        """Provide user identity domain service."""
        return UserIdentityService(user_identity_repository=user_identity_repository)

    @provide
    def get_credential_service(
        self,
        user_service: UserService,
        user_identity_service: UserIdentityService,
        user_repository: UserRepository,
        sms_client: VerifySmsClient,
        auth_settings: AuthSettings,
        two_factor_settings: TwoFactorSettings,
        sms_settings: SmsSettings,
    ) -> CredentialService:
        """Provide credential verification domain service."""
        return CredentialService(
            user_service=user_service,
            user_identity_service=user_identity_service,
            user_repository=user_repository,
            sms_client=sms_client,
            auth_settings=auth_settings,
            two_factor_settings=two_factor_settings,
            sms_settings=sms_settings,
        )

    @provide
    def get_candidate_service(
        self,
        user_repository: UserRepository,
        user_identity_repository: UserIdentityRepository,
        linking_settings: LinkingSettings,
    ) -> CandidateService:
        """Provide link candidate domain service."""
        return CandidateService(
            user_repository=user_repository,
            user_identity_repository=user_identity_repository,
            linking_settings=linking_settings,
        )

    @provide
    def get_linking_service(
        self,
        user_repository: UserRepository,
        candidate_service: CandidateService,
        activity_service: ActivityService,
        linking_settings: LinkingSettings,
    ) -> LinkingService:
        """Provide account linking domain service."""
        return LinkingService(
            user_repository=user_repository,
            candidate_service=candidate_service,
            activity_service=activity_service,
            linking_settings=linking_settings,
        )

    @provide
    def get_group_service(
        self,
        user_repository: UserRepository,
        activity_service: ActivityService,
        linking_settings: LinkingSettings,
    ) -> GroupService:
        """Provide group domain service."""
        return GroupService(
            user_repository=user_repository,
            activity_service=activity_service,
            linking_settings=linking_settings,
        )

    @provide
    def get_two_factor_service(
        self,
        user_repository: UserRepository,
        activity_service: ActivityService,
        two_factor_settings: TwoFactorSettings,
    ) -> TwoFactorService:
        """Provide two-factor domain service."""
        return TwoFactorService(
            user_repository=user_repository,
            activity_service=activity_service,
            two_factor_settings=two_factor_settings,
        )
