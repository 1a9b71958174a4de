"""OAuth login use case."""

import logfire
from pydantic import BaseModel

from idlink.domain.error import AuthenticationFailure
from idlink.domain.service import ActivityService, AuthService
from idlink.domain.value import (
    ActivityEventType,
    AuthProvider,
    OAuthCredential,
    OAuthProviderInfo,
)

from .authenticate import AuthenticateRequest, AuthenticateResponse, AuthenticateUseCase


class OAuthLoginRequest(BaseModel):
    """Login request from OAuth callback.

    These parameters come from the OAuth provider in the callback URL.
    """

    provider: AuthProvider  # Which provider is handling this login
    code: str  # OAuth authorization code
    state: str  # State parameter for session verification


class OAuthLoginUseCase:
    """Use case for completing an OAuth handshake and signing in."""

    def __init__(
        self,
        auth_service: AuthService,
        authenticate_use_case: AuthenticateUseCase,
        activity_service: ActivityService,
    ) -> None:
        """Initialize OAuth login use case.

        Args:
            auth_service: OAuth domain service (handles all providers)
            authenticate_use_case: Sign-in orchestrator
            activity_service: Activity event service
        """
        self.auth_service = auth_service
        self.authenticate_use_case = authenticate_use_case
        self.activity_service = activity_service

    async def execute(self, request: OAuthLoginRequest) -> AuthenticateResponse:
        """Execute OAuth login flow.

        Steps:
        1. Complete the code exchange with the provider
        2. Turn the vouched profile into an OAuth credential
        3. Authenticate it (returning user, email attach, or new record)

        Args:
            request: Login request with OAuth callback parameters

        Returns:
            Session token and principal

        Raises:
            InvalidCredentialError: If the code exchange fails
        """
        try:
            info = await self.auth_service.complete_login(
                request.provider, request.code, request.state
            )
        except AuthenticationFailure as e:
            await self.activity_service.record(
                request.provider.value,
                ActivityEventType.SIGNIN_FAILED,
                method=request.provider.value,
                reason=e.kind.value,
            )
            raise

        logfire.info(
            "OAuth completed",
            provider=info.provider.value,
            provider_account_id=info.provider_account_id,
        )

        return await self.authenticate_use_case.execute(
            AuthenticateRequest(credential=self.to_credential(info))
        )

    @staticmethod
    def to_credential(info: OAuthProviderInfo) -> OAuthCredential:
        """Build a credential, dropping an email the provider did not verify."""
        return OAuthCredential(
            provider=info.provider,
            provider_account_id=info.provider_account_id,
            email=info.email if info.email_verified else None,
            name=info.name,
            image=info.image,
        )
