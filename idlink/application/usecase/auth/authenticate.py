"""Authenticate use case.

Start -> CredentialCheck -> (TwoFactorRequired -> CredentialCheck with code)
      -> GroupResolve -> [AutoLinkEvaluate] -> SessionIssue
"""

import logfire
from pydantic import BaseModel

from idlink.config import LinkingSettings
from idlink.domain.error import (
    AuthenticationFailure,
    InfrastructureError,
    LinkingError,
    StoreUnavailableError,
)
from idlink.domain.model import Principal, User
from idlink.domain.service import (
    ActivityService,
    CredentialService,
    GroupService,
    JWTService,
    LinkingService,
    UserService,
    VerifiedCredential,
)
from idlink.domain.value import (
    ActivityEventType,
    Credential,
    EmailCredential,
    OAuthCredential,
    PhoneCredential,
    RegisterSource,
)


class AuthenticateRequest(BaseModel):
    """Sign-in request carrying one credential."""

    credential: Credential


class AuthenticateResponse(BaseModel):
    """Session issued for a successful sign-in."""

    token: str
    principal: Principal
    created: bool = False  # OAuth sign-in created the record
    auto_linked: bool = False  # Sign-in merged the record into a group


def presented_subject(credential: Credential) -> str:
    """Identifier used as the event subject when no record is known yet."""
    if isinstance(credential, EmailCredential):
        return credential.email.strip().lower()
    if isinstance(credential, PhoneCredential):
        return credential.phone_number
    return f"{credential.provider.value}:{credential.provider_account_id}"


class AuthenticateUseCase:
    """Use case for signing in with any credential method."""

    def __init__(
        self,
        credential_service: CredentialService,
        group_service: GroupService,
        linking_service: LinkingService,
        user_service: UserService,
        activity_service: ActivityService,
        jwt_service: JWTService,
        linking_settings: LinkingSettings,
    ) -> None:
        self.credential_service = credential_service
        self.group_service = group_service
        self.linking_service = linking_service
        self.user_service = user_service
        self.activity_service = activity_service
        self.jwt_service = jwt_service
        self.linking_settings = linking_settings

    async def execute(self, request: AuthenticateRequest) -> AuthenticateResponse:
        """Authenticate a credential and issue a session.

        Args:
            request: Request with the credential

        Returns:
            Session token and the group-aware principal

        Raises:
            ClientError: If the credential is malformed (nothing is recorded)
            AuthenticationFailure: If the credential does not prove identity;
                recorded as a signin_failed event
            InfrastructureError: If the store or a collaborator is unavailable
        """
        credential = self.credential_service.validate(request.credential)
        method = (
            RegisterSource.from_provider(credential.provider)
            if isinstance(credential, OAuthCredential)
            else RegisterSource(credential.method)
        )

        with logfire.span("authenticate", method=method.value):
            try:
                return await self._authenticate(credential, method)
            except StoreUnavailableError as e:
                logfire.error("Store unavailable during sign-in", error=str(e))
                raise InfrastructureError(str(e)) from e

    async def _authenticate(
        self, credential: Credential, method: RegisterSource
    ) -> AuthenticateResponse:
        try:
            verified = await self.credential_service.verify(credential)
        except AuthenticationFailure as e:
            await self.activity_service.record(
                presented_subject(credential),
                ActivityEventType.SIGNIN_FAILED,
                method=method.value,
                reason=e.kind.value,
            )
            logfire.warn("Sign-in failed", method=method.value, reason=e.kind.value)
            raise

        await self._record_side_events(verified)

        user = verified.user
        auto_linked = False
        if isinstance(credential, OAuthCredential):
            user, auto_linked = await self._evaluate_auto_link(user, credential)

        response = await self.issue_session(user, method)
        return response.model_copy(
            update={"created": verified.created, "auto_linked": auto_linked}
        )

    async def _record_side_events(self, verified: VerifiedCredential) -> None:
        user_id = str(verified.user.id)
        if verified.created:
            await self.activity_service.record(
                user_id,
                ActivityEventType.ACCOUNT_CREATED,
                register_source=verified.method.value,
            )
        if verified.provider_linked:
            await self.activity_service.record(
                user_id, ActivityEventType.OAUTH_LINKED, provider=verified.method.value
            )
        if verified.used_backup_code:
            await self.activity_service.record(
                user_id, ActivityEventType.BACKUP_CODE_USED
            )

    async def _evaluate_auto_link(
        self, user: User, credential: OAuthCredential
    ) -> tuple[User, bool]:
        """Merge an ungrouped OAuth record with a record sharing its OAuth email.

        A failed merge never blocks the sign-in.
        """
        if user.group_id is not None or not credential.email:
            return user, False

        try:
            result = await self.linking_service.auto_link_if_confident(
                user.id,
                email=credential.email,
                name=credential.name,
                min_confidence=self.linking_settings.oauth_auto_link_confidence,
                email_vouched_by_provider=True,
            )
        except LinkingError as e:
            logfire.warn("Auto-link skipped", user_id=str(user.id), reason=e.kind.value)
            return user, False

        if not result.linked:
            return user, False
        return await self.user_service.get_by_id(user.id), True

    async def issue_session(
        self, user: User, method: RegisterSource
    ) -> AuthenticateResponse:
        """Finish a successful sign-in: record it and mint the session token.

        Args:
            user: Authenticated record
            method: Sign-in method used

        Returns:
            Session token and principal
        """
        await self.user_service.touch_last_sign_in(user.id)
        await self.activity_service.record(
            str(user.id), ActivityEventType.SIGNIN_SUCCESS, method=method.value
        )

        principal = await self.group_service.resolve_principal(user)
        token = self.jwt_service.create_token(principal)

        logfire.info(
            "Sign-in succeeded",
            user_id=str(user.id),
            method=method.value,
            group_id=str(principal.group_id) if principal.group_id else None,
        )
        return AuthenticateResponse(token=token, principal=principal)
