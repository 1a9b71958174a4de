"""Credential verification domain service."""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

import logfire

from idlink.config import AuthSettings, SmsSettings, TwoFactorSettings
from idlink.domain.error import (
    AccountNotFoundForCredentialError,
    ExternalServiceError,
    InfrastructureError,
    InvalidCredentialError,
    InvalidOrExpiredCodeError,
    InvalidPhoneFormatError,
    InvalidTwoFactorCodeError,
    MissingCredentialsError,
    PhoneUnverifiedError,
    TwoFactorRequiredError,
    WrongProviderError,
)
from idlink.domain.model import User
from idlink.domain.repository import UserRepository
from idlink.domain.value import (
    AuthProvider,
    Credential,
    EmailCredential,
    OAuthCredential,
    PhoneCredential,
    RegisterSource,
    UserId,
    normalize_email,
    normalize_phone,
)
from idlink.util.password import verify_password
from idlink.util.totp import verify_totp

from .base import Service
from .user_identity_service import UserIdentityService
from .user_service import UserService


class SmsClient:
    """SMS one-time code collaborator.

    Implementations raise ExternalServiceError when the provider cannot be
    reached.
    """

    async def send_code(self, phone_number: str) -> None:
        """Send a one-time code to an E.164 number."""
        raise NotImplementedError

    async def check_code(self, phone_number: str, code: str) -> bool:
        """Check a code previously sent to an E.164 number.

        Returns:
            True if the code is valid and unexpired
        """
        raise NotImplementedError


@dataclass
class VerifiedCredential:
    """Outcome of a successful credential check."""

    user: User
    method: RegisterSource
    created: bool = False  # OAuth sign-in created a new record
    provider_linked: bool = False  # OAuth account attached to an existing record
    used_backup_code: bool = False
    email_vouched_by_provider: bool = False


class CredentialService(Service):
    """Validates one proof of identity and returns the matching record.

    OAuth credentials arrive already vouched for by the provider and never
    fail on credential grounds: they resolve to a returning record, attach to
    an existing record with the same email, or create a new one.
    """

    def __init__(
        self,
        user_service: UserService,
        user_identity_service: UserIdentityService,
        user_repository: UserRepository,
        sms_client: SmsClient,
        auth_settings: AuthSettings,
        two_factor_settings: TwoFactorSettings,
        sms_settings: SmsSettings,
    ) -> None:
        self.user_service = user_service
        self.user_identity_service = user_identity_service
        self.user_repository = user_repository
        self.sms_client = sms_client
        self.auth_settings = auth_settings
        self.two_factor_settings = two_factor_settings
        self.sms_settings = sms_settings

    def validate(self, credential: Credential) -> Credential:
        """Reject malformed input before anything touches the store.

        Returns:
            The credential with its phone number normalized to E.164

        Raises:
            MissingCredentialsError: If required fields are blank
            InvalidPhoneFormatError: If the phone number cannot be parsed
        """
        missing = credential.missing_fields()
        if missing:
            raise MissingCredentialsError(missing)
        if isinstance(credential, PhoneCredential):
            return credential.model_copy(
                update={"phone_number": self.normalize_phone(credential.phone_number)}
            )
        return credential

    def normalize_phone(self, phone_number: str) -> str:
        """Normalize to E.164 using the configured default region.

        Raises:
            InvalidPhoneFormatError: If the number is not valid
        """
        try:
            return normalize_phone(phone_number, self.sms_settings.default_region)
        except ValueError:
            raise InvalidPhoneFormatError(f"Unparseable phone number: {phone_number!r}")

    async def verify(self, credential: Credential) -> VerifiedCredential:
        """Verify a credential of any method.

        Args:
            credential: Validated credential (see validate())

        Returns:
            The matched record and how it was matched

        Raises:
            AuthenticationFailure: If the credential does not prove identity
        """
        if isinstance(credential, EmailCredential):
            return await self.verify_password(credential)
        if isinstance(credential, PhoneCredential):
            return await self.verify_phone(credential)
        return await self.resolve_oauth(credential)

    async def verify_password(self, credential: EmailCredential) -> VerifiedCredential:
        """Check email + password, then the second factor when 2FA is on."""
        email = normalize_email(credential.email)
        with logfire.span("credential_service.verify_password"):
            user = await self.user_service.get_user_by_email(email)
            if user is None:
                raise AccountNotFoundForCredentialError(f"No active account for {email}")

            if not user.password_hash:
                if user.register_source.is_oauth:
                    provider = AuthProvider(user.register_source.value)
                    raise WrongProviderError(provider.display_name)
                raise InvalidCredentialError("Account has no password")

            if not verify_password(credential.password, user.password_hash):
                raise InvalidCredentialError("Password mismatch")

            used_backup_code = False
            if user.two_factor_enabled:
                if not credential.two_factor_code:
                    logfire.info("Second factor required", user_id=str(user.id))
                    raise TwoFactorRequiredError()
                used_backup_code = await self.verify_second_factor(
                    user, credential.two_factor_code
                )

            return VerifiedCredential(
                user=user,
                method=RegisterSource.CREDENTIALS,
                used_backup_code=used_backup_code,
            )

    async def verify_second_factor(self, user: User, code: str) -> bool:
        """Accept a TOTP code or consume one backup code.

        Args:
            user: Record with 2FA enabled
            code: TOTP code or backup code, any case

        Returns:
            True if a backup code was consumed, False for a TOTP code

        Raises:
            InvalidTwoFactorCodeError: If neither matches
        """
        if user.two_factor_secret and verify_totp(
            user.two_factor_secret, code, self.two_factor_settings.totp_valid_window
        ):
            return False

        if await self.user_repository.remove_backup_code(user.id, code.strip().upper()):
            logfire.info("Backup code consumed", user_id=str(user.id))
            return True

        logfire.warn("Invalid second factor", user_id=str(user.id))
        raise InvalidTwoFactorCodeError()

    async def verify_phone(self, credential: PhoneCredential) -> VerifiedCredential:
        """Check a phone number's one-time code with the SMS collaborator."""
        with logfire.span("credential_service.verify_phone"):
            user = await self.user_service.get_user_by_phone(credential.phone_number)
            if user is None:
                raise AccountNotFoundForCredentialError("No active account for phone")
            if not user.phone_verified:
                raise PhoneUnverifiedError("Phone number has not been verified")

            if not await self.check_sms_code(credential.phone_number, credential.code):
                raise InvalidOrExpiredCodeError()

            return VerifiedCredential(user=user, method=RegisterSource.PHONE)

    async def check_sms_code(self, phone_number: str, code: str) -> bool:
        """Ask the SMS collaborator to check a code.

        A timeout counts as a rejected code.

        Raises:
            InfrastructureError: If the SMS provider cannot be reached
        """
        try:
            return await asyncio.wait_for(
                self.sms_client.check_code(phone_number, code.strip()),
                timeout=self.auth_settings.external_call_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logfire.warn("SMS code check timed out")
            return False
        except ExternalServiceError as e:
            logfire.error("SMS provider unavailable", error=str(e))
            raise InfrastructureError(str(e)) from e

    async def send_sms_code(self, phone_number: str) -> None:
        """Send a one-time code, failing closed on timeout.

        Raises:
            InfrastructureError: If the code could not be sent
        """
        try:
            await asyncio.wait_for(
                self.sms_client.send_code(phone_number),
                timeout=self.auth_settings.external_call_timeout_seconds,
            )
        except (asyncio.TimeoutError, ExternalServiceError) as e:
            logfire.error("SMS send failed", error=str(e))
            raise InfrastructureError(str(e) or "SMS send timed out") from e

    async def resolve_oauth(self, credential: OAuthCredential) -> VerifiedCredential:
        """Resolve a provider-vouched profile to a record.

        Steps:
        1. Returning user: the provider account is already attached
        2. Existing active record with the same email: attach the provider
           account, extend linked_providers and mark the email verified
        3. Otherwise create a new record
        """
        provider = credential.provider
        email = normalize_email(credential.email) if credential.email else None

        with logfire.span(
            "credential_service.resolve_oauth",
            provider=provider.value,
            provider_account_id=credential.provider_account_id,
        ):
            identity = await self.user_identity_service.get_identity_by_provider(
                provider, credential.provider_account_id
            )
            if identity:
                user = await self.user_repository.find_by_id(identity.user_id)
                if user is None or not user.is_active:
                    raise AccountNotFoundForCredentialError(
                        f"Provider account bound to inactive record {identity.user_id}"
                    )
                await self.user_identity_service.record_login(identity)
                user = await self._refresh_from_provider(user, credential, email)
                logfire.info("Returning OAuth user", user_id=str(user.id))
                return VerifiedCredential(
                    user=user,
                    method=RegisterSource.from_provider(provider),
                    email_vouched_by_provider=email is not None,
                )

            existing = await self.user_service.get_user_by_email(email) if email else None
            if existing:
                await self.user_identity_service.attach(
                    existing.id, provider, credential.provider_account_id, email
                )
                user = await self._refresh_from_provider(existing, credential, email)
                logfire.info(
                    "OAuth account attached to existing user",
                    user_id=str(user.id),
                    provider=provider.value,
                )
                return VerifiedCredential(
                    user=user,
                    method=RegisterSource.from_provider(provider),
                    provider_linked=True,
                    email_vouched_by_provider=True,
                )

            now = datetime.now()
            user = await self.user_service.create(
                User(
                    id=UserId(uuid4()),
                    email=email,
                    name=credential.name,
                    image=credential.image,
                    register_source=RegisterSource.from_provider(provider),
                    linked_providers=frozenset({provider}),
                    verified_emails=frozenset({email}) if email else frozenset(),
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.user_identity_service.attach(
                user.id, provider, credential.provider_account_id, email
            )
            logfire.info(
                "New OAuth user created", user_id=str(user.id), provider=provider.value
            )
            return VerifiedCredential(
                user=user,
                method=RegisterSource.from_provider(provider),
                created=True,
                email_vouched_by_provider=email is not None,
            )

    async def _refresh_from_provider(
        self, user: User, credential: OAuthCredential, email: str | None
    ) -> User:
        """Fold provider data into a record, writing only when something changed."""
        changes: dict = {}
        if credential.provider not in user.linked_providers:
            changes["linked_providers"] = user.linked_providers | {credential.provider}
        if email and email == user.email and not user.email_verified:
            changes["verified_emails"] = user.verified_emails | {email}
        if not user.image and credential.image:
            changes["image"] = credential.image
        if not user.name and credential.name:
            changes["name"] = credential.name
        if not changes:
            return user
        return await self.user_service.update(user.model_copy(update=changes))
