"""Phone verification use cases."""

import logfire
from pydantic import BaseModel

from idlink.domain.error import (
    AccountNotFoundForCredentialError,
    InvalidOrExpiredCodeError,
    MissingCredentialsError,
)
from idlink.domain.service import ActivityService, CredentialService, UserService
from idlink.domain.value import ActivityEventType, RegisterSource

from .authenticate import AuthenticateResponse, AuthenticateUseCase


class RequestPhoneCodeRequest(BaseModel):
    """Ask for a one-time code by SMS."""

    phone_number: str


class RequestPhoneCodeResponse(BaseModel):
    """Always the same answer, so it cannot reveal whether a number is known."""

    sent: bool = True


class RequestPhoneCodeUseCase:
    """Use case for sending a sign-in or verification code."""

    def __init__(
        self, credential_service: CredentialService, user_service: UserService
    ) -> None:
        self.credential_service = credential_service
        self.user_service = user_service

    async def execute(self, request: RequestPhoneCodeRequest) -> RequestPhoneCodeResponse:
        """Send a code if an active record has this number.

        Raises:
            InvalidPhoneFormatError: If the number cannot be parsed
        """
        phone_number = self.credential_service.normalize_phone(request.phone_number)
        if await self.user_service.get_user_by_phone(phone_number):
            await self.credential_service.send_sms_code(phone_number)
        else:
            logfire.info("Phone code requested for unknown number")
        return RequestPhoneCodeResponse()


class VerifyPhoneRequest(BaseModel):
    """Prove control of a phone number."""

    phone_number: str
    code: str


class VerifyPhoneUseCase:
    """Use case for verifying a record's phone number and signing it in."""

    def __init__(
        self,
        credential_service: CredentialService,
        user_service: UserService,
        activity_service: ActivityService,
        authenticate_use_case: AuthenticateUseCase,
    ) -> None:
        self.credential_service = credential_service
        self.user_service = user_service
        self.activity_service = activity_service
        self.authenticate_use_case = authenticate_use_case

    async def execute(self, request: VerifyPhoneRequest) -> AuthenticateResponse:
        """Check the code, mark the phone verified and issue a session.

        Raises:
            MissingCredentialsError: If the code is blank
            AccountNotFoundForCredentialError: If no active record has the number
            InvalidOrExpiredCodeError: If the code is rejected or times out
        """
        if not request.code.strip():
            raise MissingCredentialsError(["code"])
        phone_number = self.credential_service.normalize_phone(request.phone_number)

        user = await self.user_service.get_user_by_phone(phone_number)
        if user is None:
            raise AccountNotFoundForCredentialError("No active account for phone")

        if not await self.credential_service.check_sms_code(phone_number, request.code):
            await self.activity_service.record(
                str(user.id),
                ActivityEventType.SIGNIN_FAILED,
                method=RegisterSource.PHONE.value,
                reason=InvalidOrExpiredCodeError.kind.value,
            )
            raise InvalidOrExpiredCodeError()

        if not user.phone_verified:
            user = await self.user_service.mark_phone_verified(user)
            await self.activity_service.record(
                str(user.id), ActivityEventType.PHONE_VERIFIED
            )
            logfire.info("Phone verified", user_id=str(user.id))

        return await self.authenticate_use_case.issue_session(user, RegisterSource.PHONE)
