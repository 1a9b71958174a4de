"""Register use case."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

import logfire
from pydantic import BaseModel

from idlink.domain.error import (
    DuplicateIdentityError,
    MissingCredentialsError,
    ValidationError,
)
from idlink.domain.model import LinkCandidate, Principal, User
from idlink.domain.service import (
    ActivityService,
    CandidateService,
    CredentialService,
    UserService,
)
from idlink.domain.value import (
    ActivityEventType,
    RegisterSource,
    UserId,
    normalize_email,
)
from idlink.util.password import hash_password

from .authenticate import AuthenticateUseCase

MIN_PASSWORD_LENGTH = 8


class RegisterRequest(BaseModel):
    """Registration with email + password, or with a phone number."""

    email: Optional[str] = None
    password: Optional[str] = None
    phone_number: Optional[str] = None
    name: Optional[str] = None


class RegisterResponse(BaseModel):
    """Registration result.

    Email registrations are signed in immediately. Phone registrations must
    verify the code sent to the number first.
    """

    user_id: str
    token: Optional[str] = None
    principal: Optional[Principal] = None
    phone_verification_required: bool = False
    # Existing accounts the user may want to link manually
    link_candidates: list[LinkCandidate] = []


class RegisterUseCase:
    """Use case for creating an email/password or phone record."""

    def __init__(
        self,
        user_service: UserService,
        credential_service: CredentialService,
        candidate_service: CandidateService,
        activity_service: ActivityService,
        authenticate_use_case: AuthenticateUseCase,
    ) -> None:
        self.user_service = user_service
        self.credential_service = credential_service
        self.candidate_service = candidate_service
        self.activity_service = activity_service
        self.authenticate_use_case = authenticate_use_case

    async def execute(self, request: RegisterRequest) -> RegisterResponse:
        """Create a record and surface link candidates for it.

        Raises:
            MissingCredentialsError: If neither email+password nor phone is given
            InvalidPhoneFormatError: If the phone number cannot be parsed
            ValidationError: If the password is too short
            DuplicateIdentityError: If the email or phone is already in use
        """
        if request.email or request.password:
            user = await self._register_email(request)
        elif request.phone_number:
            user = await self._register_phone(request)
        else:
            raise MissingCredentialsError(["email", "password"])

        await self.activity_service.record(
            str(user.id),
            ActivityEventType.ACCOUNT_CREATED,
            register_source=user.register_source.value,
        )

        candidates = await self.candidate_service.find_candidates(
            exclude_user_id=user.id,
            email=user.email,
            phone_number=user.phone_number,
            name=user.name,
        )

        if user.register_source == RegisterSource.PHONE:
            await self.credential_service.send_sms_code(user.phone_number)
            return RegisterResponse(
                user_id=str(user.id),
                phone_verification_required=True,
                link_candidates=candidates,
            )

        session = await self.authenticate_use_case.issue_session(
            user, RegisterSource.CREDENTIALS
        )
        return RegisterResponse(
            user_id=str(user.id),
            token=session.token,
            principal=session.principal,
            link_candidates=candidates,
        )

    async def _register_email(self, request: RegisterRequest) -> User:
        missing = [f for f in ("email", "password") if not getattr(request, f)]
        if missing:
            raise MissingCredentialsError(missing)
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        email = normalize_email(request.email)
        if await self.user_service.get_user_by_email(email):
            raise DuplicateIdentityError("email")

        with logfire.span("register.email"):
            return await self.user_service.create(
                self._new_user(
                    register_source=RegisterSource.CREDENTIALS,
                    email=email,
                    name=request.name,
                    password_hash=hash_password(request.password),
                )
            )

    async def _register_phone(self, request: RegisterRequest) -> User:
        phone_number = self.credential_service.normalize_phone(request.phone_number)
        if await self.user_service.get_user_by_phone(phone_number):
            raise DuplicateIdentityError("phone_number")

        with logfire.span("register.phone"):
            return await self.user_service.create(
                self._new_user(
                    register_source=RegisterSource.PHONE,
                    phone_number=phone_number,
                    name=request.name,
                )
            )

    @staticmethod
    def _new_user(**fields) -> User:
        now = datetime.now()
        return User(id=UserId(uuid4()), created_at=now, updated_at=now, **fields)
