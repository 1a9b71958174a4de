"""Find link candidates use case."""

from typing import Optional

from pydantic import BaseModel

from idlink.domain.model import LinkCandidate
from idlink.domain.service import CandidateService, CredentialService, UserService
from idlink.domain.value import AuthProvider, UserId


class FindLinkCandidatesRequest(BaseModel):
    """Search for accounts that may belong to the caller.

    Attributes left unset default to the caller's own record.
    """

    user_id: UserId
    email: Optional[str] = None
    phone_number: Optional[str] = None
    name: Optional[str] = None
    provider: Optional[AuthProvider] = None
    provider_account_id: Optional[str] = None


class FindLinkCandidatesResponse(BaseModel):
    """Scored candidates, best first."""

    candidates: list[LinkCandidate]


class FindLinkCandidatesUseCase:
    """Use case for listing manual link suggestions."""

    def __init__(
        self,
        user_service: UserService,
        candidate_service: CandidateService,
        credential_service: CredentialService,
    ) -> None:
        self.user_service = user_service
        self.candidate_service = candidate_service
        self.credential_service = credential_service

    async def execute(
        self, request: FindLinkCandidatesRequest
    ) -> FindLinkCandidatesResponse:
        """Execute candidate search.

        Raises:
            NotFoundError: If the caller's record does not exist
            InvalidPhoneFormatError: If an explicit phone number cannot be parsed
        """
        user = await self.user_service.get_by_id(request.user_id)
        phone_number = (
            self.credential_service.normalize_phone(request.phone_number)
            if request.phone_number
            else user.phone_number
        )

        candidates = await self.candidate_service.find_candidates(
            exclude_user_id=user.id,
            email=request.email or user.email,
            phone_number=phone_number,
            name=request.name or user.name,
            provider=request.provider,
            provider_account_id=request.provider_account_id,
        )
        return FindLinkCandidatesResponse(candidates=candidates)
