"""Confirm link use case."""

from typing import Optional

from pydantic import BaseModel, Field

from idlink.domain.error import CandidateNotFoundError
from idlink.domain.service import (
    CandidateService,
    GroupService,
    LinkingService,
    UserService,
)
from idlink.domain.value import GroupId, UserId


class ConfirmLinkRequest(BaseModel):
    """The caller confirms that the listed accounts are theirs."""

    primary_id: UserId
    secondary_ids: list[UserId] = Field(min_length=1)


class ConfirmLinkResponse(BaseModel):
    """Merged group."""

    group_id: Optional[GroupId]
    master_id: Optional[UserId]
    user_ids: list[UserId]
    already_linked: bool = False


class ConfirmLinkUseCase:
    """Use case for a user-confirmed merge.

    Only accounts that currently match the caller as link candidates can be
    merged; the caller's record becomes the group's master.
    """

    def __init__(
        self,
        user_service: UserService,
        candidate_service: CandidateService,
        group_service: GroupService,
        linking_service: LinkingService,
    ) -> None:
        self.user_service = user_service
        self.candidate_service = candidate_service
        self.group_service = group_service
        self.linking_service = linking_service

    async def execute(self, request: ConfirmLinkRequest) -> ConfirmLinkResponse:
        """Execute a confirmed merge.

        Raises:
            CandidateNotFoundError: If a secondary id is not a current candidate
            StoreConflictError: If concurrent writes kept winning
        """
        primary = await self.user_service.get_by_id(request.primary_id)
        candidates = await self.candidate_service.find_candidates(
            exclude_user_id=primary.id,
            email=primary.email,
            phone_number=primary.phone_number,
            name=primary.name,
        )
        candidate_ids = {c.candidate_user_id for c in candidates}

        # Re-confirming an existing member is a no-op, not an error
        group = await self.group_service.get_group(primary)
        group_ids = set(group.member_ids) if group else set()

        for secondary_id in request.secondary_ids:
            if secondary_id not in candidate_ids and secondary_id not in group_ids:
                raise CandidateNotFoundError(str(secondary_id))

        result = await self.linking_service.link_accounts(
            primary.id, request.secondary_ids
        )
        return ConfirmLinkResponse(
            group_id=result.group_id,
            master_id=result.master_id,
            user_ids=result.user_ids,
            already_linked=result.already_linked,
        )
