"""Deactivate account use case."""

from typing import Optional

from pydantic import BaseModel

from idlink.domain.service import GroupService
from idlink.domain.value import UserId


class DeactivateAccountRequest(BaseModel):
    """Deactivate request."""

    user_id: UserId
    transfer_ownership: bool = False
    transfer_to: Optional[UserId] = None  # Defaults to the earliest-created member


class DeactivateAccountResponse(BaseModel):
    """Deactivate response."""

    user_id: UserId
    new_master_id: Optional[UserId] = None


class DeactivateAccountUseCase:
    """Use case for deactivating a record, handing its group over if needed."""

    def __init__(self, group_service: GroupService) -> None:
        self.group_service = group_service

    async def execute(
        self, request: DeactivateAccountRequest
    ) -> DeactivateAccountResponse:
        """Execute deactivation.

        Raises:
            RequiresTransferError: If the caller masters a group with other
                active members and did not ask for a transfer
        """
        result = await self.group_service.deactivate(
            request.user_id,
            transfer_ownership=request.transfer_ownership,
            transfer_to=request.transfer_to,
        )
        return DeactivateAccountResponse(
            user_id=result.user_id, new_master_id=result.new_master_id
        )
