"""Backup code use cases."""

from pydantic import BaseModel

from idlink.domain.service import TwoFactorService
from idlink.domain.value import UserId


class GetBackupCodesStatusRequest(BaseModel):
    user_id: UserId


class GetBackupCodesStatusResponse(BaseModel):
    remaining: int


class GetBackupCodesStatusUseCase:
    """Use case for counting unused backup codes."""

    def __init__(self, two_factor_service: TwoFactorService) -> None:
        self.two_factor_service = two_factor_service

    async def execute(
        self, request: GetBackupCodesStatusRequest
    ) -> GetBackupCodesStatusResponse:
        remaining = await self.two_factor_service.remaining_backup_codes(
            request.user_id
        )
        return GetBackupCodesStatusResponse(remaining=remaining)


class RegenerateBackupCodesRequest(BaseModel):
    user_id: UserId
    password: str


class RegenerateBackupCodesResponse(BaseModel):
    # Shown once; only the caller ever sees them
    codes: list[str]


class RegenerateBackupCodesUseCase:
    """Use case for replacing backup codes after password confirmation."""

    def __init__(self, two_factor_service: TwoFactorService) -> None:
        self.two_factor_service = two_factor_service

    async def execute(
        self, request: RegenerateBackupCodesRequest
    ) -> RegenerateBackupCodesResponse:
        codes = await self.two_factor_service.regenerate_backup_codes(
            request.user_id, request.password
        )
        return RegenerateBackupCodesResponse(codes=codes)
