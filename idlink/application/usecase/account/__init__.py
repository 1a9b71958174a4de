"""Account linking and lifecycle use cases."""

from .backup_codes import (
    GetBackupCodesStatusRequest,
    GetBackupCodesStatusResponse,
    GetBackupCodesStatusUseCase,
    RegenerateBackupCodesRequest,
    RegenerateBackupCodesResponse,
    RegenerateBackupCodesUseCase,
)
from .confirm_link import ConfirmLinkRequest, ConfirmLinkResponse, ConfirmLinkUseCase
from .deactivate_account import (
    DeactivateAccountRequest,
    DeactivateAccountResponse,
    DeactivateAccountUseCase,
)
from .find_link_candidates import (
    FindLinkCandidatesRequest,
    FindLinkCandidatesResponse,
    FindLinkCandidatesUseCase,
)
from .get_account_profile import (
    GetAccountProfileRequest,
    GetAccountProfileResponse,
    GetAccountProfileUseCase,
)

__all__ = [
    "ConfirmLinkRequest",
    "ConfirmLinkResponse",
    "ConfirmLinkUseCase",
    "DeactivateAccountRequest",
    "DeactivateAccountResponse",
    "DeactivateAccountUseCase",
    "FindLinkCandidatesRequest",
    "FindLinkCandidatesResponse",
    "FindLinkCandidatesUseCase",
    "GetAccountProfileRequest",
    "GetAccountProfileResponse",
    "GetAccountProfileUseCase",
    "GetBackupCodesStatusRequest",
    "GetBackupCodesStatusResponse",
    "GetBackupCodesStatusUseCase",
    "RegenerateBackupCodesRequest",
    "RegenerateBackupCodesResponse",
    "RegenerateBackupCodesUseCase",
]
