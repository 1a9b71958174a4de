"""Account linking and lifecycle routes."""

from typing import Optional
from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie, Response
from pydantic import BaseModel, Field

from idlink.application.usecase.account import (
    ConfirmLinkRequest,
    ConfirmLinkResponse,
    ConfirmLinkUseCase,
    DeactivateAccountRequest,
    DeactivateAccountResponse,
    DeactivateAccountUseCase,
    FindLinkCandidatesRequest,
    FindLinkCandidatesResponse,
    FindLinkCandidatesUseCase,
    GetAccountProfileRequest,
    GetAccountProfileResponse,
    GetAccountProfileUseCase,
    GetBackupCodesStatusRequest,
    GetBackupCodesStatusResponse,
    GetBackupCodesStatusUseCase,
    RegenerateBackupCodesRequest,
    RegenerateBackupCodesResponse,
    RegenerateBackupCodesUseCase,
)
from idlink.config import Settings
from idlink.domain.service import JWTService
from idlink.domain.value import AuthProvider, UserId
from idlink.interface.api.routes.auth import clear_auth_cookie
from idlink.interface.error import NotAuthenticatedError
from idlink.util.jwt import JWTError

router = APIRouter(prefix="/account", tags=["account"], route_class=DishkaRoute)


def authenticated_user_id(jwt_service: JWTService, auth_token: str | None) -> UserId:
    """Resolve the caller from the session cookie.

    Raises:
        NotAuthenticatedError: If the cookie is missing or the token is invalid
    """
    if not auth_token:
        raise NotAuthenticatedError("Not authenticated")
    try:
        payload = jwt_service.verify_token(auth_token)
    except JWTError as e:
        raise NotAuthenticatedError(str(e))
    return UserId(UUID(payload.user_id))


class LinkCandidatesQuery(BaseModel):
    """Optional overrides for the candidate search."""

    email: Optional[str] = None
    phone_number: Optional[str] = None
    name: Optional[str] = None
    provider: Optional[AuthProvider] = None
    provider_account_id: Optional[str] = None


class ConfirmLinkAPIRequest(BaseModel):
    """Accounts the caller confirms are theirs."""

    secondary_ids: list[UserId] = Field(min_length=1)


class DeactivateAPIRequest(BaseModel):
    transfer_ownership: bool = False
    transfer_to: Optional[UserId] = None


class RegenerateBackupCodesAPIRequest(BaseModel):
    password: str


@router.post("/link-candidates", response_model=FindLinkCandidatesResponse)
async def find_link_candidates(
    query: LinkCandidatesQuery,
    use_case: FromDishka[FindLinkCandidatesUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> FindLinkCandidatesResponse:
    """List accounts that probably belong to the caller, best match first.

    Unset fields default to the caller's own email, phone and name.
    """
    user_id = authenticated_user_id(jwt_service, auth_token)
    return await use_case.execute(
        FindLinkCandidatesRequest(user_id=user_id, **query.model_dump())
    )


@router.post("/link", response_model=ConfirmLinkResponse)
async def confirm_link(
    request: ConfirmLinkAPIRequest,
    use_case: FromDishka[ConfirmLinkUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> ConfirmLinkResponse:
    """Link the caller with accounts they confirmed.

    The caller becomes the group's primary account. Call /auth/me afterwards
    to pick up a session that reflects the new group.

    Example:
        POST /account/link
        {
            "secondary_ids": ["123e4567-e89b-12d3-a456-426614174000"]
        }
    """
    user_id = authenticated_user_id(jwt_service, auth_token)
    return await use_case.execute(
        ConfirmLinkRequest(primary_id=user_id, secondary_ids=request.secondary_ids)
    )


@router.post("/deactivate", response_model=DeactivateAccountResponse)
async def deactivate_account(
    request: DeactivateAPIRequest,
    response: Response,
    use_case: FromDishka[DeactivateAccountUseCase],
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
    auth_token: str | None = Cookie(default=None),
) -> DeactivateAccountResponse:
    """Deactivate the caller's account and end the session.

    The primary account of a group with other active members gets a 409
    "requires_transfer" unless transfer_ownership is set.
    """
    user_id = authenticated_user_id(jwt_service, auth_token)
    result = await use_case.execute(
        DeactivateAccountRequest(
            user_id=user_id,
            transfer_ownership=request.transfer_ownership,
            transfer_to=request.transfer_to,
        )
    )
    clear_auth_cookie(response, settings)
    return result


@router.get("/profile", response_model=GetAccountProfileResponse)
async def get_account_profile(
    use_case: FromDishka[GetAccountProfileUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> GetAccountProfileResponse:
    """The caller's account with every linked account and sign-in method."""
    user_id = authenticated_user_id(jwt_service, auth_token)
    return await use_case.execute(GetAccountProfileRequest(user_id=user_id))


@router.get("/backup-codes", response_model=GetBackupCodesStatusResponse)
async def get_backup_codes_status(
    use_case: FromDishka[GetBackupCodesStatusUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> GetBackupCodesStatusResponse:
    """How many unused backup codes the caller has left."""
    user_id = authenticated_user_id(jwt_service, auth_token)
    return await use_case.execute(GetBackupCodesStatusRequest(user_id=user_id))


@router.post("/backup-codes/regenerate", response_model=RegenerateBackupCodesResponse)
async def regenerate_backup_codes(
    request: RegenerateBackupCodesAPIRequest,
    use_case: FromDishka[RegenerateBackupCodesUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> RegenerateBackupCodesResponse:
    """Replace the caller's backup codes. The new codes are shown only once."""
    user_id = authenticated_user_id(jwt_service, auth_token)
    return await use_case.execute(
        RegenerateBackupCodesRequest(user_id=user_id, password=request.password)
    )
