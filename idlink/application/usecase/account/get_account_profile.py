"""Get account profile use case."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from idlink.domain.model import Principal
from idlink.domain.service import GroupService, UserIdentityService, UserService
from idlink.domain.value import AuthProvider, RegisterSource, UserId


class GetAccountProfileRequest(BaseModel):
    """Get account profile request."""

    user_id: UserId


class GroupMemberInfo(BaseModel):
    """One record of the caller's group."""

    user_id: UserId
    email: Optional[str]
    phone_number: Optional[str]
    name: Optional[str]
    register_source: RegisterSource
    is_master: bool
    is_active: bool
    auth_methods: list[str]
    created_at: datetime
    last_sign_in: Optional[datetime]


class ProviderIdentityInfo(BaseModel):
    """OAuth account attached to the caller's record."""

    provider: AuthProvider
    provider_email: Optional[str]
    last_login_at: Optional[datetime]


class GetAccountProfileResponse(BaseModel):
    """Complete account profile."""

    principal: Principal
    members: list[GroupMemberInfo]
    active_member_count: int
    total_member_count: int
    # Sign-in methods available across the whole group
    auth_methods: list[str]
    identities: list[ProviderIdentityInfo]


class GetAccountProfileUseCase:
    """Use case for the caller's account and every linked record."""

    def __init__(
        self,
        user_service: UserService,
        user_identity_service: UserIdentityService,
        group_service: GroupService,
    ) -> None:
        """Initialize get account profile use case.

        Args:
            user_service: User domain service
            user_identity_service: User identity domain service
            group_service: Group domain service
        """
        self.user_service = user_service
        self.user_identity_service = user_identity_service
        self.group_service = group_service

    async def execute(
        self, request: GetAccountProfileRequest
    ) -> GetAccountProfileResponse:
        """Execute get account profile flow.

        Raises:
            NotFoundError: If the record does not exist
        """
        user = await self.user_service.get_by_id(request.user_id)
        principal = await self.group_service.resolve_principal(user)

        group = await self.group_service.get_group(user)
        members = group.members if group else [user]

        auth_methods: list[str] = []
        for member in members:
            if member.is_active:
                auth_methods.extend(
                    m for m in member.auth_methods() if m not in auth_methods
                )

        identities = await self.user_identity_service.get_all_identities_for_user(
            user.id
        )

        return GetAccountProfileResponse(
            principal=principal,
            members=[
                GroupMemberInfo(
                    user_id=m.id,
                    email=m.email,
                    phone_number=m.phone_number,
                    name=m.name,
                    register_source=m.register_source,
                    is_master=m.is_master,
                    is_active=m.is_active,
                    auth_methods=m.auth_methods(),
                    created_at=m.created_at,
                    last_sign_in=m.last_sign_in,
                )
                for m in members
            ],
            active_member_count=sum(1 for m in members if m.is_active),
            total_member_count=len(members),
            auth_methods=auth_methods,
            identities=[
                ProviderIdentityInfo(
                    provider=i.provider,
                    provider_email=i.provider_email,
                    last_login_at=i.last_login_at,
                )
                for i in identities
            ],
        )
