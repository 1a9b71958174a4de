"""Unit tests for GetAccountProfileUseCase."""

from uuid import uuid4

import pytest
from dishka import AsyncContainer

from idlink.application.usecase.account import (
    GetAccountProfileRequest,
    GetAccountProfileUseCase,
)
from idlink.domain.error import NotFoundError
from idlink.domain.repository import UserRepository
from idlink.domain.service import GroupService, LinkingService, UserIdentityService
from idlink.domain.value import AuthProvider, RegisterSource, UserId
from tests.conftest import make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestGetAccountProfileUseCase:
    """Tests for GetAccountProfileUseCase."""

    @pytest.mark.asyncio
    async def test_lone_record_profile(self, unit_env: AsyncContainer):
        user_repo = await unit_env.get(UserRepository)
        use_case = await unit_env.get(GetAccountProfileUseCase)
        user = await user_repo.create(make_user(email="alice@example.com"))

        response = await use_case.execute(GetAccountProfileRequest(user_id=user.id))

        assert response.total_member_count == 1
        assert response.members[0].user_id == user.id
        assert response.auth_methods == ["credentials"]
        assert response.identities == []

    @pytest.mark.asyncio
    async def test_group_profile_lists_every_member(self, unit_env: AsyncContainer):
        """Members, counts and the union of sign-in methods across the group."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        identity_service = await unit_env.get(UserIdentityService)
        linking_service = await unit_env.get(LinkingService)
        group_service = await unit_env.get(GroupService)
        use_case = await unit_env.get(GetAccountProfileUseCase)

        email_user = await user_repo.create(make_user(email="alice@example.com"))
        phone_user = await user_repo.create(
            make_user(register_source=RegisterSource.PHONE, phone_number="+14155550100")
        )
        google_user = await user_repo.create(
            make_user(
                register_source=RegisterSource.GOOGLE,
                email="alice@gmail.com",
                linked_providers=frozenset({AuthProvider.GOOGLE}),
            )
        )
        await identity_service.attach(
            google_user.id, AuthProvider.GOOGLE, "google-alice", "alice@gmail.com"
        )
        await linking_service.link_accounts(
            email_user.id, [phone_user.id, google_user.id]
        )
        await group_service.deactivate(phone_user.id)

        # Act
        response = await use_case.execute(
            GetAccountProfileRequest(user_id=google_user.id)
        )

        # Assert
        assert response.total_member_count == 3
        assert response.active_member_count == 2
        assert set(response.auth_methods) == {"credentials", "google"}
        assert response.principal.master_id == email_user.id
        assert [i.provider for i in response.identities] == [AuthProvider.GOOGLE]
        masters = [m.user_id for m in response.members if m.is_master]
        assert masters == [email_user.id]

    @pytest.mark.asyncio
    async def test_unknown_user(self, unit_env: AsyncContainer):
        use_case = await unit_env.get(GetAccountProfileUseCase)

        with pytest.raises(NotFoundError):
            await use_case.execute(GetAccountProfileRequest(user_id=UserId(uuid4())))
