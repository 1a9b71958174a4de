"""Unit tests for DeactivateAccountUseCase."""

import pytest
from dishka import AsyncContainer

from idlink.application.usecase.account import (
    DeactivateAccountRequest,
    DeactivateAccountUseCase,
)
from idlink.domain.error import RequiresTransferError
from idlink.domain.repository import UserRepository
from idlink.domain.service import LinkingService
from tests.conftest import make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestDeactivateAccountUseCase:
    """Tests for DeactivateAccountUseCase."""

    @pytest.mark.asyncio
    async def test_master_must_transfer_then_can_leave(self, unit_env: AsyncContainer):
        """A master is refused until it hands the group to another member."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        linking_service = await unit_env.get(LinkingService)
        use_case = await unit_env.get(DeactivateAccountUseCase)
        master = await user_repo.create(make_user(email="a@example.com", age_days=3))
        second = await user_repo.create(make_user(email="b@example.com", age_days=2))
        third = await user_repo.create(make_user(email="c@example.com", age_days=1))
        await linking_service.link_accounts(master.id, [second.id, third.id])

        # Act
        with pytest.raises(RequiresTransferError) as exc_info:
            await use_case.execute(DeactivateAccountRequest(user_id=master.id))
        response = await use_case.execute(
            DeactivateAccountRequest(user_id=master.id, transfer_ownership=True)
        )

        # Assert
        assert set(exc_info.value.active_member_ids) == {str(second.id), str(third.id)}
        assert response.new_master_id == second.id
        assert not (await user_repo.find_by_id(master.id)).is_active
        assert (await user_repo.find_by_id(second.id)).is_master

    @pytest.mark.asyncio
    async def test_member_leaves_without_transfer(self, unit_env: AsyncContainer):
        user_repo = await unit_env.get(UserRepository)
        linking_service = await unit_env.get(LinkingService)
        use_case = await unit_env.get(DeactivateAccountUseCase)
        master = await user_repo.create(make_user(email="a@example.com"))
        member = await user_repo.create(make_user(email="b@example.com"))
        await linking_service.link_accounts(master.id, [member.id])

        response = await use_case.execute(DeactivateAccountRequest(user_id=member.id))

        assert response.user_id == member.id
        assert response.new_master_id is None
