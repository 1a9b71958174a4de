"""Unit tests for the backup code use cases."""

import pytest
from dishka import AsyncContainer

from idlink.application.usecase.account import (
    GetBackupCodesStatusRequest,
    GetBackupCodesStatusUseCase,
    RegenerateBackupCodesRequest,
    RegenerateBackupCodesUseCase,
)
from idlink.domain.error import TwoFactorNotEnabledError
from idlink.domain.repository import UserRepository
from tests.conftest import PASSWORD, make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestBackupCodeUseCases:
    """Tests for backup code status and regeneration."""

    @pytest.mark.asyncio
    async def test_regenerate_then_count(self, unit_env: AsyncContainer):
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        status = await unit_env.get(GetBackupCodesStatusUseCase)
        regenerate = await unit_env.get(RegenerateBackupCodesUseCase)
        user = await user_repo.create(
            make_user(email="alice@example.com", two_factor_enabled=True)
        )

        # Act
        before = await status.execute(GetBackupCodesStatusRequest(user_id=user.id))
        codes = await regenerate.execute(
            RegenerateBackupCodesRequest(user_id=user.id, password=PASSWORD)
        )
        after = await status.execute(GetBackupCodesStatusRequest(user_id=user.id))

        # Assert
        assert before.remaining == 0
        assert len(codes.codes) == 10
        assert after.remaining == 10

    @pytest.mark.asyncio
    async def test_status_requires_two_factor(self, unit_env: AsyncContainer):
        user_repo = await unit_env.get(UserRepository)
        status = await unit_env.get(GetBackupCodesStatusUseCase)
        user = await user_repo.create(make_user(email="alice@example.com"))

        with pytest.raises(TwoFactorNotEnabledError):
            await status.execute(GetBackupCodesStatusRequest(user_id=user.id))
