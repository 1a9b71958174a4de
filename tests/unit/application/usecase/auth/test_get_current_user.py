"""Unit tests for GetCurrentUserUseCase."""

import pytest
from dishka import AsyncContainer

from idlink.application.usecase.auth import GetCurrentUserUseCase
from idlink.application.usecase.auth.get_current_user import GetCurrentUserRequest
from idlink.domain.error import AccountNotFoundError
from idlink.domain.repository import UserRepository
from idlink.domain.service import GroupService, JWTService, LinkingService
from idlink.util.jwt import JWTError
from tests.conftest import make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def issue_token(container: AsyncContainer, user) -> str:
    group_service = await container.get(GroupService)
    jwt_service = await container.get(JWTService)
    return jwt_service.create_token(await group_service.resolve_principal(user))


class TestGetCurrentUserUseCase:
    """Tests for GetCurrentUserUseCase."""

    @pytest.mark.asyncio
    async def test_fresh_token_is_not_reissued(self, unit_env: AsyncContainer):
        """A token whose claims still match the store is returned as is."""
        user_repo = await unit_env.get(UserRepository)
        use_case = await unit_env.get(GetCurrentUserUseCase)
        user = await user_repo.create(make_user(email="alice@example.com"))
        token = await issue_token(unit_env, user)

        response = await use_case.execute(GetCurrentUserRequest(token=token))

        assert response.principal.id == user.id
        assert response.refreshed_token is None

    @pytest.mark.asyncio
    async def test_token_is_refreshed_after_merge(self, unit_env: AsyncContainer):
        """Linking after sign-in makes the token stale; a new one is issued."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        linking_service = await unit_env.get(LinkingService)
        jwt_service = await unit_env.get(JWTService)
        use_case = await unit_env.get(GetCurrentUserUseCase)
        a = await user_repo.create(make_user(email="a@example.com"))
        b = await user_repo.create(make_user(email="b@example.com"))
        token = await issue_token(unit_env, a)
        await linking_service.link_accounts(a.id, [b.id])

        # Act
        response = await use_case.execute(GetCurrentUserRequest(token=token))

        # Assert
        assert response.principal.has_linked_accounts
        assert response.refreshed_token is not None
        payload = jwt_service.verify_token(response.refreshed_token)
        assert payload.linked_emails == ["a@example.com", "b@example.com"]
        assert payload.group_id == str(response.principal.group_id)

    @pytest.mark.asyncio
    async def test_deactivated_subject_is_rejected(self, unit_env: AsyncContainer):
        user_repo = await unit_env.get(UserRepository)
        group_service = await unit_env.get(GroupService)
        use_case = await unit_env.get(GetCurrentUserUseCase)
        user = await user_repo.create(make_user(email="alice@example.com"))
        token = await issue_token(unit_env, user)
        await group_service.deactivate(user.id)

        with pytest.raises(AccountNotFoundError):
            await use_case.execute(GetCurrentUserRequest(token=token))

    @pytest.mark.asyncio
    async def test_garbage_token_is_rejected(self, unit_env: AsyncContainer):
        use_case = await unit_env.get(GetCurrentUserUseCase)

        with pytest.raises(JWTError):
            await use_case.execute(GetCurrentUserRequest(token="not-a-jwt"))
