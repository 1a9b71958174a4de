"""Unit tests for AuthenticateUseCase."""

import pyotp
import pytest
from dishka import AsyncContainer

from idlink.application.usecase.auth import AuthenticateRequest, AuthenticateUseCase
from idlink.domain.error import (
    InfrastructureError,
    InvalidCredentialError,
    MissingCredentialsError,
    StoreUnavailableError,
    TwoFactorRequiredError,
)
from idlink.domain.repository import ActivityRepository, UserRepository
from idlink.domain.service import JWTService, LinkingService
from idlink.domain.value import ActivityEventType, EmailCredential
from tests.conftest import PASSWORD, make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


def event_types(activity_repo) -> list[ActivityEventType]:
    return [e.event_type for e in activity_repo.events]


class TestAuthenticateUseCase:
    """Tests for AuthenticateUseCase with email credentials."""

    @pytest.mark.asyncio
    async def test_successful_sign_in_issues_session(self, unit_env: AsyncContainer):
        """A correct password returns a token that decodes to the principal."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        activity_repo = await unit_env.get(ActivityRepository)
        jwt_service = await unit_env.get(JWTService)
        use_case = await unit_env.get(AuthenticateUseCase)
        user = await user_repo.create(make_user(email="alice@example.com", name="Alice"))

        # Act
        response = await use_case.execute(
            AuthenticateRequest(
                credential=EmailCredential(email="alice@example.com", password=PASSWORD)
            )
        )

        # Assert
        payload = jwt_service.verify_token(response.token)
        assert payload.user_id == str(user.id)
        assert payload.email == "alice@example.com"
        assert response.principal.id == user.id
        assert not response.created
        assert not response.auto_linked
        assert (await user_repo.find_by_id(user.id)).last_sign_in is not None
        assert event_types(activity_repo) == [ActivityEventType.SIGNIN_SUCCESS]

    @pytest.mark.asyncio
    async def test_failure_is_recorded_against_presented_email(
        self, unit_env: AsyncContainer
    ):
        """A wrong password raises and leaves a signin_failed event."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        activity_repo = await unit_env.get(ActivityRepository)
        use_case = await unit_env.get(AuthenticateUseCase)
        await user_repo.create(make_user(email="alice@example.com"))

        # Act
        with pytest.raises(InvalidCredentialError):
            await use_case.execute(
                AuthenticateRequest(
                    credential=EmailCredential(
                        email="Alice@Example.com", password="wrong password"
                    )
                )
            )

        # Assert
        (event,) = activity_repo.events
        assert event.event_type == ActivityEventType.SIGNIN_FAILED
        assert event.subject_id == "alice@example.com"
        assert event.metadata == {
            "method": "credentials",
            "reason": "invalid_credential",
        }

    @pytest.mark.asyncio
    async def test_missing_fields_are_rejected_without_event(
        self, unit_env: AsyncContainer
    ):
        """Malformed input is a client error and records nothing."""
        activity_repo = await unit_env.get(ActivityRepository)
        use_case = await unit_env.get(AuthenticateUseCase)

        with pytest.raises(MissingCredentialsError):
            await use_case.execute(
                AuthenticateRequest(
                    credential=EmailCredential(email="alice@example.com", password="")
                )
            )

        assert activity_repo.events == []

    @pytest.mark.asyncio
    async def test_two_factor_prompt_then_success(self, unit_env: AsyncContainer):
        """The first attempt asks for a code; the retry with a TOTP code succeeds."""
        # Arrange
        secret = pyotp.random_base32()
        user_repo = await unit_env.get(UserRepository)
        activity_repo = await unit_env.get(ActivityRepository)
        use_case = await unit_env.get(AuthenticateUseCase)
        await user_repo.create(
            make_user(
                email="alice@example.com",
                two_factor_enabled=True,
                two_factor_secret=secret,
            )
        )

        # Act
        with pytest.raises(TwoFactorRequiredError):
            await use_case.execute(
                AuthenticateRequest(
                    credential=EmailCredential(email="alice@example.com", password=PASSWORD)
                )
            )
        response = await use_case.execute(
            AuthenticateRequest(
                credential=EmailCredential(
                    email="alice@example.com",
                    password=PASSWORD,
                    two_factor_code=pyotp.TOTP(secret).now(),
                )
            )
        )

        # Assert
        assert response.principal.two_factor_enabled
        assert event_types(activity_repo) == [
            ActivityEventType.SIGNIN_FAILED,
            ActivityEventType.SIGNIN_SUCCESS,
        ]
        assert activity_repo.events[0].metadata["reason"] == "two_factor_required"

    @pytest.mark.asyncio
    async def test_backup_code_sign_in_is_recorded(self, unit_env: AsyncContainer):
        """Consuming a backup code leaves a backup_code_used event."""
        user_repo = await unit_env.get(UserRepository)
        activity_repo = await unit_env.get(ActivityRepository)
        use_case = await unit_env.get(AuthenticateUseCase)
        await user_repo.create(
            make_user(
                email="alice@example.com",
                two_factor_enabled=True,
                two_factor_secret=pyotp.random_base32(),
                backup_codes=["CAFE0001"],
            )
        )

        await use_case.execute(
            AuthenticateRequest(
                credential=EmailCredential(
                    email="alice@example.com",
                    password=PASSWORD,
                    two_factor_code="cafe0001",
                )
            )
        )

        assert event_types(activity_repo) == [
            ActivityEventType.BACKUP_CODE_USED,
            ActivityEventType.SIGNIN_SUCCESS,
        ]

    @pytest.mark.asyncio
    async def test_grouped_sign_in_sees_group_attributes(
        self, unit_env: AsyncContainer
    ):
        """Signing in through any member yields the group's linked identifiers."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        linking_service = await unit_env.get(LinkingService)
        use_case = await unit_env.get(AuthenticateUseCase)
        a = await user_repo.create(make_user(email="a@example.com"))
        b = await user_repo.create(make_user(email="b@example.com"))
        await linking_service.link_accounts(a.id, [b.id])

        # Act
        response = await use_case.execute(
            AuthenticateRequest(
                credential=EmailCredential(email="b@example.com", password=PASSWORD)
            )
        )

        # Assert
        assert response.principal.id == b.id
        assert response.principal.master_id == a.id
        assert response.principal.has_linked_accounts
        assert response.principal.linked_emails == ["a@example.com", "b@example.com"]

    @pytest.mark.asyncio
    async def test_store_outage_is_infrastructure_error(
        self, unit_env: AsyncContainer, monkeypatch
    ):
        """An unreachable store is reported as infrastructure, not bad credentials."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        use_case = await unit_env.get(AuthenticateUseCase)

        async def unavailable(email: str):
            raise StoreUnavailableError("connection refused")

        monkeypatch.setattr(user_repo, "find_by_email", unavailable)

        # Act / Assert
        with pytest.raises(InfrastructureError):
            await use_case.execute(
                AuthenticateRequest(
                    credential=EmailCredential(email="alice@example.com", password=PASSWORD)
                )
            )
