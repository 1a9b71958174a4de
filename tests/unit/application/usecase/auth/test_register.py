"""Unit tests for RegisterUseCase."""

import pytest
from dishka import AsyncContainer

from idlink.adapter.sms import VerifySmsClient
from idlink.application.usecase.auth import RegisterRequest, RegisterUseCase
from idlink.domain.error import (
    DuplicateIdentityError,
    InvalidPhoneFormatError,
    MissingCredentialsError,
    ValidationError,
)
from idlink.domain.repository import ActivityRepository, UserRepository
from idlink.domain.value import ActivityEventType, RegisterSource
from tests.conftest import make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestRegisterUseCase:
    """Tests for RegisterUseCase."""

    @pytest.mark.asyncio
    async def test_email_registration_signs_in(self, unit_env: AsyncContainer):
        """Email registration creates a record and returns a session."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        activity_repo = await unit_env.get(ActivityRepository)
        use_case = await unit_env.get(RegisterUseCase)

        # Act
        response = await use_case.execute(
            RegisterRequest(
                email="  Alice@Example.com", password="long enough", name="Alice"
            )
        )

        # Assert
        assert response.token
        assert not response.phone_verification_required
        assert response.principal.email == "alice@example.com"
        stored = await user_repo.find_by_email("alice@example.com")
        assert stored.register_source == RegisterSource.CREDENTIALS
        assert stored.password_hash != "long enough"
        assert not stored.email_verified
        assert [e.event_type for e in activity_repo.events] == [
            ActivityEventType.ACCOUNT_CREATED,
            ActivityEventType.SIGNIN_SUCCESS,
        ]

    @pytest.mark.asyncio
    async def test_registration_surfaces_link_candidates(
        self, unit_env: AsyncContainer
    ):
        """Existing records sharing attributes are suggested but not merged."""
        user_repo = await unit_env.get(UserRepository)
        use_case = await unit_env.get(RegisterUseCase)
        other = await user_repo.create(
            make_user(
                register_source=RegisterSource.PHONE,
                phone_number="+14155550100",
                name="Alice Smith",
            )
        )

        response = await use_case.execute(
            RegisterRequest(
                email="alice@example.com", password="long enough", name="alice smith"
            )
        )

        assert [c.candidate_user_id for c in response.link_candidates] == [other.id]
        assert response.link_candidates[0].confidence == 10
        assert response.principal.group_id is None

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, unit_env: AsyncContainer):
        """An email held by an active record cannot register again."""
        user_repo = await unit_env.get(UserRepository)
        use_case = await unit_env.get(RegisterUseCase)
        await user_repo.create(make_user(email="alice@example.com"))

        with pytest.raises(DuplicateIdentityError):
            await use_case.execute(
                RegisterRequest(email="ALICE@example.com", password="long enough")
            )

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, unit_env: AsyncContainer):
        """Passwords under the minimum length are rejected."""
        use_case = await unit_env.get(RegisterUseCase)

        with pytest.raises(ValidationError):
            await use_case.execute(
                RegisterRequest(email="alice@example.com", password="short")
            )

    @pytest.mark.asyncio
    async def test_missing_password_rejected(self, unit_env: AsyncContainer):
        """Email without password names the missing field."""
        use_case = await unit_env.get(RegisterUseCase)

        with pytest.raises(MissingCredentialsError) as exc_info:
            await use_case.execute(RegisterRequest(email="alice@example.com"))
        assert exc_info.value.fields == ["password"]

    @pytest.mark.asyncio
    async def test_nothing_given_rejected(self, unit_env: AsyncContainer):
        """A request with no credentials at all is rejected."""
        use_case = await unit_env.get(RegisterUseCase)

        with pytest.raises(MissingCredentialsError):
            await use_case.execute(RegisterRequest(name="Alice"))

    @pytest.mark.asyncio
    async def test_phone_registration_sends_code(self, unit_env: AsyncContainer):
        """Phone registration sends a code and withholds the session."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        sms_client = await unit_env.get(VerifySmsClient)
        use_case = await unit_env.get(RegisterUseCase)

        # Act
        response = await use_case.execute(
            RegisterRequest(phone_number="(415) 555-0100")
        )

        # Assert
        assert response.phone_verification_required
        assert response.token is None
        assert sms_client.sent_to == ["+14155550100"]
        stored = await user_repo.find_by_phone("+14155550100")
        assert stored.register_source == RegisterSource.PHONE
        assert not stored.phone_verified

    @pytest.mark.asyncio
    async def test_invalid_phone_rejected(self, unit_env: AsyncContainer):
        """Unparseable numbers are a client error."""
        use_case = await unit_env.get(RegisterUseCase)

        with pytest.raises(InvalidPhoneFormatError):
            await use_case.execute(RegisterRequest(phone_number="12"))
