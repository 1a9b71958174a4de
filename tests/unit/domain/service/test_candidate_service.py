"""Tests for CandidateService."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from idlink.config import LinkingSettings
from idlink.domain.model import UserIdentity
from idlink.domain.service import CandidateService
from idlink.domain.value import (
    AccountStatus,
    AttributeType,
    AuthProvider,
    GroupId,
    RegisterSource,
    UserIdentityId,
)
from tests.conftest import make_user


@pytest.fixture
def candidate_service(user_repo, identity_repo, linking_settings) -> CandidateService:
    return CandidateService(user_repo, identity_repo, linking_settings)


class TestFindCandidatesScoring:
    """Confidence scoring of matched attributes."""

    @pytest.mark.asyncio
    async def test_verified_email_scores_fifty(self, candidate_service, user_repo):
        # Arrange
        subject = await user_repo.create(make_user(email="subject@example.com"))
        other = await user_repo.create(make_user(email="alice@example.com"))

        # Act
        candidates = await candidate_service.find_candidates(
            exclude_user_id=subject.id, email="Alice@Example.com"
        )

        # Assert
        assert len(candidates) == 1
        assert candidates[0].candidate_user_id == other.id
        assert candidates[0].confidence == 50
        assert candidates[0].reasons == ["email match"]
        assert [m.attribute_type for m in candidates[0].matched_attributes] == [
            AttributeType.EMAIL
        ]

    @pytest.mark.asyncio
    async def test_unverified_email_scores_twenty_five(
        self, candidate_service, user_repo
    ):
        await user_repo.create(make_user(email="alice@example.com", verified=False))

        candidates = await candidate_service.find_candidates(
            exclude_user_id=None, email="alice@example.com"
        )

        assert candidates[0].confidence == 25
        assert candidates[0].reasons == ["email match (unverified)"]

    @pytest.mark.asyncio
    async def test_phone_match_verified_and_unverified(
        self, candidate_service, user_repo
    ):
        verified = await user_repo.create(make_user(phone_number="+14155550100"))

        candidates = await candidate_service.find_candidates(
            exclude_user_id=None, phone_number="+14155550100"
        )

        assert candidates[0].candidate_user_id == verified.id
        assert candidates[0].confidence == 50
        assert candidates[0].reasons == ["phone match"]

        await user_repo.update(
            verified.model_copy(update={"verified_phones": frozenset()}),
            verified.version,
        )
        candidates = await candidate_service.find_candidates(
            exclude_user_id=None, phone_number="+14155550100"
        )
        assert candidates[0].confidence == 25
        assert candidates[0].reasons == ["phone match (unverified)"]

    @pytest.mark.asyncio
    async def test_email_phone_and_name_are_additive(
        self, candidate_service, user_repo
    ):
        # Arrange
        await user_repo.create(
            make_user(
                email="alice@example.com",
                phone_number="+14155550100",
                name="Alice Smith",
            )
        )

        # Act
        candidates = await candidate_service.find_candidates(
            exclude_user_id=None,
            email="alice@example.com",
            phone_number="+14155550100",
            name="  alice   SMITH ",
        )

        # Assert
        assert candidates[0].confidence == 100
        assert candidates[0].reasons == ["email match", "phone match", "same name"]

    @pytest.mark.asyncio
    async def test_confidence_is_capped_at_one_hundred(
        self, candidate_service, user_repo, identity_repo
    ):
        # Arrange: 50 + 50 (shared OAuth) + 60 + 10 would be 170
        other = await user_repo.create(
            make_user(email="alice@example.com", name="Alice")
        )
        await identity_repo.save(
            UserIdentity(
                id=UserIdentityId(uuid4()),
                user_id=other.id,
                provider=AuthProvider.GITHUB,
                provider_account_id="gh-1",
            )
        )

        # Act
        candidates = await candidate_service.find_candidates(
            exclude_user_id=None,
            email="alice@example.com",
            name="Alice",
            provider=AuthProvider.GITHUB,
            provider_account_id="gh-1",
            email_vouched_by_provider=True,
        )

        # Assert
        assert candidates[0].confidence == 100
        assert "same github account" in candidates[0].reasons
        assert "shared OAuth email" in candidates[0].reasons

    @pytest.mark.asyncio
    async def test_shared_oauth_email_requires_verified_candidate_email(
        self, candidate_service, user_repo
    ):
        await user_repo.create(make_user(email="alice@example.com", verified=False))

        candidates = await candidate_service.find_candidates(
            exclude_user_id=None,
            email="alice@example.com",
            email_vouched_by_provider=True,
        )

        assert candidates[0].confidence == 25
        assert "shared OAuth email" not in candidates[0].reasons

    @pytest.mark.asyncio
    async def test_shared_oauth_email_reaches_one_hundred(
        self, candidate_service, user_repo
    ):
        await user_repo.create(make_user(email="alice@example.com"))

        candidates = await candidate_service.find_candidates(
            exclude_user_id=None,
            email="alice@example.com",
            email_vouched_by_provider=True,
        )

        assert candidates[0].confidence == 100
        assert candidates[0].reasons == ["email match", "shared OAuth email"]
        assert {m.attribute_type for m in candidates[0].matched_attributes} == {
            AttributeType.EMAIL,
            AttributeType.OAUTH_EMAIL,
        }

    @pytest.mark.asyncio
    async def test_name_only_match_scores_ten(self, candidate_service, user_repo):
        await user_repo.create(make_user(email="bob@example.com", name="Alice"))

        candidates = await candidate_service.find_candidates(
            exclude_user_id=None, email="alice@example.com", name="alice"
        )

        assert len(candidates) == 1
        assert candidates[0].confidence == 10
        assert candidates[0].reasons == ["same name"]

    @pytest.mark.asyncio
    async def test_provider_account_scores_sixty(
        self, candidate_service, user_repo, identity_repo
    ):
        owner = await user_repo.create(
            make_user(register_source=RegisterSource.GOOGLE, email="g@example.com")
        )
        await identity_repo.save(
            UserIdentity(
                id=UserIdentityId(uuid4()),
                user_id=owner.id,
                provider=AuthProvider.GOOGLE,
                provider_account_id="google-1",
            )
        )

        candidates = await candidate_service.find_candidates(
            exclude_user_id=None,
            provider=AuthProvider.GOOGLE,
            provider_account_id="google-1",
        )

        assert candidates[0].candidate_user_id == owner.id
        assert candidates[0].confidence == 60
        assert candidates[0].reasons == ["same google account"]

    @pytest.mark.asyncio
    async def test_custom_weights_are_used(self, user_repo, identity_repo):
        service = CandidateService(
            user_repo, identity_repo, LinkingSettings(name_weight=15)
        )
        await user_repo.create(make_user(name="Alice"))

        candidates = await service.find_candidates(exclude_user_id=None, name="Alice")

        assert candidates[0].confidence == 15


class TestFindCandidatesFiltering:
    """Which records are considered at all."""

    @pytest.mark.asyncio
    async def test_no_attributes_returns_nothing(self, candidate_service, user_repo):
        await user_repo.create(make_user(email="alice@example.com"))

        candidates = await candidate_service.find_candidates(exclude_user_id=None)

        assert candidates == []

    @pytest.mark.asyncio
    async def test_subject_and_its_group_are_excluded(
        self, candidate_service, user_repo
    ):
        # Arrange
        group_id = GroupId(uuid4())
        subject = await user_repo.create(
            make_user(email="a@example.com", name="Alice", group_id=group_id, is_master=True)
        )
        await user_repo.create(
            make_user(email="b@example.com", name="Alice", group_id=group_id)
        )
        outsider = await user_repo.create(make_user(email="c@example.com", name="Alice"))

        # Act
        candidates = await candidate_service.find_candidates(
            exclude_user_id=subject.id, name="Alice"
        )

        # Assert
        assert [c.candidate_user_id for c in candidates] == [outsider.id]

    @pytest.mark.asyncio
    async def test_inactive_records_are_excluded(self, candidate_service, user_repo):
        await user_repo.create(
            make_user(
                email="alice@example.com",
                account_status=AccountStatus.DEACTIVATED,
            )
        )

        candidates = await candidate_service.find_candidates(
            exclude_user_id=None, email="alice@example.com"
        )

        assert candidates == []

    @pytest.mark.asyncio
    async def test_provider_owner_in_subject_group_is_excluded(
        self, candidate_service, user_repo, identity_repo
    ):
        group_id = GroupId(uuid4())
        subject = await user_repo.create(make_user(group_id=group_id, is_master=True))
        sibling = await user_repo.create(
            make_user(register_source=RegisterSource.GITHUB, group_id=group_id)
        )
        await identity_repo.save(
            UserIdentity(
                id=UserIdentityId(uuid4()),
                user_id=sibling.id,
                provider=AuthProvider.GITHUB,
                provider_account_id="gh-2",
            )
        )

        candidates = await candidate_service.find_candidates(
            exclude_user_id=subject.id,
            provider=AuthProvider.GITHUB,
            provider_account_id="gh-2",
        )

        assert candidates == []


class TestFindCandidatesOrdering:
    """Result ordering."""

    @pytest.mark.asyncio
    async def test_sorted_by_confidence_then_recent_activity(
        self, candidate_service, user_repo
    ):
        # Arrange
        now = datetime(2024, 6, 1)
        weak = await user_repo.create(make_user(name="Alice"))
        stale = await user_repo.create(
            make_user(
                email="stale@example.com",
                phone_number="+14155550101",
                name="Alice",
                verified=False,
                last_sign_in=now - timedelta(days=30),
            )
        )
        recent = await user_repo.create(
            make_user(name="Alice", phone_number="+14155550102", verified=False,
                      last_sign_in=now)
        )

        # Act
        candidates = await candidate_service.find_candidates(
            exclude_user_id=None,
            name="Alice",
            phone_number="+14155550101",
        )
        tied = await candidate_service.find_candidates(exclude_user_id=None, name="Alice")

        # Assert
        assert candidates[0].candidate_user_id == stale.id
        assert candidates[0].confidence == 35
        assert tied[0].candidate_user_id == recent.id
        assert {c.candidate_user_id for c in tied} == {weak.id, stale.id, recent.id}
