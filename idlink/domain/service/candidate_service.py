"""Link candidate matching domain service."""

from typing import Optional

import logfire

from idlink.config import LinkingSettings
from idlink.domain.model import LinkCandidate, MatchedAttribute, User
from idlink.domain.repository import UserIdentityRepository, UserRepository
from idlink.domain.value import (
    AttributeType,
    AuthProvider,
    UserId,
    normalize_email,
    normalize_name,
)

from .base import Service


class CandidateService(Service):
    """Finds other records that probably belong to the same person.

    Scores are additive and capped at 100:

        verified email match       +50 (unverified +25)
        verified phone match       +50 (unverified +25)
        shared OAuth email         +50 (provider vouched for the subject's
                                        email and the candidate's copy is verified)
        same provider account      +60
        same name                  +10

    "Verified" refers to the candidate's copy of the attribute. Weights come
    from LinkingSettings.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        user_identity_repository: UserIdentityRepository,
        linking_settings: LinkingSettings,
    ) -> None:
        self.user_repository = user_repository
        self.user_identity_repository = user_identity_repository
        self.settings = linking_settings

    async def find_candidates(
        self,
        exclude_user_id: Optional[UserId],
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
        name: Optional[str] = None,
        provider: Optional[AuthProvider] = None,
        provider_account_id: Optional[str] = None,
        email_vouched_by_provider: bool = False,
    ) -> list[LinkCandidate]:
        """Find and score link candidates.

        Args:
            exclude_user_id: The subject; it and its group members are skipped
            email: Email to match
            phone_number: E.164 phone to match
            name: Display name to match case-insensitively
            provider: OAuth provider of a provider account to match
            provider_account_id: Account ID on that provider
            email_vouched_by_provider: The subject's email came from an OAuth provider

        Returns:
            Candidates by confidence descending, most recently active first on ties
        """
        email = normalize_email(email) if email else None
        normalized_name = normalize_name(name) if name and name.strip() else None

        with logfire.span(
            "candidate_service.find_candidates",
            exclude_user_id=str(exclude_user_id) if exclude_user_id else None,
        ):
            subject = (
                await self.user_repository.find_by_id(exclude_user_id)
                if exclude_user_id
                else None
            )
            exclude_group_id = subject.group_id if subject else None
            exclude_ids = {exclude_user_id} if exclude_user_id else set()

            matches = await self.user_repository.find_link_matches(
                email=email,
                phone_number=phone_number,
                name=normalized_name,
                exclude_ids=exclude_ids,
                exclude_group_id=exclude_group_id,
            )
            records: dict[UserId, User] = {m.id: m for m in matches}

            provider_owner_id = None
            if provider and provider_account_id:
                identity = await self.user_identity_repository.find_by_provider(
                    provider, provider_account_id
                )
                if identity and identity.user_id not in exclude_ids:
                    owner = records.get(identity.user_id) or (
                        await self.user_repository.find_by_id(identity.user_id)
                    )
                    if (
                        owner
                        and owner.is_active
                        and (exclude_group_id is None or owner.group_id != exclude_group_id)
                    ):
                        records[owner.id] = owner
                        provider_owner_id = owner.id

            candidates = [
                self._score(
                    record,
                    email=email,
                    phone_number=phone_number,
                    name=normalized_name,
                    provider=provider if record.id == provider_owner_id else None,
                    email_vouched_by_provider=email_vouched_by_provider,
                )
                for record in records.values()
            ]
            candidates = [c for c in candidates if c.matched_attributes]
            candidates.sort(key=lambda c: (c.confidence, c.last_active_at), reverse=True)

            logfire.info(
                "Link candidates found",
                count=len(candidates),
                top_confidence=candidates[0].confidence if candidates else None,
            )
            return candidates

    def _score(
        self,
        record: User,
        email: Optional[str],
        phone_number: Optional[str],
        name: Optional[str],
        provider: Optional[AuthProvider],
        email_vouched_by_provider: bool,
    ) -> LinkCandidate:
        s = self.settings
        confidence = 0
        matched: list[MatchedAttribute] = []
        reasons: list[str] = []

        if email and record.email and record.email.lower() == email:
            matched.append(MatchedAttribute(attribute_type=AttributeType.EMAIL, value=email))
            if record.email_verified:
                confidence += s.verified_email_weight
                reasons.append("email match")
                if email_vouched_by_provider:
                    confidence += s.shared_oauth_email_weight
                    matched.append(
                        MatchedAttribute(attribute_type=AttributeType.OAUTH_EMAIL, value=email)
                    )
                    reasons.append("shared OAuth email")
            else:
                confidence += s.unverified_email_weight
                reasons.append("email match (unverified)")

        if phone_number and record.phone_number == phone_number:
            matched.append(
                MatchedAttribute(attribute_type=AttributeType.PHONE, value=phone_number)
            )
            if record.phone_verified:
                confidence += s.verified_phone_weight
                reasons.append("phone match")
            else:
                confidence += s.unverified_phone_weight
                reasons.append("phone match (unverified)")

        if provider:
            matched.append(
                MatchedAttribute(
                    attribute_type=AttributeType.PROVIDER_ACCOUNT, value=provider.value
                )
            )
            confidence += s.provider_account_weight
            reasons.append(f"same {provider.value} account")

        if name and record.name and normalize_name(record.name) == name:
            matched.append(MatchedAttribute(attribute_type=AttributeType.NAME, value=record.name))
            confidence += s.name_weight
            reasons.append("same name")

        return LinkCandidate(
            candidate_user_id=record.id,
            matched_attributes=matched,
            confidence=min(confidence, 100),
            reasons=reasons,
            name=record.name,
            email=record.email,
            phone_number=record.phone_number,
            auth_methods=record.auth_methods(),
            last_active_at=record.last_activity(),
        )
