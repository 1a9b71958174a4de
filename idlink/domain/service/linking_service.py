"""Account linking (merge) domain service."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence
from uuid import uuid4

import logfire

from idlink.config import LinkingSettings
from idlink.domain.error import (
    AlreadyLinkedError,
    CandidateNotFoundError,
    ConcurrencyConflictError,
    StoreConflictError,
    ValidationError,
)
from idlink.domain.model import User
from idlink.domain.repository import UserRepository
from idlink.domain.value import ActivityEventType, GroupId, UserId

from .activity_service import ActivityService
from .base import Service
from .candidate_service import CandidateService


@dataclass
class LinkResult:
    """Outcome of a link attempt."""

    linked: bool
    group_id: Optional[GroupId] = None
    master_id: Optional[UserId] = None
    user_ids: list[UserId] = field(default_factory=list)
    already_linked: bool = False


class LinkingService(Service):
    """Merges identity records into groups.

    A merge is a batch of versioned writes applied all-or-nothing. If another
    writer got there first the merge starts again from fresh reads, up to
    max_merge_attempts times. Records are never deleted.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        candidate_service: CandidateService,
        activity_service: ActivityService,
        linking_settings: LinkingSettings,
    ) -> None:
        self.user_repository = user_repository
        self.candidate_service = candidate_service
        self.activity_service = activity_service
        self.settings = linking_settings

    async def auto_link_if_confident(
        self,
        subject_id: UserId,
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
        name: Optional[str] = None,
        min_confidence: Optional[int] = None,
        email_vouched_by_provider: bool = False,
    ) -> LinkResult:
        """Merge the subject with its best candidate if that reaches the threshold.

        Args:
            subject_id: Record being signed in or registered
            email: Email to match on
            phone_number: E.164 phone to match on
            name: Name to match on
            min_confidence: Stricter threshold; never below auto_link_threshold
            email_vouched_by_provider: The email came from an OAuth provider

        Returns:
            LinkResult; linked is False when no candidate was confident enough
        """
        threshold = max(min_confidence or 0, self.settings.auto_link_threshold)

        with logfire.span(
            "linking_service.auto_link_if_confident",
            subject_id=str(subject_id),
            threshold=threshold,
        ):
            candidates = await self.candidate_service.find_candidates(
                exclude_user_id=subject_id,
                email=email,
                phone_number=phone_number,
                name=name,
                email_vouched_by_provider=email_vouched_by_provider,
            )
            best = candidates[0] if candidates else None
            if best is None or best.confidence < threshold:
                logfire.info(
                    "No candidate above threshold",
                    subject_id=str(subject_id),
                    best=best.confidence if best else None,
                )
                return LinkResult(linked=False)

            return await self._merge(
                subject_id,
                [best.candidate_user_id],
                force_master=False,
                confidence=best.confidence,
            )

    async def link_accounts(
        self, primary_id: UserId, secondary_ids: Sequence[UserId]
    ) -> LinkResult:
        """Merge records the user has confirmed are theirs.

        The primary becomes the group's master.

        Raises:
            ValidationError: If no secondary record is given
            CandidateNotFoundError: If any record is missing or inactive
            StoreConflictError: If concurrent writes kept winning
        """
        others = [s for s in dict.fromkeys(secondary_ids) if s != primary_id]
        if not others:
            raise ValidationError("At least one other account is required")

        with logfire.span(
            "linking_service.link_accounts",
            primary_id=str(primary_id),
            secondary_count=len(others),
        ):
            return await self._merge(primary_id, others, force_master=True)

    async def _merge(
        self,
        subject_id: UserId,
        other_ids: list[UserId],
        force_master: bool,
        confidence: Optional[int] = None,
    ) -> LinkResult:
        for attempt in range(1, self.settings.max_merge_attempts + 1):
            try:
                return await self._merge_once(
                    subject_id, other_ids, force_master, confidence
                )
            except AlreadyLinkedError:
                subject = await self.user_repository.find_by_id(subject_id)
                logfire.info("Accounts already linked", subject_id=str(subject_id))
                return LinkResult(
                    linked=True,
                    group_id=subject.group_id if subject else None,
                    user_ids=[subject_id, *other_ids],
                    already_linked=True,
                )
            except ConcurrencyConflictError as e:
                logfire.warn(
                    "Merge conflict, retrying",
                    attempt=attempt,
                    user_id=e.user_id,
                )
        raise StoreConflictError(
            f"Merge of {subject_id} gave up after {self.settings.max_merge_attempts} attempts"
        )

    async def _load_participants(self, ids: list[UserId]) -> list[User]:
        participants = []
        for user_id in ids:
            user = await self.user_repository.find_by_id(user_id)
            if user is None or not user.is_active:
                raise CandidateNotFoundError(str(user_id))
            participants.append(user)
        return participants

    async def _merge_once(
        self,
        subject_id: UserId,
        other_ids: list[UserId],
        force_master: bool,
        confidence: Optional[int],
    ) -> LinkResult:
        participants = await self._load_participants([subject_id, *other_ids])
        subject = participants[0]

        group_ids = {p.group_id for p in participants}
        if len(group_ids) == 1 and None not in group_ids:
            raise AlreadyLinkedError()

        # Every record of every participating group takes part in the merge
        members: dict[UserId, User] = {p.id: p for p in participants}
        groups: dict[GroupId, list[User]] = {}
        for group_id in group_ids - {None}:
            groups[group_id] = await self.user_repository.find_by_group(group_id)
            for m in groups[group_id]:
                members.setdefault(m.id, m)

        master = subject if force_master else self._pick_master(subject, groups)
        surviving_group_id = self._pick_group_id(master, participants)

        active = [m for m in members.values() if m.is_active]
        linked_emails = frozenset().union(*(m.all_emails() for m in active))
        linked_phones = frozenset().union(*(m.all_phones() for m in active))
        linked_providers = frozenset().union(*(m.linked_providers for m in active))
        verified_emails = frozenset().union(*(m.verified_emails for m in active))
        verified_phones = frozenset().union(*(m.verified_phones for m in active))

        now = datetime.now()
        updates: list[tuple[User, int]] = []
        for m in sorted(members.values(), key=lambda u: u.id == master.id):
            changes: dict = {
                "group_id": surviving_group_id,
                "is_master": m.id == master.id,
                "updated_at": now,
            }
            if m.is_active:
                changes.update(
                    linked_emails=linked_emails,
                    linked_phones=linked_phones,
                    linked_providers=linked_providers,
                    verified_emails=verified_emails,
                    verified_phones=verified_phones,
                    last_merge_at=now,
                )
            updates.append((m.model_copy(update=changes), m.version))

        # Non-masters are demoted before the master is promoted
        await self.user_repository.update_many(updates)

        user_ids = [m.id for m in members.values()]
        await self.activity_service.record(
            str(master.id),
            ActivityEventType.ACCOUNTS_LINKED,
            group_id=str(surviving_group_id),
            master_id=str(master.id),
            user_ids=[str(u) for u in user_ids],
            confirmed=force_master,
            confidence=confidence,
        )
        logfire.info(
            "Accounts linked",
            group_id=str(surviving_group_id),
            master_id=str(master.id),
            member_count=len(user_ids),
        )
        return LinkResult(
            linked=True,
            group_id=surviving_group_id,
            master_id=master.id,
            user_ids=user_ids,
        )

    @staticmethod
    def _pick_master(subject: User, groups: dict[GroupId, list[User]]) -> User:
        """Keep an existing master; the earliest-created group wins."""
        existing = []
        for group_members in groups.values():
            master = next(
                (m for m in group_members if m.is_active and m.is_master), None
            )
            if master:
                created = min(m.created_at for m in group_members)
                existing.append((created, master))
        if not existing:
            return subject
        return min(existing, key=lambda pair: pair[0])[1]

    @staticmethod
    def _pick_group_id(master: User, participants: list[User]) -> GroupId:
        if master.group_id:
            return master.group_id
        grouped = sorted(
            (p for p in participants if p.group_id), key=lambda p: p.created_at
        )
        if grouped:
            return grouped[0].group_id
        return GroupId(uuid4())
