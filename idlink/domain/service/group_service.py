"""Group resolution and account lifecycle domain service."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import logfire

from idlink.config import LinkingSettings
from idlink.domain.error import (
    AccountNotFoundError,
    CandidateNotFoundError,
    ConcurrencyConflictError,
    RequiresTransferError,
    StoreConflictError,
)
from idlink.domain.model import Group, Principal, User
from idlink.domain.repository import UserRepository
from idlink.domain.value import AccountStatus, ActivityEventType, UserId

from .activity_service import ActivityService
from .base import Service


@dataclass
class DeactivationResult:
    """Outcome of a deactivation."""

    user_id: UserId
    new_master_id: Optional[UserId] = None


class GroupService(Service):
    """Builds group views and principals; deactivates accounts."""

    def __init__(
        self,
        user_repository: UserRepository,
        activity_service: ActivityService,
        linking_settings: LinkingSettings,
    ) -> None:
        self.user_repository = user_repository
        self.activity_service = activity_service
        self.settings = linking_settings

    async def get_group(self, user: User) -> Optional[Group]:
        """Load the user's group, or None if it has never been linked."""
        if user.group_id is None:
            return None
        members = await self.user_repository.find_by_group(user.group_id)
        if not any(m.id == user.id for m in members):
            members.append(user)
        return Group(group_id=user.group_id, members=members)

    async def resolve_principal(self, user: User) -> Principal:
        """Project a record and its group into the session principal.

        Linked attributes are aggregated over the active members of the group,
        so a sign-in through any member sees the same identifiers.

        Args:
            user: The record that signed in

        Returns:
            Principal for the session
        """
        with logfire.span("group_service.resolve_principal", user_id=str(user.id)):
            group = await self.get_group(user)
            if group is None:
                emails, phones, providers = (
                    user.all_emails(),
                    user.all_phones(),
                    user.linked_providers,
                )
                master_id = None
                has_linked_accounts = False
            else:
                emails = group.linked_emails()
                phones = group.linked_phones()
                providers = group.linked_providers()
                master = group.master
                master_id = master.id if master else None
                has_linked_accounts = len(group.active_members) > 1

            return Principal(
                id=user.id,
                email=user.email,
                phone_number=user.phone_number,
                name=user.name,
                image=user.image,
                register_source=user.register_source,
                group_id=user.group_id,
                is_master=bool(user.group_id) and user.is_master,
                master_id=master_id,
                linked_emails=sorted(emails),
                linked_phones=sorted(phones),
                linked_providers=sorted(providers, key=lambda p: p.value),
                has_linked_accounts=has_linked_accounts,
                two_factor_enabled=user.two_factor_enabled,
            )

    async def deactivate(
        self,
        user_id: UserId,
        transfer_ownership: bool = False,
        transfer_to: Optional[UserId] = None,
    ) -> DeactivationResult:
        """Deactivate a record.

        The master of a group with other active members must hand the group
        over first. With transfer_ownership the target (transfer_to, or the
        earliest-created other active member) is promoted in the same write
        that deactivates the original.

        Raises:
            AccountNotFoundError: If the record is missing or already inactive
            RequiresTransferError: If a transfer is needed and was not requested
            CandidateNotFoundError: If transfer_to is not another active member
            StoreConflictError: If concurrent writes kept winning
        """
        with logfire.span(
            "group_service.deactivate",
            user_id=str(user_id),
            transfer_ownership=transfer_ownership,
        ):
            for attempt in range(1, self.settings.max_merge_attempts + 1):
                try:
                    return await self._deactivate_once(
                        user_id, transfer_ownership, transfer_to
                    )
                except ConcurrencyConflictError:
                    logfire.warn("Deactivation conflict, retrying", attempt=attempt)
            raise StoreConflictError(f"Deactivation of {user_id} gave up")

    async def _deactivate_once(
        self,
        user_id: UserId,
        transfer_ownership: bool,
        transfer_to: Optional[UserId],
    ) -> DeactivationResult:
        user = await self.user_repository.find_by_id(user_id)
        if user is None or not user.is_active:
            raise AccountNotFoundError(f"No active account {user_id}")

        now = datetime.now()
        deactivated = user.model_copy(
            update={
                "account_status": AccountStatus.DEACTIVATED,
                "is_master": False,
                "deactivated_at": now,
                "updated_at": now,
            }
        )

        group = await self.get_group(user)
        others = (
            [m for m in group.active_members if m.id != user.id] if group else []
        )

        if not (user.is_master and others):
            await self.user_repository.update(deactivated, user.version)
            await self.activity_service.record(
                str(user.id), ActivityEventType.ACCOUNT_DEACTIVATED
            )
            logfire.info("Account deactivated", user_id=str(user.id))
            return DeactivationResult(user_id=user.id)

        if not transfer_ownership:
            logfire.warn(
                "Deactivation refused, transfer required", user_id=str(user.id)
            )
            raise RequiresTransferError([str(m.id) for m in others])

        if transfer_to is not None:
            target = next((m for m in others if m.id == transfer_to), None)
            if target is None:
                raise CandidateNotFoundError(str(transfer_to))
        else:
            target = min(others, key=lambda m: m.created_at)

        promoted = target.model_copy(update={"is_master": True, "updated_at": now})
        await self.user_repository.update_many(
            [(promoted, target.version), (deactivated, user.version)]
        )

        await self.activity_service.record(
            str(user.id),
            ActivityEventType.GROUP_OWNERSHIP_TRANSFERRED,
            group_id=str(user.group_id),
            from_user_id=str(user.id),
            to_user_id=str(target.id),
        )
        await self.activity_service.record(
            str(user.id), ActivityEventType.ACCOUNT_DEACTIVATED
        )
        logfire.info(
            "Ownership transferred and account deactivated",
            user_id=str(user.id),
            new_master_id=str(target.id),
        )
        return DeactivationResult(user_id=user.id, new_master_id=target.id)
