"""Group aggregate view.

A group is not stored on its own: it is the set of identity records that
share a group id. This model is the read-side view built from those records.
"""

from typing import Optional

from idlink.domain.model.common import DomainModel
from idlink.domain.model.user import User
from idlink.domain.value import AuthProvider, GroupId, UserId


class Group(DomainModel):
    """Records sharing one group id, with the aggregate linked view."""

    group_id: GroupId
    members: list[User]

    @property
    def active_members(self) -> list[User]:
        return [m for m in self.members if m.is_active]

    @property
    def master(self) -> Optional[User]:
        """The active master, if any."""
        return next((m for m in self.active_members if m.is_master), None)

    @property
    def member_ids(self) -> list[UserId]:
        return [m.id for m in self.members]

    def linked_emails(self) -> frozenset[str]:
        return frozenset().union(*(m.all_emails() for m in self.active_members))

    def linked_phones(self) -> frozenset[str]:
        return frozenset().union(*(m.all_phones() for m in self.active_members))

    def linked_providers(self) -> frozenset[AuthProvider]:
        return frozenset().union(*(m.linked_providers for m in self.active_members))
