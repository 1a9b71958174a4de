"""Authenticated principal."""

from typing import Optional

from pydantic import Field

from idlink.domain.model.common import DomainModel
from idlink.domain.value import AuthProvider, GroupId, RegisterSource, UserId


class Principal(DomainModel):
    """The identity a session acts as.

    id is the record that actually signed in. The linked_* lists and
    has_linked_accounts describe the record's whole group, so authorization
    decisions see every identifier the person has proven, not only the ones
    on the matched record.
    """

    id: UserId
    email: Optional[str] = None
    phone_number: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    register_source: RegisterSource
    group_id: Optional[GroupId] = None
    is_master: bool = False
    master_id: Optional[UserId] = None
    linked_emails: list[str] = Field(default_factory=list)
    linked_phones: list[str] = Field(default_factory=list)
    linked_providers: list[AuthProvider] = Field(default_factory=list)
    has_linked_accounts: bool = False
    two_factor_enabled: bool = False
