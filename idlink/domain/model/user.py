"""Identity record aggregate root.

One record per authenticable credential set (email/password, phone, or an
OAuth provider). Records that belong to the same person share a group id.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from idlink.domain.model.common import DomainModel
from idlink.domain.value import (
    AccountStatus,
    AuthProvider,
    GroupId,
    RegisterSource,
    UserId,
)


class User(DomainModel):
    """Identity record.

    Email and phone are unique across active records. The linked_* sets are
    denormalized: after a merge every member holds the union for its whole
    group, so a single record answers "which identifiers belong to this
    person" without reading the rest of the group.
    """

    id: UserId
    email: Optional[str] = None  # Stored lower-cased
    phone_number: Optional[str] = None  # E.164
    name: Optional[str] = None
    image: Optional[str] = None
    password_hash: Optional[str] = None
    register_source: RegisterSource

    two_factor_enabled: bool = False
    two_factor_secret: Optional[str] = None  # Base32 TOTP secret
    backup_codes: list[str] = Field(default_factory=list)  # Upper-cased, single-use

    linked_emails: frozenset[str] = Field(default_factory=frozenset)
    linked_phones: frozenset[str] = Field(default_factory=frozenset)
    linked_providers: frozenset[AuthProvider] = Field(default_factory=frozenset)
    verified_emails: frozenset[str] = Field(default_factory=frozenset)
    verified_phones: frozenset[str] = Field(default_factory=frozenset)

    group_id: Optional[GroupId] = None
    is_master: bool = False  # Meaningful only when group_id is set

    account_status: AccountStatus = AccountStatus.ACTIVE
    version: int = Field(default=0, ge=0)  # Optimistic concurrency precondition

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    last_sign_in: Optional[datetime] = None
    last_merge_at: Optional[datetime] = None
    deactivated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.account_status == AccountStatus.ACTIVE

    @property
    def email_verified(self) -> bool:
        return self.email is not None and self.email in self.verified_emails

    @property
    def phone_verified(self) -> bool:
        return (
            self.phone_number is not None
            and self.phone_number in self.verified_phones
        )

    def all_emails(self) -> frozenset[str]:
        """Primary email plus every linked email."""
        own = {self.email} if self.email else set()
        return self.linked_emails | own

    def all_phones(self) -> frozenset[str]:
        """Primary phone plus every linked phone."""
        own = {self.phone_number} if self.phone_number else set()
        return self.linked_phones | own

    def auth_methods(self) -> list[str]:
        """Sign-in methods this record can use on its own."""
        methods = []
        if self.password_hash:
            methods.append(RegisterSource.CREDENTIALS.value)
        if self.phone_verified:
            methods.append(RegisterSource.PHONE.value)
        methods.extend(sorted(p.value for p in self.linked_providers))
        return methods

    def last_activity(self) -> datetime:
        """Most recent sign-in, falling back to the last update."""
        return self.last_sign_in or self.updated_at
