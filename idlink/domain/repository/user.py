"""User repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Collection, Optional, Sequence

from idlink.domain.model.user import User
from idlink.domain.value import GroupId, UserId

# Written only by their own single-field atomic operations; update() and
# update_many() keep the stored values.
UNVERSIONED_FIELDS = frozenset({"backup_codes", "last_sign_in"})


class UserRepository(ABC):
    """Repository for identity records.

    Defines the contract for identity record persistence. Every method is
    atomic at the single-record level; multi-record consistency is built on
    top of update() and its version precondition.

    Implementations raise StoreUnavailableError when the store cannot be
    reached.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a record by ID, whatever its status.

        Args:
            user_id: The record's unique identifier

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find the active record whose primary email matches, case-insensitively.

        Args:
            email: Email address

        Returns:
            The active record if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_phone(self, phone_number: str) -> Optional[User]:
        """Find the active record with this E.164 phone number.

        Args:
            phone_number: Normalized phone number

        Returns:
            The active record if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_group(self, group_id: GroupId) -> list[User]:
        """Get every record in a group, active or not, oldest first.

        Args:
            group_id: Group identifier

        Returns:
            List of records (may be empty)
        """
        pass

    @abstractmethod
    async def find_link_matches(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        name: Optional[str],
        exclude_ids: Collection[UserId],
        exclude_group_id: Optional[GroupId] = None,
    ) -> list[User]:
        """Find active records sharing an email, phone or normalized name.

        Args:
            email: Lower-cased email to match against primary emails
            phone_number: E.164 number to match against primary phones
            name: Normalized name (see normalize_name) to match
            exclude_ids: Records never returned
            exclude_group_id: Members of this group are never returned

        Returns:
            Matching active records
        """
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a new record.

        Raises:
            DuplicateIdentityError: If email or phone is taken by an active record
        """
        pass

    @abstractmethod
    async def update(self, user: User, expected_version: int) -> User:
        """Replace a record if it is still at expected_version.

        The stored version becomes expected_version + 1. Fields in
        UNVERSIONED_FIELDS keep their stored values, so a writer holding an
        older read cannot restore a consumed backup code.

        Args:
            user: New state of the record
            expected_version: Version the caller read

        Returns:
            The stored record with its new version

        Raises:
            ConcurrencyConflictError: If the stored version differs
            DuplicateIdentityError: If the write breaks email/phone uniqueness
        """
        pass

    @abstractmethod
    async def remove_backup_code(self, user_id: UserId, code: str) -> bool:
        """Atomically remove a backup code if present.

        Of several concurrent callers presenting the same code, exactly one
        gets True.

        Args:
            user_id: Record ID
            code: Upper-cased backup code

        Returns:
            True if the code was present and has been removed
        """
        pass

    @abstractmethod
    async def replace_backup_codes(self, user_id: UserId, codes: list[str]) -> None:
        """Overwrite the backup code list.

        Args:
            user_id: Record ID
            codes: New upper-cased codes
        """
        pass

    @abstractmethod
    async def touch_last_sign_in(self, user_id: UserId, at: datetime) -> None:
        """Record a successful sign-in time without bumping the version.

        Args:
            user_id: Record ID
            at: Sign-in time
        """
        pass

    @abstractmethod
    async def update_many(self, updates: Sequence[tuple[User, int]]) -> list[User]:
        """Apply several versioned updates as one all-or-nothing write.

        Args:
            updates: Pairs of (new state, version the caller read)

        Returns:
            The stored records with their new versions, in input order

        Raises:
            ConcurrencyConflictError: If any stored version differs; nothing is written
            DuplicateIdentityError: If the writes break email/phone uniqueness
        """
        pass
