"""In-memory user repository for testing."""

from datetime import datetime
from typing import Collection, Optional, Sequence

from idlink.domain.error import ConcurrencyConflictError, DuplicateIdentityError
from idlink.domain.model.user import User
from idlink.domain.repository.user import UNVERSIONED_FIELDS, UserRepository
from idlink.domain.value import GroupId, UserId, normalize_name


def _versioned(user: User, stored: User, expected_version: int) -> User:
    kept = {field: getattr(stored, field) for field in UNVERSIONED_FIELDS}
    return user.model_copy(update={**kept, "version": expected_version + 1})


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing.

    No method awaits between reading and writing, so each call is atomic
    with respect to other coroutines on the same loop.
    """

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self._users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find an active user by their email."""
        email = email.lower()
        for user in self._users.values():
            if user.is_active and user.email is not None and user.email.lower() == email:
                return user
        return None

    async def find_by_phone(self, phone_number: str) -> Optional[User]:
        """Find an active user by their phone number."""
        for user in self._users.values():
            if user.is_active and user.phone_number == phone_number:
                return user
        return None

    async def find_by_group(self, group_id: GroupId) -> list[User]:
        """Find all users in a group, oldest first."""
        members = [u for u in self._users.values() if u.group_id == group_id]
        members.sort(key=lambda u: u.created_at)
        return members

    async def find_link_matches(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        name: Optional[str],
        exclude_ids: Collection[UserId],
        exclude_group_id: Optional[GroupId] = None,
    ) -> list[User]:
        """Find active users sharing an email, phone or name."""
        matches = []
        for user in self._users.values():
            if not user.is_active or user.id in exclude_ids:
                continue
            if exclude_group_id is not None and user.group_id == exclude_group_id:
                continue
            if (
                (email and user.email and user.email.lower() == email)
                or (phone_number and user.phone_number == phone_number)
                or (name and user.name and normalize_name(user.name) == name)
            ):
                matches.append(user)
        matches.sort(key=lambda u: u.created_at)
        return matches

    async def create(self, user: User) -> User:
        """Insert a new user."""
        self._check_unique(user)
        self._users[user.id] = user
        return user

    async def update(self, user: User, expected_version: int) -> User:
        """Replace a user if its stored version still matches."""
        stored = self._users.get(user.id)
        if stored is None or stored.version != expected_version:
            raise ConcurrencyConflictError(str(user.id), expected_version)
        self._check_unique(user)
        updated = _versioned(user, stored, expected_version)
        self._users[user.id] = updated
        return updated

    async def update_many(self, updates: Sequence[tuple[User, int]]) -> list[User]:
        """Apply versioned updates all-or-nothing."""
        for user, expected_version in updates:
            stored = self._users.get(user.id)
            if stored is None or stored.version != expected_version:
                raise ConcurrencyConflictError(str(user.id), expected_version)
        snapshot = dict(self._users)
        written = []
        try:
            for user, expected_version in updates:
                self._users[user.id] = _versioned(
                    user, snapshot[user.id], expected_version
                )
            for user, _ in updates:
                self._check_unique(self._users[user.id])
                written.append(self._users[user.id])
        except DuplicateIdentityError:
            self._users = snapshot
            raise
        return written

    async def remove_backup_code(self, user_id: UserId, code: str) -> bool:
        """Remove a backup code if present."""
        user = self._users.get(user_id)
        if user is None or code not in user.backup_codes:
            return False
        remaining = [c for c in user.backup_codes if c != code]
        self._users[user_id] = user.model_copy(update={"backup_codes": remaining})
        return True

    async def replace_backup_codes(self, user_id: UserId, codes: list[str]) -> None:
        """Overwrite a user's backup codes."""
        user = self._users.get(user_id)
        if user:
            self._users[user_id] = user.model_copy(update={"backup_codes": list(codes)})

    async def touch_last_sign_in(self, user_id: UserId, at: datetime) -> None:
        """Set last sign-in time."""
        user = self._users.get(user_id)
        if user:
            self._users[user_id] = user.model_copy(update={"last_sign_in": at})

    def _check_unique(self, user: User) -> None:
        if not user.is_active:
            return
        for other in self._users.values():
            if other.id == user.id or not other.is_active:
                continue
            if user.email and other.email and other.email.lower() == user.email.lower():
                raise DuplicateIdentityError("email")
            if user.phone_number and other.phone_number == user.phone_number:
                raise DuplicateIdentityError("phone_number")
