"""PostgreSQL implementation of User repository."""

from datetime import datetime
from typing import Collection, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from idlink.domain.error import ConcurrencyConflictError
from idlink.domain.model import User
from idlink.domain.repository import UserRepository
from idlink.domain.repository.user import UNVERSIONED_FIELDS
from idlink.domain.value import AccountStatus, GroupId, UserId
from idlink.persistence.database import store_errors
from idlink.persistence.mappers import row_to_user, user_to_dict
from idlink.persistence.tables import users_table

_ACTIVE = users_table.c.account_status == AccountStatus.ACTIVE.value


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _first(self, stmt) -> Optional[User]:
        with store_errors():
            result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def _all(self, stmt) -> list[User]:
        with store_errors():
            result = await self.session.execute(stmt)
        return [row_to_user(dict(row)) for row in result.mappings().all()]

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        return await self._first(select(users_table).where(users_table.c.id == user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find an active user by email, case-insensitively.

        Args:
            email: Email to search for

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(
            func.lower(users_table.c.email) == email.lower(), _ACTIVE
        )
        return await self._first(stmt)

    async def find_by_phone(self, phone_number: str) -> Optional[User]:
        """Find an active user by E.164 phone number."""
        stmt = select(users_table).where(
            users_table.c.phone_number == phone_number, _ACTIVE
        )
        return await self._first(stmt)

    async def find_by_group(self, group_id: GroupId) -> list[User]:
        """Find all users in a group, oldest first."""
        stmt = (
            select(users_table)
            .where(users_table.c.group_id == group_id)
            .order_by(users_table.c.created_at)
        )
        return await self._all(stmt)

    async def find_link_matches(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        name: Optional[str],
        exclude_ids: Collection[UserId],
        exclude_group_id: Optional[GroupId] = None,
    ) -> list[User]:
        """Find active users sharing an email, phone or name.

        Name comparison lower-cases and collapses whitespace in the database,
        matching normalize_name for ASCII names.
        """
        conditions = []
        if email:
            conditions.append(func.lower(users_table.c.email) == email)
        if phone_number:
            conditions.append(users_table.c.phone_number == phone_number)
        if name:
            collapsed = func.regexp_replace(
                func.btrim(users_table.c.name), r"\s+", " ", "g"
            )
            conditions.append(func.lower(collapsed) == name)
        if not conditions:
            return []

        stmt = select(users_table).where(_ACTIVE, or_(*conditions))
        if exclude_ids:
            stmt = stmt.where(users_table.c.id.notin_(list(exclude_ids)))
        if exclude_group_id is not None:
            stmt = stmt.where(
                or_(
                    users_table.c.group_id.is_(None),
                    users_table.c.group_id != exclude_group_id,
                )
            )
        return await self._all(stmt.order_by(users_table.c.created_at))

    async def create(self, user: User) -> User:
        """Insert a new user.

        Args:
            user: User to insert

        Returns:
            Inserted user
        """
        stmt = users_table.insert().values(**user_to_dict(user))
        with store_errors():
            await self.session.execute(stmt)
            await self.session.flush()
        return user

    async def _versioned_update(self, user: User, expected_version: int) -> User:
        updated = user.model_copy(update={"version": expected_version + 1})
        values = {
            column: value
            for column, value in user_to_dict(updated).items()
            if column not in UNVERSIONED_FIELDS
        }
        stmt = (
            users_table.update()
            .where(
                users_table.c.id == user.id,
                users_table.c.version == expected_version,
            )
            .values(**values)
            .returning(users_table)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        if row is None:
            raise ConcurrencyConflictError(str(user.id), expected_version)
        return row_to_user(dict(row))

    async def update(self, user: User, expected_version: int) -> User:
        """Replace a user if its stored version still matches.

        Args:
            user: New state
            expected_version: Version the caller read

        Returns:
            Stored user with incremented version
        """
        with store_errors():
            updated = await self._versioned_update(user, expected_version)
            await self.session.flush()
        return updated

    async def update_many(self, updates: Sequence[tuple[User, int]]) -> list[User]:
        """Apply versioned updates inside one savepoint.

        A conflict on any row rolls back the savepoint, leaving the outer
        transaction usable for a retry.
        """
        written = []
        with store_errors():
            async with self.session.begin_nested():
                for user, expected_version in updates:
                    written.append(await self._versioned_update(user, expected_version))
        return written

    async def remove_backup_code(self, user_id: UserId, code: str) -> bool:
        """Remove a backup code in a single conditional UPDATE.

        The row lock taken by the UPDATE serializes concurrent callers; the
        loser re-evaluates the ANY() predicate and matches no row.
        """
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id, users_table.c.backup_codes.any(code))
            .values(backup_codes=func.array_remove(users_table.c.backup_codes, code))
        )
        with store_errors():
            result = await self.session.execute(stmt)
            await self.session.flush()
        return result.rowcount == 1

    async def replace_backup_codes(self, user_id: UserId, codes: list[str]) -> None:
        """Overwrite a user's backup codes."""
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(backup_codes=list(codes))
        )
        with store_errors():
            await self.session.execute(stmt)
            await self.session.flush()

    async def touch_last_sign_in(self, user_id: UserId, at: datetime) -> None:
        """Set last sign-in time."""
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(last_sign_in=at)
        )
        with store_errors():
            await self.session.execute(stmt)
            await self.session.flush()
