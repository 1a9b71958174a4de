"""UserIdentity repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from idlink.domain.model.user_identity import UserIdentity
from idlink.domain.repository.user_identity import UserIdentityRepository
from idlink.domain.value import AuthProvider, UserId
from idlink.persistence.database import store_errors
from idlink.persistence.mappers import row_to_user_identity, user_identity_to_dict
from idlink.persistence.tables import user_identities_table


class PostgresUserIdentityRepository(UserIdentityRepository):
    """PostgreSQL implementation of UserIdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def save(self, identity: UserIdentity) -> UserIdentity:
        """Save user identity to database.

        Args:
            identity: UserIdentity to save

        Returns:
            Saved UserIdentity
        """
        identity_dict = user_identity_to_dict(identity)

        with store_errors():
            # Check if identity exists
            existing = await self.session.execute(
                select(user_identities_table.c.id).where(
                    user_identities_table.c.id == identity.id
                )
            )

            if existing.first():
                # Update existing identity
                stmt = (
                    user_identities_table.update()
                    .where(user_identities_table.c.id == identity.id)
                    .values(**identity_dict)
                )
            else:
                # Insert new identity
                stmt = user_identities_table.insert().values(**identity_dict)
            await self.session.execute(stmt)
            await self.session.flush()
        return identity

    async def find_by_provider(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[UserIdentity]:
        """Get user identity by provider and provider account ID.

        Args:
            provider: OAuth provider
            provider_account_id: Account ID on that provider

        Returns:
            UserIdentity if found, None otherwise
        """
        stmt = select(user_identities_table).where(
            user_identities_table.c.provider == provider.value,
            user_identities_table.c.provider_account_id == provider_account_id,
        )
        with store_errors():
            result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_user_identity(dict(row))

    async def find_all_by_user_id(self, user_id: UserId) -> list[UserIdentity]:
        """Find all identities for a user.

        Args:
            user_id: User ID to find identities for

        Returns:
            List of UserIdentity objects (may be empty)
        """
        stmt = (
            select(user_identities_table)
            .where(user_identities_table.c.user_id == user_id)
            .order_by(user_identities_table.c.created_at)
        )
        with store_errors():
            result = await self.session.execute(stmt)
        rows = result.mappings().all()

        return [row_to_user_identity(dict(row)) for row in rows]
