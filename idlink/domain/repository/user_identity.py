"""User identity repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from idlink.domain.model.user_identity import UserIdentity
from idlink.domain.value import AuthProvider, UserId


class UserIdentityRepository(ABC):
    """Repository for UserIdentity entity.

    Manages the relationship between identity records and the OAuth
    provider accounts attached to them.
    """

    @abstractmethod
    async def find_by_provider(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[UserIdentity]:
        """Find an identity by provider and provider account ID.

        Args:
            provider: The OAuth provider
            provider_account_id: The account's ID on that provider

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_id(self, user_id: UserId) -> list[UserIdentity]:
        """Get all provider identities attached to a record.

        Args:
            user_id: The record's unique identifier

        Returns:
            List of identities (may be empty)
        """
        pass

    @abstractmethod
    async def save(self, identity: UserIdentity) -> UserIdentity:
        """Save an identity (create or update).

        Args:
            identity: The identity to save

        Returns:
            The saved identity
        """
        pass
