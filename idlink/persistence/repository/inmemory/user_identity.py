"""In-memory user identity repository for testing."""

from typing import Optional

from idlink.domain.model.user_identity import UserIdentity
from idlink.domain.repository.user_identity import UserIdentityRepository
from idlink.domain.value import AuthProvider, UserId


class InMemoryUserIdentityRepository(UserIdentityRepository):
    """In-memory implementation of UserIdentityRepository for testing."""

    def __init__(self) -> None:
        self._identities: list[UserIdentity] = []

    async def save(self, identity: UserIdentity) -> UserIdentity:
        """Save user identity."""
        # Check for existing identity with same ID (update case)
        for i, existing in enumerate(self._identities):
            if existing.id == identity.id:
                self._identities[i] = identity
                return identity

        self._identities.append(identity)
        return identity

    async def find_by_provider(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[UserIdentity]:
        """Find user identity by provider and provider account ID."""
        for identity in self._identities:
            if (
                identity.provider == provider
                and identity.provider_account_id == provider_account_id
            ):
                return identity
        return None

    async def find_all_by_user_id(self, user_id: UserId) -> list[UserIdentity]:
        """Find all identities for a user."""
        matches = [i for i in self._identities if i.user_id == user_id]
        # Sort by created_at
        matches.sort(key=lambda i: i.created_at)
        return matches
