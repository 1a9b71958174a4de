"""User identity domain service."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

import logfire

from idlink.domain.model.user_identity import UserIdentity
from idlink.domain.repository.user_identity import UserIdentityRepository
from idlink.domain.value import AuthProvider, UserId, UserIdentityId

from .base import Service


class UserIdentityService(Service):
    """Domain service for OAuth provider identity operations."""

    def __init__(self, user_identity_repository: UserIdentityRepository) -> None:
        """Initialize user identity service.

        Args:
            user_identity_repository: User identity repository
        """
        self.user_identity_repository = user_identity_repository

    async def get_identity_by_provider(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[UserIdentity]:
        """Get identity by provider and provider account ID.

        Args:
            provider: OAuth provider
            provider_account_id: Account ID on that provider

        Returns:
            Identity if found, None otherwise
        """
        with logfire.span(
            "user_identity_service.get_identity_by_provider",
            provider=provider.value,
            provider_account_id=provider_account_id,
        ):
            identity = await self.user_identity_repository.find_by_provider(
                provider, provider_account_id
            )
            if identity:
                logfire.info(
                    "Identity found",
                    provider=provider.value,
                    user_id=str(identity.user_id),
                )
            return identity

    async def get_all_identities_for_user(self, user_id: UserId) -> list[UserIdentity]:
        """Get all identities linked to a user.

        Args:
            user_id: User ID

        Returns:
            List of identities (may be empty)
        """
        with logfire.span(
            "user_identity_service.get_all_identities_for_user", user_id=str(user_id)
        ):
            identities = await self.user_identity_repository.find_all_by_user_id(
                user_id
            )
            logfire.info(
                "Identities retrieved for user",
                user_id=str(user_id),
                count=len(identities),
            )
            return identities

    async def attach(
        self,
        user_id: UserId,
        provider: AuthProvider,
        provider_account_id: str,
        provider_email: Optional[str],
    ) -> UserIdentity:
        """Attach a provider account to a user.

        Args:
            user_id: Record the account belongs to
            provider: OAuth provider
            provider_account_id: Account ID on that provider
            provider_email: Email reported by the provider

        Returns:
            The new identity
        """
        now = datetime.now()
        identity = UserIdentity(
            id=UserIdentityId(uuid4()),
            user_id=user_id,
            provider=provider,
            provider_account_id=provider_account_id,
            provider_email=provider_email,
            created_at=now,
            updated_at=now,
            last_login_at=now,
        )
        return await self.save(identity)

    async def record_login(self, identity: UserIdentity) -> UserIdentity:
        """Update last_login_at on a returning provider identity."""
        now = datetime.now()
        return await self.save(
            identity.model_copy(update={"last_login_at": now, "updated_at": now})
        )

    async def save(self, identity: UserIdentity) -> UserIdentity:
        """Save identity (create or update).

        Args:
            identity: Identity to save

        Returns:
            Saved identity
        """
        with logfire.span(
            "user_identity_service.save",
            identity_id=str(identity.id),
            provider=identity.provider.value,
            user_id=str(identity.user_id),
        ):
            saved = await self.user_identity_repository.save(identity)
            logfire.info(
                "Identity saved",
                identity_id=str(saved.id),
                provider=saved.provider.value,
                user_id=str(saved.user_id),
            )
            return saved
