"""User identity entity.

Links an OAuth provider account to an identity record.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from idlink.domain.model.common import DomainModel
from idlink.domain.value import AuthProvider, UserId, UserIdentityId


class UserIdentity(DomainModel):
    """OAuth provider account linked to an identity record.

    (provider, provider_account_id) is unique: a provider account belongs to
    exactly one record.
    """

    id: UserIdentityId
    user_id: UserId
    provider: AuthProvider
    provider_account_id: str  # Permanent ID from provider
    provider_email: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    last_login_at: Optional[datetime] = None
