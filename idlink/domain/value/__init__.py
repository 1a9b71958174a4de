"""Domain value objects for idlink."""

from idlink.domain.value.credentials import (
    Credential,
    EmailCredential,
    OAuthCredential,
    PhoneCredential,
    parse_credential,
)
from idlink.domain.value.identifiers import (
    ActivityEventId,
    GroupId,
    UserId,
    UserIdentityId,
)
from idlink.domain.value.types import (
    AccountStatus,
    ActivityEventType,
    AttributeType,
    AuthProvider,
    OAuthProviderInfo,
    RegisterSource,
    normalize_email,
    normalize_name,
    normalize_phone,
)

__all__ = [
    # Identifiers
    "UserId",
    "UserIdentityId",
    "GroupId",
    "ActivityEventId",
    # Types
    "AccountStatus",
    "ActivityEventType",
    "AttributeType",
    "AuthProvider",
    "OAuthProviderInfo",
    "RegisterSource",
    "normalize_email",
    "normalize_name",
    "normalize_phone",
    # Credentials
    "Credential",
    "EmailCredential",
    "OAuthCredential",
    "PhoneCredential",
    "parse_credential",
]
