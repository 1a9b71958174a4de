"""Domain value objects for idlink.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from enum import Enum

import phonenumbers

from idlink.domain.value.common import ValueObject


class AuthProvider(str, Enum):
    """Supported OAuth providers."""

    GOOGLE = "google"
    GITHUB = "github"

    @property
    def display_name(self) -> str:
        return {"google": "Google", "github": "GitHub"}[self.value]


class RegisterSource(str, Enum):
    """Sign-in method that created an identity record."""

    CREDENTIALS = "credentials"
    PHONE = "phone"
    GOOGLE = "google"
    GITHUB = "github"

    @property
    def is_oauth(self) -> bool:
        """Whether the record was created through an OAuth provider."""
        return self in (RegisterSource.GOOGLE, RegisterSource.GITHUB)

    @classmethod
    def from_provider(cls, provider: AuthProvider) -> "RegisterSource":
        """Map an OAuth provider to its registration source."""
        return cls(provider.value)


class AccountStatus(str, Enum):
    """Lifecycle status of an identity record."""

    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class AttributeType(str, Enum):
    """Identity attribute that can match between two records."""

    EMAIL = "email"
    PHONE = "phone"
    NAME = "name"
    OAUTH_EMAIL = "oauth_email"
    PROVIDER_ACCOUNT = "provider_account"


class ActivityEventType(str, Enum):
    """Security/audit event recorded by the core."""

    SIGNIN_SUCCESS = "signin_success"
    SIGNIN_FAILED = "signin_failed"
    OAUTH_LINKED = "oauth_linked"
    BACKUP_CODE_USED = "backup_code_used"
    BACKUP_CODES_REGENERATED = "backup_codes_regenerated"
    ACCOUNTS_LINKED = "accounts_linked"
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    GROUP_OWNERSHIP_TRANSFERRED = "group_ownership_transferred"
    PHONE_VERIFIED = "phone_verified"


class OAuthProviderInfo(ValueObject):
    """OAuth provider information.

    Generic structure for user info returned from any OAuth provider.
    """

    provider: AuthProvider
    provider_account_id: str  # Permanent account ID on the provider
    email: str | None = None
    name: str | None = None
    image: str | None = None
    email_verified: bool = True  # Provider vouched for the email


def normalize_email(email: str) -> str:
    """Normalize an email address for storage and comparison."""
    return email.strip().lower()


def normalize_phone(phone_number: str, default_region: str = "US") -> str:
    """Normalize a phone number to E.164.

    Args:
        phone_number: Number as entered, with or without a country prefix
        default_region: Region used when the number has no '+' prefix

    Returns:
        Number in E.164 format

    Raises:
        ValueError: If the number cannot be parsed or is not a valid number
    """
    try:
        parsed = phonenumbers.parse(phone_number.strip(), default_region)
    except phonenumbers.phonenumberutil.NumberParseException:
        raise ValueError("Invalid phone number")
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Invalid phone number")
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def normalize_name(name: str) -> str:
    """Normalize a display name for case-insensitive comparison."""
    return " ".join(name.split()).casefold()
