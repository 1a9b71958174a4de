"""Domain layer errors."""

from enum import Enum
from typing import Optional, Sequence


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class StoreUnavailableError(DomainError):
    """Raised by repositories when the backing store cannot be reached."""

    pass


class ExternalServiceError(DomainError):
    """Raised by collaborator clients (SMS, OAuth) when the remote call fails."""

    pass


class ExternalServiceRejectedError(DomainError):
    """Raised by collaborator clients when the service answered and refused.

    The collaborator is reachable; what it was asked to check (an OAuth
    authorization code) is not valid.
    """

    pass


class ConcurrencyConflictError(DomainError):
    """Raised when a versioned write finds the record changed underneath it."""

    def __init__(self, user_id: str, expected_version: int):
        self.user_id = user_id
        self.expected_version = expected_version
        super().__init__(
            f"User {user_id} was modified concurrently (expected version {expected_version})"
        )


class AuthErrorKind(str, Enum):
    """Caller-facing failure kinds."""

    # Client errors
    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_PHONE_FORMAT = "invalid_phone_format"

    # Authentication failures
    NOT_FOUND = "not_found"
    WRONG_PROVIDER = "wrong_provider"
    INVALID_CREDENTIAL = "invalid_credential"
    PHONE_UNVERIFIED = "phone_unverified"
    INVALID_OR_EXPIRED_CODE = "invalid_or_expired_code"
    TWO_FACTOR_REQUIRED = "two_factor_required"
    INVALID_TWO_FACTOR_CODE = "invalid_two_factor_code"

    # Linking failures
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    ALREADY_LINKED = "already_linked"
    STORE_CONFLICT = "store_conflict"

    # Account lifecycle
    ACCOUNT_NOT_FOUND = "account_not_found"
    REQUIRES_TRANSFER = "requires_transfer"
    DUPLICATE_IDENTITY = "duplicate_identity"
    TWO_FACTOR_NOT_ENABLED = "two_factor_not_enabled"

    # Structural
    INFRASTRUCTURE = "infrastructure"


# Shared by NOT_FOUND and INVALID_CREDENTIAL so responses cannot reveal
# whether an account exists.
GENERIC_SIGNIN_MESSAGE = "Invalid credentials"


class AuthError(DomainError):
    """Base for every failure the application reports to callers.

    public_message is safe to show to the end user. The exception's own
    message may carry internal detail and is only for logs.
    """

    kind: AuthErrorKind = AuthErrorKind.INVALID_CREDENTIAL
    public_message: str = GENERIC_SIGNIN_MESSAGE

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.public_message)


class ClientError(AuthError):
    """Malformed or missing input. Rejected before touching the store."""

    pass


class MissingCredentialsError(ClientError):
    kind = AuthErrorKind.MISSING_CREDENTIALS
    public_message = "Missing required credentials"

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class InvalidPhoneFormatError(ClientError):
    kind = AuthErrorKind.INVALID_PHONE_FORMAT
    public_message = "Invalid phone number"


class AuthenticationFailure(AuthError):
    """The credential did not prove identity. Always recorded as a security event."""

    pass


class AccountNotFoundForCredentialError(AuthenticationFailure):
    kind = AuthErrorKind.NOT_FOUND


class WrongProviderError(AuthenticationFailure):
    """The record was registered through an OAuth provider and has no password.

    Deliberately names the provider so the user can be sent to the right
    sign-in button.
    """

    kind = AuthErrorKind.WRONG_PROVIDER

    def __init__(self, provider: str):
        self.provider = provider
        self.public_message = (
            f"This email is registered with {provider}. "
            f"Please use {provider} to sign in."
        )
        super().__init__(self.public_message)


class InvalidCredentialError(AuthenticationFailure):
    kind = AuthErrorKind.INVALID_CREDENTIAL


class PhoneUnverifiedError(AuthenticationFailure):
    kind = AuthErrorKind.PHONE_UNVERIFIED
    public_message = GENERIC_SIGNIN_MESSAGE


class InvalidOrExpiredCodeError(AuthenticationFailure):
    kind = AuthErrorKind.INVALID_OR_EXPIRED_CODE
    public_message = "Invalid or expired code"


class TwoFactorRequiredError(AuthenticationFailure):
    """Password was correct but no second factor was supplied.

    Callers re-prompt for a code rather than rejecting the attempt.
    """

    kind = AuthErrorKind.TWO_FACTOR_REQUIRED
    public_message = "Two-factor code required"


class InvalidTwoFactorCodeError(AuthenticationFailure):
    kind = AuthErrorKind.INVALID_TWO_FACTOR_CODE
    public_message = "Invalid two-factor code"


class LinkingError(AuthError):
    """State conflict while merging accounts."""

    pass


class CandidateNotFoundError(LinkingError):
    kind = AuthErrorKind.CANDIDATE_NOT_FOUND
    public_message = "Account to link was not found"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Link participant missing or inactive: {user_id}")


class AlreadyLinkedError(LinkingError):
    """All requested records already share a group. Callers treat it as success."""

    kind = AuthErrorKind.ALREADY_LINKED
    public_message = "Accounts are already linked"


class StoreConflictError(LinkingError):
    kind = AuthErrorKind.STORE_CONFLICT
    public_message = "The account changed while linking, please retry"


class AccountNotFoundError(AuthError):
    kind = AuthErrorKind.ACCOUNT_NOT_FOUND
    public_message = "Account not found"


class RequiresTransferError(AuthError):
    """Master of a group with other active members asked to deactivate."""

    kind = AuthErrorKind.REQUIRES_TRANSFER
    public_message = (
        "Cannot deactivate the primary account while other linked accounts "
        "are active. Transfer ownership first."
    )

    def __init__(self, active_member_ids: Sequence[str]):
        self.active_member_ids = list(active_member_ids)
        super().__init__(
            f"Ownership transfer required; active members: {', '.join(self.active_member_ids)}"
        )


class DuplicateIdentityError(AuthError):
    """Email or phone already belongs to an active record."""

    kind = AuthErrorKind.DUPLICATE_IDENTITY
    public_message = "An account with these details already exists"

    def __init__(self, attribute: str):
        self.attribute = attribute
        super().__init__(f"Duplicate {attribute}")


class TwoFactorNotEnabledError(AuthError):
    kind = AuthErrorKind.TWO_FACTOR_NOT_ENABLED
    public_message = "Two-factor authentication is not enabled"


class InfrastructureError(AuthError):
    """Store or external collaborator unreachable.

    Kept distinct from authentication failures so callers can tell
    "wrong password" from "service down".
    """

    kind = AuthErrorKind.INFRASTRUCTURE
    public_message = "Service temporarily unavailable, please retry"
