"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from idlink.domain.model import ActivityEvent, User, UserIdentity
from idlink.domain.value import (
    AccountStatus,
    AuthProvider,
    GroupId,
    RegisterSource,
    UserId,
    UserIdentityId,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(_uuid(row["id"])),
        email=row.get("email"),
        phone_number=row.get("phone_number"),
        name=row.get("name"),
        image=row.get("image"),
        password_hash=row.get("password_hash"),
        register_source=RegisterSource(row["register_source"]),
        two_factor_enabled=row["two_factor_enabled"],
        two_factor_secret=row.get("two_factor_secret"),
        backup_codes=list(row.get("backup_codes") or []),
        linked_emails=frozenset(row.get("linked_emails") or []),
        linked_phones=frozenset(row.get("linked_phones") or []),
        linked_providers=frozenset(
            AuthProvider(p) for p in row.get("linked_providers") or []
        ),
        verified_emails=frozenset(row.get("verified_emails") or []),
        verified_phones=frozenset(row.get("verified_phones") or []),
        group_id=GroupId(_uuid(row["group_id"])) if row.get("group_id") else None,
        is_master=row["is_master"],
        account_status=AccountStatus(row["account_status"]),
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_sign_in=row.get("last_sign_in"),
        last_merge_at=row.get("last_merge_at"),
        deactivated_at=row.get("deactivated_at"),
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Sets are stored as sorted arrays so rows are stable across writes.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = user.model_dump()
    data["register_source"] = user.register_source.value
    data["account_status"] = user.account_status.value
    data["linked_emails"] = sorted(user.linked_emails)
    data["linked_phones"] = sorted(user.linked_phones)
    data["linked_providers"] = sorted(p.value for p in user.linked_providers)
    data["verified_emails"] = sorted(user.verified_emails)
    data["verified_phones"] = sorted(user.verified_phones)
    return data


def row_to_user_identity(row: Dict[str, Any]) -> UserIdentity:
    """Convert database row to UserIdentity domain model.

    Args:
        row: Database row as dict

    Returns:
        UserIdentity domain model
    """
    return UserIdentity(
        id=UserIdentityId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        provider_account_id=row["provider_account_id"],
        provider_email=row.get("provider_email"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_login_at=row.get("last_login_at"),
    )


def user_identity_to_dict(identity: UserIdentity) -> Dict[str, Any]:
    """Convert UserIdentity domain model to database dict.

    Args:
        identity: UserIdentity domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = identity.model_dump()
    data["provider"] = identity.provider.value
    return data


def activity_event_to_dict(event: ActivityEvent) -> Dict[str, Any]:
    """Convert ActivityEvent domain model to database dict."""
    return event.model_dump(mode="json") | {
        "id": event.id,
        "timestamp": event.timestamp,
    }
