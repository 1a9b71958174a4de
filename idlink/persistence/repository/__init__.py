"""PostgreSQL repository implementations."""

from idlink.persistence.repository.activity import PostgresActivityRepository
from idlink.persistence.repository.user import PostgresUserRepository
from idlink.persistence.repository.user_identity_repository import (
    PostgresUserIdentityRepository,
)

__all__ = [
    "PostgresActivityRepository",
    "PostgresUserIdentityRepository",
    "PostgresUserRepository",
]
