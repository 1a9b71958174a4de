"""In-memory repository implementations for testing."""

from .activity import InMemoryActivityRepository
from .user import InMemoryUserRepository
from .user_identity import InMemoryUserIdentityRepository

__all__ = [
    "InMemoryActivityRepository",
    "InMemoryUserRepository",
    "InMemoryUserIdentityRepository",
]
