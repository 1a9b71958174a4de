"""Repository interfaces for idlink domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from idlink.domain.repository.activity import ActivityRepository
from idlink.domain.repository.user import UserRepository
from idlink.domain.repository.user_identity import UserIdentityRepository

__all__ = [
    "ActivityRepository",
    "UserIdentityRepository",
    "UserRepository",
]
