"""Strongly typed identifiers for idlink domain entities.

Using NewType for strong typing prevents mixing up different entity IDs
and makes the code more self-documenting.
"""

from typing import NewType
from uuid import UUID

# Core domain entity identifiers
UserId = NewType("UserId", UUID)
UserIdentityId = NewType("UserIdentityId", UUID)
GroupId = NewType("GroupId", UUID)
ActivityEventId = NewType("ActivityEventId", UUID)
