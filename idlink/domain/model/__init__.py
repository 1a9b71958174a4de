"""Domain model entities for idlink."""

from idlink.domain.model.activity import ActivityEvent
from idlink.domain.model.candidate import LinkCandidate, MatchedAttribute
from idlink.domain.model.group import Group
from idlink.domain.model.principal import Principal
from idlink.domain.model.user import User
from idlink.domain.model.user_identity import UserIdentity

__all__ = [
    "ActivityEvent",
    "Group",
    "LinkCandidate",
    "MatchedAttribute",
    "Principal",
    "User",
    "UserIdentity",
]
