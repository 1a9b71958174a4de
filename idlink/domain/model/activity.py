"""Activity/security event entity."""

from datetime import datetime
from typing import Any

from pydantic import Field

from idlink.domain.model.common import DomainModel
from idlink.domain.value import ActivityEventId, ActivityEventType


class ActivityEvent(DomainModel):
    """Append-only audit record.

    subject_id is a user id when the subject is known, otherwise the email or
    phone number that was presented.
    """

    id: ActivityEventId
    subject_id: str
    event_type: ActivityEventType
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: dict[str, Any] = Field(default_factory=dict)
