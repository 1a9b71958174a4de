"""Activity/security event domain service."""

from datetime import datetime
from typing import Any
from uuid import uuid4

import logfire

from idlink.domain.model import ActivityEvent
from idlink.domain.repository import ActivityRepository
from idlink.domain.value import ActivityEventId, ActivityEventType

from .base import Service


class ActivityService(Service):
    """Records security and audit events."""

    def __init__(self, activity_repository: ActivityRepository) -> None:
        self.activity_repository = activity_repository

    async def record(
        self, subject_id: str, event_type: ActivityEventType, **metadata: Any
    ) -> ActivityEvent:
        """Append an event.

        Args:
            subject_id: User id, or the email/phone presented when no user matched
            event_type: Kind of event
            **metadata: Event details; must be JSON-serializable

        Returns:
            The recorded event
        """
        event = ActivityEvent(
            id=ActivityEventId(uuid4()),
            subject_id=subject_id,
            event_type=event_type,
            timestamp=datetime.now(),
            metadata=metadata,
        )
        await self.activity_repository.append(event)
        logfire.info(
            "Activity recorded", subject_id=subject_id, event_type=event_type.value
        )
        return event
