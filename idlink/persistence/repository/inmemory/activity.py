"""In-memory activity repository for testing."""

from idlink.domain.model.activity import ActivityEvent
from idlink.domain.repository.activity import ActivityRepository


class InMemoryActivityRepository(ActivityRepository):
    """In-memory implementation of ActivityRepository for testing."""

    def __init__(self) -> None:
        self.events: list[ActivityEvent] = []

    async def append(self, event: ActivityEvent) -> None:
        """Append an event."""
        self.events.append(event)
