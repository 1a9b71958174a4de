"""Activity event repository interface."""

from abc import ABC, abstractmethod

from idlink.domain.model.activity import ActivityEvent


class ActivityRepository(ABC):
    """Append-only store for security/audit events."""

    @abstractmethod
    async def append(self, event: ActivityEvent) -> None:
        """Append an event.

        Args:
            event: Event to record
        """
        pass
