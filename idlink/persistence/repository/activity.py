"""PostgreSQL implementation of Activity repository."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idlink.domain.model import ActivityEvent
from idlink.domain.repository import ActivityRepository
from idlink.persistence.database import store_errors
from idlink.persistence.mappers import activity_event_to_dict
from idlink.persistence.tables import activity_events_table


class PostgresActivityRepository(ActivityRepository):
    """PostgreSQL implementation of ActivityRepository.

    Events are written in their own short transaction, not the request's:
    a failed sign-in rolls the request back but its signin_failed event
    must still be stored.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def append(self, event: ActivityEvent) -> None:
        """Insert an event row and commit it."""
        stmt = activity_events_table.insert().values(**activity_event_to_dict(event))
        with store_errors():
            async with self.session_factory() as session:
                await session.execute(stmt)
                await session.commit()
