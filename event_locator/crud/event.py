from typing import Any, Dict, List, Optional, Protocol, Sequence, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from event_locator.models.event import Event
from event_locator.logging_config import get_logger

if TYPE_CHECKING:
    from event_locator.services.search import EventQuery

logger = get_logger("crud.event")


async def get_event(db: AsyncSession, event_id: int) -> Optional[Event]:
    """
    Get a specific event by ID.

    Args:
        db: Database session
        event_id: ID of the event to retrieve

    Returns:
        Event or None if not found
    """
    result = await db.execute(select(Event).where(Event.id == event_id))
    return result.scalars().first()


async def find_events(db: AsyncSession, query: "EventQuery") -> List[Event]:
    """
    Find events matching a search query, ordered by start time.

    Args:
        db: Database session
        query: Compiled search filters

    Returns:
        List of events
    """
    result = await db.execute(query.to_statement())
    return list(result.scalars().all())


async def get_unenriched_events(db: AsyncSession) -> List[Event]:
    """Events that have no enhanced location yet."""
    result = await db.execute(
        select(Event).where(Event.enhanced_location.is_(None)).order_by(Event.id)
    )
    return list(result.scalars().all())


async def get_events_starting_between(db: AsyncSession, start: datetime, end: datetime) -> List[Event]:
    """Events whose start time lies in [start, end]."""
    result = await db.execute(
        select(Event)
        .where(Event.start_time >= start, Event.start_time <= end)
        .order_by(Event.start_time)
    )
    return list(result.scalars().all())


async def create_event(db: AsyncSession, fields: Dict[str, Any]) -> Event:
    """
    Insert a new event.

    Args:
        db: Database session
        fields: Column values, coordinates already resolved

    Returns:
        Created event
    """
    db_event = Event(**fields)
    db.add(db_event)
    await db.commit()
    await db.refresh(db_event)

    logger.info(f"Created new event: {db_event.id} - {db_event.title}")
    return db_event


async def update_event(db: AsyncSession, event_id: int, fields: Dict[str, Any]) -> bool:
    """
    Update columns of a single event.

    Args:
        db: Database session
        event_id: ID of the event to update
        fields: Column values to set

    Returns:
        True if a row was updated, False if the event does not exist
    """
    if not fields:
        return await get_event(db, event_id) is not None

    result = await db.execute(
        update(Event).where(Event.id == event_id).values(**fields)
    )
    await db.commit()

    if result.rowcount > 0:
        logger.info(f"Updated event {event_id}: {', '.join(sorted(fields))}")
        return True
    return False


async def delete_event(db: AsyncSession, event_id: int) -> bool:
    """
    Delete an event.

    Args:
        db: Database session
        event_id: ID of the event to delete

    Returns:
        True if the event was deleted, False otherwise
    """
    query = delete(Event).where(Event.id == event_id)
    result = await db.execute(query)
    await db.commit()

    if result.rowcount > 0:
        logger.info(f"Deleted event: {event_id}")
        return True

    logger.warning(f"Attempted to delete non-existent event: {event_id}")
    return False


class EventStore(Protocol):
    """Datastore operations the location services depend on."""

    async def find_many(self, query: "EventQuery") -> Sequence[Event]: ...

    async def find_unenriched(self) -> Sequence[Event]: ...

    async def find_starting_between(self, start: datetime, end: datetime) -> Sequence[Event]: ...

    async def get(self, event_id: int) -> Optional[Event]: ...

    async def insert_one(self, fields: Dict[str, Any]) -> Event: ...

    async def update_one(self, event_id: int, fields: Dict[str, Any]) -> bool: ...

    async def delete_one(self, event_id: int) -> bool: ...


class SQLAlchemyEventStore:
    """EventStore over the CRUD functions; one session per operation.

    Background jobs outlive any request, so each call opens and commits its
    own short session. ``update_one`` is a single-row UPDATE committed on
    its own.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def find_many(self, query: "EventQuery") -> List[Event]:
        async with self.session_factory() as db:
            return await find_events(db, query)

    async def find_unenriched(self) -> List[Event]:
        async with self.session_factory() as db:
            return await get_unenriched_events(db)

    async def find_starting_between(self, start: datetime, end: datetime) -> List[Event]:
        async with self.session_factory() as db:
            return await get_events_starting_between(db, start, end)

    async def get(self, event_id: int) -> Optional[Event]:
        async with self.session_factory() as db:
            return await get_event(db, event_id)

    async def insert_one(self, fields: Dict[str, Any]) -> Event:
        async with self.session_factory() as db:
            return await create_event(db, fields)

    async def update_one(self, event_id: int, fields: Dict[str, Any]) -> bool:
        async with self.session_factory() as db:
            return await update_event(db, event_id, fields)

    async def delete_one(self, event_id: int) -> bool:
        async with self.session_factory() as db:
            return await delete_event(db, event_id)
