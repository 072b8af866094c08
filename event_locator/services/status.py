"""Event lifecycle status derived from start time."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Set, Tuple

from event_locator.schemas.event import EventStatus

logger = logging.getLogger(__name__)

DUE_WINDOW = timedelta(days=1)


def classify(start_time: datetime, now: datetime) -> EventStatus:
    """
    Classify an event relative to ``now``.

    Overdue once ``now`` is past the start; due from one day before the start
    up to and including the start instant; pending before that.

    Args:
        start_time: When the event starts
        now: Current time, with the same awareness as ``start_time``

    Returns:
        The event's status
    """
    if now > start_time:
        return EventStatus.OVERDUE
    if start_time - DUE_WINDOW <= now:
        return EventStatus.DUE
    return EventStatus.PENDING


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes read back from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def classify_event(event, now: datetime) -> EventStatus:
    """Classify a stored event whose start time may have lost its timezone."""
    return classify(as_utc(event.start_time), as_utc(now))


class DueCheckService:
    """Periodic check publishing a notice when an event becomes due or overdue.

    Looks at events starting within one day either side of now. Each
    (event, status) pair is announced once per process; pairs are dropped
    once their event falls outside the window.
    """

    def __init__(self, store, notifier, clock=None):
        self.store = store
        self.notifier = notifier
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._announced: Set[Tuple[int, EventStatus]] = set()

    async def run_once(self) -> Dict[str, int]:
        """
        Classify events near their start time and publish new due/overdue notices.

        Returns:
            Count of newly announced events per status
        """
        now = as_utc(self.clock())
        events = await self.store.find_starting_between(now - DUE_WINDOW, now + DUE_WINDOW)

        # Events that left the window are never announced again, forget them
        in_window = {event.id for event in events}
        self._announced = {pair for pair in self._announced if pair[0] in in_window}

        counts = {EventStatus.DUE.value: 0, EventStatus.OVERDUE.value: 0}
        for event in events:
            status = classify_event(event, now)
            if status is EventStatus.PENDING or (event.id, status) in self._announced:
                continue
            self._announced.add((event.id, status))
            self.notifier.event_status(event, status)
            counts[status.value] += 1

        if any(counts.values()):
            logger.info(f"Due check announced {counts}")
        return counts
