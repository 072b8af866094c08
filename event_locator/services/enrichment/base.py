"""Base class for event enrichment services."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Sequence

from event_locator.models import Event

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class EnrichmentService(ABC):
    """Base class for services that enrich event data.

    Events are processed one at a time with ``delay`` seconds between them,
    so third-party providers see at most one request per delay period.
    """

    def __init__(self, delay: float = 1.0, sleep: Sleep = asyncio.sleep):
        """Initialize the enrichment service."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.delay = delay
        self._sleep = sleep
        self._stop_requested = False

    @abstractmethod
    async def enrich_event(self, event: Event) -> bool:
        """
        Enrich a single event with additional data.

        Args:
            event: The Event object to enrich

        Returns:
            True if enrichment was successful, False otherwise
        """
        pass

    def stop(self) -> None:
        """Ask a running batch to finish after the current event."""
        self._stop_requested = True

    def reset_stop(self) -> None:
        """Clear an earlier stop request before starting new work."""
        self._stop_requested = False

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    async def enrich_events(self, events: Sequence[Event]) -> Dict[str, Any]:
        """
        Enrich multiple events sequentially.

        Args:
            events: Events to enrich

        Returns:
            Dictionary containing statistics about the enrichment process
        """
        total = len(events)
        successful = 0
        failed = 0
        processed = 0

        self.logger.info(f"Starting enrichment of {total} events")

        for index, event in enumerate(events):
            if self._stop_requested:
                self.logger.info(f"Enrichment stopped after {processed} of {total} events")
                break

            try:
                success = await self.enrich_event(event)
                if success:
                    successful += 1
                else:
                    failed += 1
            except Exception as e:
                self.logger.exception(f"Error enriching event {event.id}: {str(e)}")
                failed += 1
            processed += 1

            if index < total - 1 and self.delay > 0:
                await self._sleep(self.delay)

        result = {
            "total": total,
            "processed": processed,
            "successful": successful,
            "failed": failed,
            "success_rate": (successful / total) * 100 if total > 0 else 0
        }

        self.logger.info(f"Enrichment complete: {result}")
        return result
