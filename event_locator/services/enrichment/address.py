"""Reverse geocoding enrichment: attach full postal addresses to events."""
import asyncio
from typing import Any, Dict

from event_locator.crud.event import EventStore
from event_locator.models import Event
from event_locator.schemas.location import Coordinate, EnhancedLocation
from event_locator.services.cache import Clock, utcnow
from event_locator.services.enrichment.base import EnrichmentService, Sleep
from event_locator.services.geocoding import NominatimReverseProvider


def build_enhanced_location(raw: Dict[str, Any], event: Event) -> EnhancedLocation:
    """
    Build an address from a Nominatim reverse result.

    The stored city and country stand in for components the provider
    leaves out.
    """
    address = raw.get("address") or {}
    city = address.get("city") or address.get("town") or address.get("village") or event.city
    country = address.get("country") or event.country
    formatted = raw.get("display_name") or ", ".join(
        part for part in (address.get("road"), city, country) if part
    )

    return EnhancedLocation(
        formatted_address=formatted,
        street=address.get("road"),
        house_number=address.get("house_number"),
        suburb=address.get("suburb"),
        city=city,
        county=address.get("county"),
        state=address.get("state"),
        country=country,
        postcode=address.get("postcode"),
    )


class AddressEnrichmentService(EnrichmentService):
    """Reverse geocode events that have no enhanced location yet.

    An event is enriched at most once: once ``enhanced_location`` is set it
    never becomes a candidate again. Failed events stay candidates and are
    retried by the next sweep.
    """

    def __init__(
        self,
        store: EventStore,
        provider: NominatimReverseProvider,
        delay: float = 1.0,
        clock: Clock = utcnow,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(delay=delay, sleep=sleep)
        self.store = store
        self.provider = provider
        self.clock = clock
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def enrich_event(self, event: Event) -> bool:
        """
        Reverse geocode one event and persist its address.

        Returns:
            True if the address was stored, False otherwise
        """
        if event.enhanced_location:
            self.logger.debug(f"Event {event.id} already has an enhanced location")
            return False

        coordinate = Coordinate(event.longitude, event.latitude)
        result = await self.provider.reverse(coordinate)
        if not result.ok:
            self.logger.warning(f"Reverse geocoding gave nothing for event {event.id}: {result.reason}")
            return False

        location = build_enhanced_location(result.value, event)
        await self.store.update_one(event.id, {
            "enhanced_location": location.model_dump(),
            "location_enriched_at": self.clock(),
        })
        self.logger.info(f"Enriched event {event.id} with address: {location.formatted_address}")
        return True

    async def run_once(self) -> int:
        """
        Run one sweep over every event lacking an enhanced location.

        Overlapping calls do not run concurrently: a call made while a sweep
        is in progress returns 0 immediately.

        Returns:
            Number of events enriched
        """
        if self._lock.locked():
            self.logger.info("Enrichment sweep already running, skipping")
            return 0

        async with self._lock:
            # Cleared before the fetch so a stop issued while it runs still counts
            self.reset_stop()
            candidates = await self.store.find_unenriched()
            if self.stop_requested:
                self.logger.info("Enrichment stopped before processing any event")
                return 0
            if not candidates:
                self.logger.debug("No events need address enrichment")
                return 0

            stats = await self.enrich_events(candidates)
            return stats["successful"]
