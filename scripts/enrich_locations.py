#!/usr/bin/env python
"""
Attach postal addresses to events that have none yet.

Runs the same reverse-geocoding sweep as the scheduled background job,
once, from the command line.

Usage:
    # Process just 3 events (default for testing)
    python -m scripts.enrich_locations

    # Process a specific number of events
    python -m scripts.enrich_locations --limit 10

    # Process every event lacking an address
    python -m scripts.enrich_locations --all
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, Optional

from event_locator.config import get_settings
from event_locator.crud.event import SQLAlchemyEventStore
from event_locator.database import async_session
from event_locator.services.enrichment import AddressEnrichmentService
from event_locator.services.geocoding import NominatimReverseProvider, create_nominatim

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("enrich_locations")

DEFAULT_LIMIT = 3


async def enrich_locations(
    limit: Optional[int] = DEFAULT_LIMIT,
    delay: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Reverse geocode events without an enhanced location.

    Args:
        limit: Maximum number of events to process, None for all
        delay: Seconds between provider calls, defaults to the configured delay

    Returns:
        Enrichment statistics
    """
    settings = get_settings()
    store = SQLAlchemyEventStore(async_session)

    candidates = await store.find_unenriched()
    logger.info(f"Found {len(candidates)} events without an enhanced location")
    if limit is not None:
        candidates = candidates[:limit]

    if not candidates:
        logger.info("Nothing to do")
        return {"total": 0, "processed": 0, "successful": 0, "failed": 0, "success_rate": 0}

    async with create_nominatim(settings) as nominatim:
        service = AddressEnrichmentService(
            store,
            NominatimReverseProvider(nominatim),
            delay=settings.ENRICHMENT_DELAY_SECONDS if delay is None else delay,
        )
        service.reset_stop()
        stats = await service.enrich_events(candidates)

    logger.info(
        f"Processed {stats['processed']} events: "
        f"{stats['successful']} enriched, {stats['failed']} failed"
    )
    return stats


async def main():
    """
    Main entry point for the script.
    """
    parser = argparse.ArgumentParser(description="Attach postal addresses to events")
    parser.add_argument("--limit", type=int, help=f"Maximum number of events to process (default: {DEFAULT_LIMIT})")
    parser.add_argument("--all", action="store_true", help="Process all events lacking an address")
    parser.add_argument("--delay", type=float, help="Seconds between provider requests")
    args = parser.parse_args()

    limit = None if args.all else (args.limit or DEFAULT_LIMIT)
    await enrich_locations(limit=limit, delay=args.delay)


if __name__ == "__main__":
    asyncio.run(main())
