import os
import logging
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Settings are read at import time; configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "event_locator_test_logs"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from event_locator.api.deps import get_catalog, get_enrichment, get_event_store, get_geocoder
from event_locator.database import Base, build_engine
from event_locator.main import app
from event_locator.models.event import Event
from event_locator.schemas.location import Coordinate
from event_locator.services.cache import ResolutionCache
from event_locator.services.catalog import GeoCatalog, StaticCatalogProvider
from event_locator.services.enrichment import AddressEnrichmentService
from event_locator.services.geocoding import Geocoder, LocalTableTier
from event_locator.services.results import TierResult

# Create a logger
logger = logging.getLogger(__name__)

DEFAULT_COORDINATE = Coordinate(29.8739, -1.9403)


class InMemoryEventStore:
    """EventStore keeping events in a dict; search uses ``EventQuery.matches``."""

    def __init__(self):
        self.events: Dict[int, Event] = {}
        self.updates: List[tuple] = []
        self._next_id = 1

    def add(self, **fields: Any) -> Event:
        fields.setdefault("category", "music")
        fields.setdefault("country", "Rwanda")
        fields.setdefault("city", "Kigali")
        fields.setdefault("venue", "Kigali Arena")
        fields.setdefault("longitude", 30.0619)
        fields.setdefault("latitude", -1.9441)
        fields.setdefault("start_time", datetime(2030, 1, 1, tzinfo=timezone.utc))
        fields.setdefault("created_at", datetime.now(timezone.utc))
        event = Event(id=self._next_id, **fields)
        self.events[event.id] = event
        self._next_id += 1
        return event

    async def find_many(self, query) -> List[Event]:
        found = [e for e in self.events.values() if query.matches(e)]
        return sorted(found, key=lambda e: (e.start_time, e.id))

    async def find_unenriched(self) -> List[Event]:
        return [e for e in sorted(self.events.values(), key=lambda e: e.id) if e.enhanced_location is None]

    async def find_starting_between(self, start: datetime, end: datetime) -> List[Event]:
        return [e for e in self.events.values() if start <= e.start_time <= end]

    async def get(self, event_id: int) -> Optional[Event]:
        return self.events.get(event_id)

    async def insert_one(self, fields: Dict[str, Any]) -> Event:
        return self.add(**fields)

    async def update_one(self, event_id: int, fields: Dict[str, Any]) -> bool:
        event = self.events.get(event_id)
        if event is None:
            return False
        self.updates.append((event_id, dict(fields)))
        for key, value in fields.items():
            setattr(event, key, value)
        return True

    async def delete_one(self, event_id: int) -> bool:
        return self.events.pop(event_id, None) is not None


class FakeReverseProvider:
    """Reverse provider answering from a fixed result."""

    def __init__(self, result: Optional[TierResult] = None):
        self.result = result or TierResult.success(
            {
                "display_name": "KG 2 Roundabout, Kimihurura, Kigali, Rwanda",
                "address": {
                    "road": "KG 2 Roundabout",
                    "suburb": "Kimihurura",
                    "city": "Kigali",
                    "country": "Rwanda",
                },
            },
            source="fake",
        )
        self.calls: List[Coordinate] = []

    async def reverse(self, coordinate: Coordinate) -> TierResult:
        self.calls.append(coordinate)
        return self.result


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def local_geocoder() -> Geocoder:
    """Geocoder that never leaves the process."""
    return Geocoder([LocalTableTier()], default=DEFAULT_COORDINATE)


@pytest.fixture
def reverse_provider() -> FakeReverseProvider:
    return FakeReverseProvider()


@pytest.fixture
async def db_session_factory():
    """Fresh in-memory SQLite database per test."""
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def client(event_store, local_geocoder, reverse_provider):
    """
    Test client with the datastore and providers replaced by local fakes.
    """
    catalog = GeoCatalog(ResolutionCache(), providers=[StaticCatalogProvider()])
    enrichment = AddressEnrichmentService(event_store, reverse_provider, delay=0)

    app.dependency_overrides[get_event_store] = lambda: event_store
    app.dependency_overrides[get_geocoder] = lambda: local_geocoder
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_enrichment] = lambda: enrichment

    with TestClient(app) as test_client:
        yield test_client

    # Clean up
    app.dependency_overrides.clear()
