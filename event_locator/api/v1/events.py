from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from event_locator.api.deps import get_event_store, get_geocoder, get_notifier, get_query_builder
from event_locator.crud.event import EventStore
from event_locator.schemas.event import (
    EventCreate,
    EventResponse,
    EventUpdate,
    SearchFieldEnum,
    SearchFilters,
)
from event_locator.schemas.location import Place
from event_locator.services.geocoding import Geocoder
from event_locator.services.notifications import EventNotifier
from event_locator.services.search import GeoQueryBuilder
from event_locator.services.status import as_utc, classify_event
from event_locator.logging_config import get_logger

router = APIRouter()
logger = get_logger("api.events")


def to_response(event, now: datetime) -> EventResponse:
    """Serialize a stored event with its status as of ``now``."""
    response = EventResponse.model_validate(event)
    return response.model_copy(update={"status": classify_event(event, now)})


@router.get("/", response_model=List[EventResponse])
async def search_events(
    q: str = Query(..., min_length=1, description="Text matched against the search_by field"),
    search_by: SearchFieldEnum = SearchFieldEnum.CITY,
    radius_km: float = Query(0, ge=0, description="0 searches by text only"),
    categories: List[str] = Query([]),
    builder: GeoQueryBuilder = Depends(get_query_builder),
    store: EventStore = Depends(get_event_store),
):
    """
    Search events by text, distance and category, ordered by start time.
    """
    try:
        filters = SearchFilters(
            text_field=search_by,
            text_pattern=q,
            radius_km=radius_km,
            categories=categories,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=jsonable_encoder(e.errors(include_url=False)))

    try:
        query = await builder.build(filters)
        events = await store.find_many(query)
    except Exception as e:
        logger.error(f"Error searching events: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")

    now = datetime.now(timezone.utc)
    return [to_response(event, now) for event in events]


@router.post("/", response_model=EventResponse, status_code=201)
async def create_new_event(
    event: EventCreate,
    geocoder: Geocoder = Depends(get_geocoder),
    store: EventStore = Depends(get_event_store),
    notifier: EventNotifier = Depends(get_notifier),
):
    """
    Create an event. Its coordinates are resolved from venue, city and country.
    """
    try:
        coordinate = await geocoder.resolve_place(event.place)
        fields = event.model_dump()
        fields.update(
            category=event.category.value,
            start_time=as_utc(event.start_time),
            longitude=coordinate.longitude,
            latitude=coordinate.latitude,
        )
        db_event = await store.insert_one(fields)
    except Exception as e:
        logger.error(f"Error creating event: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")

    notifier.event_created(db_event)
    return to_response(db_event, datetime.now(timezone.utc))


@router.get("/{event_id}", response_model=EventResponse)
async def read_event(event_id: int, store: EventStore = Depends(get_event_store)):
    """
    Get a specific event by ID.
    """
    try:
        event = await store.get(event_id)
    except Exception as e:
        logger.error(f"Error retrieving event {event_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return to_response(event, datetime.now(timezone.utc))


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_details(
    event_id: int,
    event: EventUpdate,
    geocoder: Geocoder = Depends(get_geocoder),
    store: EventStore = Depends(get_event_store),
):
    """
    Update an event.

    Changing venue, city or country re-resolves the coordinates and clears
    the enhanced location so the next enrichment sweep picks the event up.
    """
    try:
        db_event = await store.get(event_id)
        if db_event is None:
            raise HTTPException(status_code=404, detail="Event not found")

        fields = event.model_dump(exclude_unset=True, exclude_none=True)
        if event.category is not None:
            fields["category"] = event.category.value
        if event.start_time is not None:
            fields["start_time"] = as_utc(event.start_time)

        if event.changes_place:
            place = Place(
                country=event.country or db_event.country,
                city=event.city or db_event.city,
                venue=event.venue or db_event.venue,
            )
            coordinate = await geocoder.resolve_place(place)
            fields.update(
                longitude=coordinate.longitude,
                latitude=coordinate.latitude,
                enhanced_location=None,
                location_enriched_at=None,
            )

        await store.update_one(event_id, fields)
        updated = await store.get(event_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating event {event_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if updated is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return to_response(updated, datetime.now(timezone.utc))


@router.delete("/{event_id}", status_code=204)
async def delete_event_by_id(event_id: int, store: EventStore = Depends(get_event_store)):
    """
    Delete an event.
    """
    try:
        deleted = await store.delete_one(event_id)
    except Exception as e:
        logger.error(f"Error deleting event {event_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")
    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
