"""Event search: text, radius and category filters."""
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from geopy.distance import EARTH_RADIUS, great_circle
from sqlalchemy import Select, func, select

from event_locator.models.event import Event
from event_locator.schemas.event import SearchFieldEnum, SearchFilters
from event_locator.schemas.location import Coordinate
from event_locator.services.geocoding import Geocoder

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = EARTH_RADIUS * 1000


def escape_like(pattern: str) -> str:
    """Escape LIKE wildcards so the pattern matches literally."""
    return pattern.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def distance_expression(center: Coordinate):
    """Great-circle distance in meters from ``center`` to an event's coordinate."""
    center_lat = math.radians(center.latitude)
    center_lon = math.radians(center.longitude)
    event_lat = func.radians(Event.latitude)
    cos_angle = (
        math.sin(center_lat) * func.sin(event_lat)
        + math.cos(center_lat) * func.cos(event_lat) * func.cos(func.radians(Event.longitude) - center_lon)
    )
    # Rounding can push the cosine just past +/-1
    return EARTH_RADIUS_M * func.acos(func.least(1.0, func.greatest(-1.0, cos_angle)))


@dataclass(frozen=True)
class ProximityClause:
    center: Coordinate
    max_distance_m: float


@dataclass(frozen=True)
class EventQuery:
    """Conjunction of a text match, an optional proximity and an optional category set."""
    text_field: SearchFieldEnum
    text_pattern: str
    proximity: Optional[ProximityClause] = None
    categories: Tuple[str, ...] = ()

    def to_statement(self) -> Select:
        """Compile into a SELECT over events, ordered by start time."""
        column = getattr(Event, self.text_field.value)
        statement = select(Event).where(
            column.ilike(f"%{escape_like(self.text_pattern)}%", escape="\\")
        )

        if self.proximity is not None:
            statement = statement.where(
                distance_expression(self.proximity.center) <= self.proximity.max_distance_m
            )

        if self.categories:
            statement = statement.where(func.lower(Event.category).in_(self.categories))

        return statement.order_by(Event.start_time, Event.id)

    def matches(self, event) -> bool:
        """Evaluate the same clauses against a single record in memory."""
        value = getattr(event, self.text_field.value, None) or ""
        if self.text_pattern.lower() not in value.lower():
            return False

        if self.proximity is not None:
            center = self.proximity.center
            distance = great_circle(
                (center.latitude, center.longitude),
                (event.latitude, event.longitude),
            ).meters
            if distance > self.proximity.max_distance_m:
                return False

        if self.categories and (event.category or "").lower() not in self.categories:
            return False

        return True


class GeoQueryBuilder:
    """Turn search filters into an ``EventQuery``."""

    def __init__(self, geocoder: Geocoder):
        self.geocoder = geocoder

    async def build(self, filters: SearchFilters) -> EventQuery:
        """
        Build the query for a set of filters.

        A radius of 0 means no distance constraint (city-wide text search);
        any positive radius geocodes the text pattern and adds a proximity
        clause of ``radius_km * 1000`` meters around it.
        """
        proximity = None
        if filters.radius_km > 0:
            center = await self.geocoder.resolve(filters.text_pattern)
            proximity = ProximityClause(center=center, max_distance_m=filters.radius_km * 1000)
            logger.debug(f"Radius search within {filters.radius_km}km of {center}")

        categories = tuple(sorted({c.value.lower() for c in filters.categories}))

        return EventQuery(
            text_field=filters.text_field,
            text_pattern=filters.text_pattern,
            proximity=proximity,
            categories=categories,
        )
