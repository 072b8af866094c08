"""
Schemas package for the Event Locator API.
"""

from event_locator.schemas.event import (
    CategoryEnum,
    SearchFieldEnum,
    EventStatus,
    EventBase,
    EventCreate,
    EventUpdate,
    EventResponse,
    SearchFilters,
)
from event_locator.schemas.location import (
    Coordinate,
    Place,
    EnhancedLocation,
    CatalogSnapshot,
)

__all__ = [
    'CategoryEnum',
    'SearchFieldEnum',
    'EventStatus',
    'EventBase',
    'EventCreate',
    'EventUpdate',
    'EventResponse',
    'SearchFilters',
    'Coordinate',
    'Place',
    'EnhancedLocation',
    'CatalogSnapshot',
]
