"""
Core event schema definitions for the Event Locator API.

Events are created from a place (venue, city, country); coordinates are
resolved server-side and the postal address is attached later by the
enrichment sweep. The lifecycle status is derived on every read.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from event_locator.schemas.location import EnhancedLocation, Place

# =====================================================================
# Enums and Constants
# =====================================================================

class CategoryEnum(str, Enum):
    """Supported event categories."""
    MUSIC = "music"
    SPORTS = "sports"
    TECHNOLOGY = "technology"
    EDUCATION = "education"
    ARTS = "arts"
    BUSINESS = "business"

class SearchFieldEnum(str, Enum):
    """Text fields an event search can match on."""
    CITY = "city"
    COUNTRY = "country"
    VENUE = "venue"

class EventStatus(str, Enum):
    """Lifecycle label derived from an event's start time."""
    PENDING = "pending"
    DUE = "due"
    OVERDUE = "overdue"

# =====================================================================
# Core Event schemas
# =====================================================================

class EventBase(BaseModel):
    """Fields shared by every event operation."""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: CategoryEnum
    country: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    venue: str = Field(..., min_length=1)
    start_time: datetime

    @field_validator("category", mode="before")
    @classmethod
    def lower_category(cls, v):
        """Accept categories in any case ("Music" -> "music")."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def place(self) -> Place:
        return Place(country=self.country, city=self.city, venue=self.venue)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Kigali Jazz Night",
                "category": "music",
                "country": "Rwanda",
                "city": "Kigali",
                "venue": "Kigali Convention Centre",
                "start_time": "2026-11-20T19:00:00+02:00"
            }
        }
    )

class EventCreate(EventBase):
    """Schema for creating an event."""
    creator_id: Optional[str] = None

class EventUpdate(BaseModel):
    """
    Schema for updating an event.

    All fields are optional. Changing venue, city or country re-resolves
    the event's coordinates.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[CategoryEnum] = None
    country: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    venue: Optional[str] = Field(None, min_length=1)
    start_time: Optional[datetime] = None

    @field_validator("category", mode="before")
    @classmethod
    def lower_category(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def changes_place(self) -> bool:
        return any(v is not None for v in (self.country, self.city, self.venue))

class EventResponse(EventBase):
    """
    Schema for event response.

    Extends EventBase with database fields, the resolved coordinates, the
    enrichment result and the derived status.
    """
    id: int
    longitude: float
    latitude: float
    creator_id: Optional[str] = None
    enhanced_location: Optional[EnhancedLocation] = None
    location_enriched_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    status: Optional[EventStatus] = None

    model_config = ConfigDict(
        from_attributes=True
    )

# =====================================================================
# Search schemas
# =====================================================================

class SearchFilters(BaseModel):
    """Filters accepted by the event search."""
    text_field: SearchFieldEnum = SearchFieldEnum.CITY
    text_pattern: str = Field(..., min_length=1)
    radius_km: float = Field(0, ge=0, description="0 means no distance constraint")
    categories: List[CategoryEnum] = []

    @field_validator("categories", mode="before")
    @classmethod
    def lower_categories(cls, v):
        if isinstance(v, list):
            return [c.strip().lower() if isinstance(c, str) else c for c in v]
        return v
