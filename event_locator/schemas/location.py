"""
Location value types shared by the geocoder, the catalog and the enrichment sweep.
"""

from typing import Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Coordinate(NamedTuple):
    """A WGS84 point stored as (longitude, latitude) degrees."""
    longitude: float
    latitude: float

    @property
    def is_valid(self) -> bool:
        """Whether both components lie within their legal ranges."""
        return -180.0 <= self.longitude <= 180.0 and -90.0 <= self.latitude <= 90.0


class Place(BaseModel):
    """A user-entered place. Free text, not validated against any authority."""
    country: str
    city: str
    venue: str

    @property
    def query(self) -> str:
        """Human-readable search string, most specific part first."""
        return ", ".join(part for part in (self.venue, self.city, self.country) if part)


class EnhancedLocation(BaseModel):
    """Full postal address attached to an event by reverse geocoding."""
    formatted_address: str
    street: Optional[str] = None
    house_number: Optional[str] = None
    suburb: Optional[str] = None
    city: str
    county: Optional[str] = None
    state: Optional[str] = None
    country: str
    postcode: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "formatted_address": "KG 2 Roundabout, Kimihurura, Kigali, Rwanda",
                "street": "KG 2 Roundabout",
                "suburb": "Kimihurura",
                "city": "Kigali",
                "country": "Rwanda"
            }
        }
    )


class CatalogSnapshot(BaseModel):
    """Country list and per-country city lists, rebuilt wholesale on refresh."""
    countries: List[str] = []
    cities_by_country: Dict[str, List[str]] = {}

    @field_validator("countries")
    @classmethod
    def sort_countries(cls, v: List[str]) -> List[str]:
        """Keep the country list deduplicated and sorted."""
        return sorted(set(v))

    @property
    def is_empty(self) -> bool:
        return not self.countries
