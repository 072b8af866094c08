"""Forward and reverse geocoding."""

from event_locator.services.geocoding.providers import (
    GeocodingTier,
    LocalTableTier,
    CachedResultTier,
    NominatimForwardTier,
    NominatimReverseProvider,
    create_nominatim,
)
from event_locator.services.geocoding.service import Geocoder, build_geocoder

__all__ = [
    "GeocodingTier",
    "LocalTableTier",
    "CachedResultTier",
    "NominatimForwardTier",
    "NominatimReverseProvider",
    "create_nominatim",
    "Geocoder",
    "build_geocoder",
]
