"""Geocoding service for converting place names to coordinates."""
import logging
from typing import List, Optional, Sequence

from geopy.geocoders import Nominatim

from event_locator.config import Settings, get_settings
from event_locator.schemas.location import Coordinate, Place
from event_locator.services.cache import ResolutionCache
from event_locator.services.geocoding.providers import (
    CachedResultTier,
    GeocodingTier,
    LocalTableTier,
    NominatimForwardTier,
    geocode_cache_key,
)
from event_locator.services.results import TierResult, TierStatus

# Configure logging
logger = logging.getLogger(__name__)


class Geocoder:
    """Resolve free text to a coordinate through an ordered list of tiers.

    ``resolve`` never raises: when every tier misses it returns the
    configured default coordinate.
    """

    def __init__(
        self,
        tiers: Sequence[GeocodingTier],
        default: Coordinate,
        cache: Optional[ResolutionCache] = None,
        cache_ttl: Optional[int] = None,
    ):
        """
        Initialize the geocoder.

        Args:
            tiers: Tiers to try, in order
            default: Coordinate returned when all tiers miss
            cache: Cache receiving successful results of cacheable tiers
            cache_ttl: TTL for those entries, defaults to the cache's own
        """
        if not default.is_valid:
            raise ValueError(f"Default coordinate out of range: {default}")
        self.tiers: List[GeocodingTier] = list(tiers)
        self.default = default
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def lookup(self, location_text: str) -> TierResult[Coordinate]:
        """
        Try each tier in order and return the first success.

        Returns:
            The winning tier's result, or the last miss when no tier succeeded
        """
        last = TierResult.empty(source="none")
        if not location_text or not location_text.strip():
            logger.warning("Empty location provided for geocoding")
            return last

        for tier in self.tiers:
            result = await tier.lookup(location_text)
            if result.ok and result.value.is_valid:
                if tier.cacheable and self.cache is not None:
                    self.cache.set(geocode_cache_key(location_text), result.value, ttl=self.cache_ttl)
                logger.debug(f"Resolved '{location_text}' via {tier.name} to {result.value}")
                return result
            if result.status is TierStatus.FAILURE:
                logger.warning(f"Geocoding tier {tier.name} failed for '{location_text}': {result.reason}")
            last = result
        return last

    async def resolve(self, location_text: str) -> Coordinate:
        """
        Geocode a location string to a (longitude, latitude) pair.

        Args:
            location_text: The location to geocode

        Returns:
            The resolved coordinate, or the default coordinate
        """
        try:
            result = await self.lookup(location_text)
        except Exception as e:
            logger.exception(f"Unexpected error geocoding '{location_text}': {str(e)}")
            return self.default

        if result.ok:
            return result.value

        logger.warning(f"Could not geocode '{location_text}', using default coordinates {self.default}")
        return self.default

    async def resolve_place(self, place: Place) -> Coordinate:
        """Geocode a venue/city/country triple."""
        return await self.resolve(place.query)


def build_geocoder(
    settings: Optional[Settings] = None,
    cache: Optional[ResolutionCache] = None,
    nominatim: Optional[Nominatim] = None,
) -> Geocoder:
    """Local table, then cached remote results, then Nominatim."""
    settings = settings or get_settings()
    tiers: List[GeocodingTier] = [LocalTableTier()]
    if cache is not None:
        tiers.append(CachedResultTier(cache))
    if nominatim is not None:
        tiers.append(
            NominatimForwardTier(
                nominatim,
                retries=settings.GEOCODING_RETRIES,
                retry_wait=settings.GEOCODING_RETRY_WAIT,
            )
        )
    return Geocoder(
        tiers,
        default=Coordinate(*settings.default_coordinate),
        cache=cache,
        cache_ttl=settings.CACHE_TTL_SECONDS,
    )
