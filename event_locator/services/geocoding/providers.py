"""Forward and reverse geocoding tiers."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from geopy.adapters import AioHTTPAdapter
from geopy.exc import (
    GeocoderParseError,
    GeocoderRateLimited,
    GeocoderServiceError,
    GeocoderTimedOut,
    GeocoderUnavailable,
    GeopyError,
)
from geopy.geocoders import Nominatim
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from event_locator.config import Settings
from event_locator.exceptions import (
    MalformedResponse,
    ProviderError,
    ProviderUnavailable,
    RateLimited,
)
from event_locator.schemas.location import Coordinate
from event_locator.services.cache import ResolutionCache
from event_locator.services.geocoding.local_table import KNOWN_CITIES, lookup_known_city, normalize
from event_locator.services.results import TierResult

logger = logging.getLogger(__name__)


def create_nominatim(settings: Settings) -> Nominatim:
    """Async Nominatim client shared by forward and reverse lookups."""
    return Nominatim(
        user_agent=settings.GEOCODING_USER_AGENT,
        domain=settings.GEOCODING_DOMAIN,
        timeout=settings.GEOCODING_TIMEOUT,
        adapter_factory=AioHTTPAdapter,
    )


def translate_geopy_error(error: Exception, provider: str) -> ProviderError:
    """Map geopy and transport exceptions onto the provider error taxonomy."""
    if isinstance(error, GeocoderRateLimited):
        return RateLimited(str(error), provider=provider)
    if isinstance(error, GeocoderParseError):
        return MalformedResponse(str(error), provider=provider)
    if isinstance(error, (GeocoderTimedOut, GeocoderUnavailable, GeocoderServiceError, asyncio.TimeoutError)):
        return ProviderUnavailable(str(error) or type(error).__name__, provider=provider)
    if isinstance(error, (KeyError, TypeError, ValueError)):
        return MalformedResponse(f"Unexpected response shape: {error}", provider=provider)
    return ProviderUnavailable(str(error), provider=provider)


def geocode_cache_key(text: str) -> str:
    return f"geocode:{normalize(text)}"


class GeocodingTier(ABC):
    """One tier of the forward geocoding chain."""

    name: str = "geocoding"
    # Successful results from cacheable tiers are stored for later lookups
    cacheable: bool = False

    @abstractmethod
    async def lookup(self, query: str) -> TierResult[Coordinate]:
        """
        Resolve a location string.

        Args:
            query: Raw, human-readable location text

        Returns:
            success with a coordinate, empty, or failure
        """
        pass


class LocalTableTier(GeocodingTier):
    """Exact lookup in the curated city table. No network."""

    name = "local"

    def __init__(self, table: Optional[Dict[str, Coordinate]] = None):
        self.table = KNOWN_CITIES if table is None else table

    async def lookup(self, query: str) -> TierResult[Coordinate]:
        coordinate = lookup_known_city(query, self.table)
        if coordinate is None:
            return TierResult.empty(source=self.name)
        return TierResult.success(coordinate, source=self.name)


class CachedResultTier(GeocodingTier):
    """Earlier successful remote lookups, keyed by normalized text."""

    name = "cache"

    def __init__(self, cache: ResolutionCache):
        self.cache = cache

    async def lookup(self, query: str) -> TierResult[Coordinate]:
        coordinate = self.cache.get(geocode_cache_key(query))
        if coordinate is None:
            return TierResult.empty(source=self.name)
        return TierResult.success(coordinate, source=self.name)


class NominatimForwardTier(GeocodingTier):
    """Remote forward geocoding through Nominatim.

    Timeouts and unavailability are retried with exponential backoff up to
    ``retries`` attempts; rate limiting is not retried.
    """

    name = "nominatim"
    cacheable = True

    def __init__(self, geocoder: Nominatim, retries: int = 3, retry_wait: float = 1.0):
        self.geocoder = geocoder
        self.retries = max(1, retries)
        self.retry_wait = retry_wait

    async def _geocode(self, query: str):
        try:
            return await self.geocoder.geocode(query, exactly_one=True)
        except (GeopyError, asyncio.TimeoutError, KeyError, TypeError, ValueError) as e:
            raise translate_geopy_error(e, self.name) from e

    async def lookup(self, query: str) -> TierResult[Coordinate]:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retries),
                wait=wait_exponential(multiplier=self.retry_wait, max=10),
                retry=retry_if_exception_type(ProviderUnavailable),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    location = await self._geocode(query)
        except ProviderError as e:
            return TierResult.failure(e, source=self.name)

        if location is None:
            return TierResult.empty(source=self.name)

        try:
            coordinate = Coordinate(float(location.longitude), float(location.latitude))
        except (TypeError, ValueError) as e:
            return TierResult.failure(
                MalformedResponse(f"Non-numeric coordinates: {e}", provider=self.name), source=self.name
            )

        if not coordinate.is_valid:
            return TierResult.failure(
                MalformedResponse(f"Coordinate out of range: {coordinate}", provider=self.name),
                source=self.name,
            )
        return TierResult.success(coordinate, source=self.name)


class NominatimReverseProvider:
    """Reverse geocoding through Nominatim, returning the raw result."""

    name = "nominatim-reverse"

    def __init__(self, geocoder: Nominatim):
        self.geocoder = geocoder

    async def reverse(self, coordinate: Coordinate) -> TierResult[Dict[str, Any]]:
        """
        Look up the address at a coordinate.

        Returns:
            success with ``{"address": {...}, "display_name": ...}``, empty
            when nothing is there, or failure
        """
        try:
            location = await self.geocoder.reverse(
                (coordinate.latitude, coordinate.longitude),
                exactly_one=True,
                addressdetails=True,
            )
        except (GeopyError, asyncio.TimeoutError, KeyError, TypeError, ValueError) as e:
            return TierResult.failure(translate_geopy_error(e, self.name), source=self.name)

        if location is None:
            return TierResult.empty(source=self.name)

        raw = getattr(location, "raw", None)
        if not isinstance(raw, dict) or not isinstance(raw.get("address", {}), dict):
            return TierResult.failure(
                MalformedResponse("Reverse result has no address object", provider=self.name),
                source=self.name,
            )
        return TierResult.success(raw, source=self.name)
