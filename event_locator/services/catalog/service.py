"""Reference catalog of countries and their cities."""
import logging
from typing import List, Optional, Sequence

from event_locator.config import Settings, get_settings
from event_locator.exceptions import CatalogUnavailableError
from event_locator.schemas.location import CatalogSnapshot
from event_locator.services.cache import ResolutionCache
from event_locator.services.catalog.providers import (
    CatalogProvider,
    CountriesNowProvider,
    GeoNamesProvider,
    StaticCatalogProvider,
)
from event_locator.services.catalog.static_data import canonical_country

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "catalog:snapshot"


def default_catalog_providers(settings: Settings) -> List[CatalogProvider]:
    """Primary remote, secondary remote, then the bundled dataset."""
    return [
        CountriesNowProvider(settings.COUNTRIESNOW_URL, timeout=settings.CATALOG_TIMEOUT),
        GeoNamesProvider(
            settings.GEONAMES_URL,
            username=settings.GEONAMES_USERNAME,
            timeout=settings.CATALOG_TIMEOUT,
            max_rows=settings.GEONAMES_MAX_ROWS,
        ),
        StaticCatalogProvider(),
    ]


class GeoCatalog:
    """Country -> city list table backed by an ordered provider chain.

    The first tier returning a non-empty snapshot wins; the result is cached
    for ``ttl`` seconds so the interactive path only waits on the network
    once per refresh period.
    """

    def __init__(
        self,
        cache: ResolutionCache,
        providers: Optional[Sequence[CatalogProvider]] = None,
        countries: Optional[List[str]] = None,
        ttl: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache
        self.providers = list(providers) if providers is not None else default_catalog_providers(self.settings)
        self.countries = list(countries or self.settings.CATALOG_COUNTRIES)
        self.ttl = ttl if ttl is not None else self.settings.CACHE_TTL_SECONDS

    async def load(self) -> CatalogSnapshot:
        """
        Return the catalog, consulting the cache first.

        Raises:
            CatalogUnavailableError: if every tier, including the static
                dataset, produced no countries
        """
        cached = self.cache.get(CATALOG_CACHE_KEY)
        if cached is not None:
            return cached

        snapshot = None
        for provider in self.providers:
            result = await provider.fetch(self.countries)
            if result.ok and not result.value.is_empty:
                logger.info(f"Loaded catalog of {len(result.value.countries)} countries from {provider.name}")
                snapshot = result.value
                break
            logger.warning(f"Catalog provider {provider.name} gave no data: {result.reason}")

        if snapshot is None:
            raise CatalogUnavailableError(
                "Catalog is empty after exhausting every provider; is the static dataset missing?"
            )

        self.cache.set(CATALOG_CACHE_KEY, snapshot, ttl=self.ttl)
        return snapshot

    async def refresh(self) -> CatalogSnapshot:
        """Drop the cached snapshot and reload it."""
        self.cache.invalidate(CATALOG_CACHE_KEY)
        return await self.load()

    async def cities_for(self, country: str) -> List[str]:
        """City list for one country, empty if the country is not catalogued.

        Aliases such as "DRC" are mapped to the catalog name first.
        """
        snapshot = await self.load()
        return list(snapshot.cities_by_country.get(canonical_country(country), []))
