"""Country/city reference catalog."""

from event_locator.services.catalog.providers import (
    CatalogProvider,
    CountriesNowProvider,
    GeoNamesProvider,
    StaticCatalogProvider,
)
from event_locator.services.catalog.service import GeoCatalog, CATALOG_CACHE_KEY

__all__ = [
    "CatalogProvider",
    "CountriesNowProvider",
    "GeoNamesProvider",
    "StaticCatalogProvider",
    "GeoCatalog",
    "CATALOG_CACHE_KEY",
]
