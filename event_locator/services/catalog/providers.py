"""Catalog provider tiers: CountriesNow, GeoNames and the bundled dataset."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from event_locator.exceptions import (
    MalformedResponse,
    ProviderEmptyResult,
    ProviderError,
    ProviderUnavailable,
    RateLimited,
)
from event_locator.schemas.location import CatalogSnapshot
from event_locator.services.catalog.static_data import (
    COUNTRY_CODES,
    STATIC_CITIES,
    canonical_country,
    static_cities_for,
)
from event_locator.services.http import client_session, fetch_json
from event_locator.services.results import TierResult

logger = logging.getLogger(__name__)

# GeoNames status codes for exhausted credits (daily, hourly, weekly)
GEONAMES_LIMIT_CODES = {18, 19, 20}


def clean_city_list(cities: Iterable[Any]) -> List[str]:
    """Trim, drop empty and duplicate entries, and sort a city list."""
    cleaned = set()
    for city in cities or []:
        if isinstance(city, str) and city.strip():
            cleaned.add(city.strip())
    return sorted(cleaned)


class CatalogProvider(ABC):
    """One tier of the catalog fallback chain."""

    name: str = "catalog"

    @abstractmethod
    async def fetch(self, countries: List[str]) -> TierResult[CatalogSnapshot]:
        """
        Fetch city lists for the allow-listed countries.

        Args:
            countries: Country names to include

        Returns:
            success with a non-empty snapshot, empty, or failure
        """
        pass


class CountriesNowProvider(CatalogProvider):
    """Primary tier: one request returning every country with its cities."""

    name = "countriesnow"

    def __init__(self, url: str, timeout: float = 10):
        self.url = url
        self.timeout = timeout

    async def fetch(self, countries: List[str]) -> TierResult[CatalogSnapshot]:
        try:
            async with client_session(self.timeout) as session:
                payload = await fetch_json(session, self.url, provider=self.name)
            snapshot = self.parse(payload, countries)
        except ProviderError as e:
            return TierResult.failure(e, source=self.name)

        if snapshot.is_empty:
            return TierResult.empty(source=self.name)
        return TierResult.success(snapshot, source=self.name)

    def parse(self, payload: Any, countries: List[str]) -> CatalogSnapshot:
        """Keep the allow-listed countries found in a CountriesNow payload."""
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise MalformedResponse("Expected an object with a 'data' list", provider=self.name)
        if payload.get("error"):
            raise ProviderUnavailable(str(payload.get("msg", "error flag set")), provider=self.name)

        wanted = {canonical_country(c) for c in countries}
        cities_by_country: Dict[str, List[str]] = {}
        for entry in payload["data"]:
            if not isinstance(entry, dict) or not isinstance(entry.get("country"), str):
                continue
            name = canonical_country(entry["country"])
            if name not in wanted:
                continue
            cities = clean_city_list(entry.get("cities"))
            cities_by_country[name] = cities or static_cities_for(name)

        return CatalogSnapshot(
            countries=list(cities_by_country),
            cities_by_country=cities_by_country,
        )


class GeoNamesProvider(CatalogProvider):
    """Secondary tier: one concurrent request per country code.

    Each country falls back to its static city list on its own, so one
    failing request never affects the others. The tier only reports
    failure when no country could be fetched remotely.
    """

    name = "geonames"

    def __init__(
        self,
        url: str,
        username: str = "demo",
        timeout: float = 10,
        max_rows: int = 15,
        country_codes: Optional[Dict[str, str]] = None,
    ):
        self.url = url
        self.username = username
        self.timeout = timeout
        self.max_rows = max_rows
        self.country_codes = country_codes or COUNTRY_CODES

    async def fetch(self, countries: List[str]) -> TierResult[CatalogSnapshot]:
        if self.username == "demo":
            logger.warning("Using GeoNames demo account with limited requests")

        targets = [canonical_country(c) for c in countries]
        targets = [c for c in targets if c in self.country_codes]
        if not targets:
            return TierResult.empty(source=self.name)

        async with client_session(self.timeout) as session:
            results = await asyncio.gather(
                *(self.fetch_country(session, country) for country in targets)
            )

        cities_by_country: Dict[str, List[str]] = {}
        errors: List[ProviderError] = []
        for country, result in zip(targets, results):
            if result.ok:
                cities_by_country[country] = result.value
            else:
                if result.error is not None:
                    errors.append(result.error)
                logger.warning(f"Failed to fetch cities for {country} ({result.reason}), using static list")
                cities_by_country[country] = static_cities_for(country)

        if not any(r.ok for r in results):
            # No errors means every country answered without a place name
            error = errors[0] if errors else ProviderEmptyResult(
                "No country returned cities", provider=self.name
            )
            return TierResult.failure(error, source=self.name)

        return TierResult.success(
            CatalogSnapshot(countries=targets, cities_by_country=cities_by_country),
            source=self.name,
        )

    async def fetch_country(self, session, country: str) -> TierResult[List[str]]:
        """Fetch populated places for a single country."""
        params = {
            "country": self.country_codes[country],
            "featureClass": "P",
            "maxRows": self.max_rows,
            "username": self.username,
        }
        try:
            payload = await fetch_json(session, self.url, params=params, provider=self.name)
            cities = self.parse(payload)
        except ProviderError as e:
            return TierResult.failure(e, source=self.name)

        if not cities:
            return TierResult.empty(source=self.name)
        return TierResult.success(cities, source=self.name)

    def parse(self, payload: Any) -> List[str]:
        """Extract place names from a GeoNames searchJSON payload."""
        if not isinstance(payload, dict):
            raise MalformedResponse("Expected a JSON object", provider=self.name)

        status = payload.get("status")
        if isinstance(status, dict):
            message = status.get("message", "GeoNames error")
            if status.get("value") in GEONAMES_LIMIT_CODES:
                raise RateLimited(message, provider=self.name)
            raise ProviderUnavailable(message, provider=self.name)

        places = payload.get("geonames")
        if not isinstance(places, list):
            raise MalformedResponse("Missing 'geonames' list", provider=self.name)

        return clean_city_list(
            place.get("name") for place in places if isinstance(place, dict)
        )


class StaticCatalogProvider(CatalogProvider):
    """Last tier: the bundled dataset."""

    name = "static"

    def __init__(self, cities: Optional[Dict[str, List[str]]] = None):
        self.cities = STATIC_CITIES if cities is None else cities

    async def fetch(self, countries: List[str]) -> TierResult[CatalogSnapshot]:
        cities_by_country = {}
        for country in countries:
            name = canonical_country(country)
            if name in self.cities:
                cities_by_country[name] = clean_city_list(self.cities[name])

        if not cities_by_country:
            return TierResult.empty(source=self.name)
        return TierResult.success(
            CatalogSnapshot(countries=list(cities_by_country), cities_by_country=cities_by_country),
            source=self.name,
        )
