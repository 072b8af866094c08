"""Tests for the country/city catalog and its providers."""
from unittest.mock import AsyncMock, patch

import pytest

from event_locator.exceptions import (
    CatalogUnavailableError,
    MalformedResponse,
    ProviderEmptyResult,
    ProviderUnavailable,
    RateLimited,
)
from event_locator.services.cache import ResolutionCache
from event_locator.services.catalog import (
    CATALOG_CACHE_KEY,
    CountriesNowProvider,
    GeoCatalog,
    GeoNamesProvider,
    StaticCatalogProvider,
)
from event_locator.services.catalog.static_data import STATIC_CITIES
from event_locator.services.results import TierResult, TierStatus

COUNTRIES = ["Rwanda", "Kenya", "Uganda", "Tanzania", "Burundi", "Democratic Republic of the Congo"]

FETCH_JSON = "event_locator.services.catalog.providers.fetch_json"


class StubProvider:
    """Provider returning a fixed result and counting calls."""

    def __init__(self, name, result):
        self.name = name
        self.result = result
        self.calls = 0

    async def fetch(self, countries):
        self.calls += 1
        return self.result


def failing(name):
    return StubProvider(name, TierResult.failure(ProviderUnavailable("down", provider=name)))


@pytest.fixture
def cache():
    return ResolutionCache()


# ---------------------------------------------------------------------
# CountriesNow
# ---------------------------------------------------------------------

def test_countriesnow_parse_filters_to_allow_list():
    """Test that only allow-listed countries are kept."""
    provider = CountriesNowProvider("https://example.test/countries")
    payload = {
        "error": False,
        "data": [
            {"country": "Rwanda", "cities": ["Kigali", " Butare ", "", "Kigali"]},
            {"country": "France", "cities": ["Paris"]},
            {"country": "Kenya", "cities": ["Nairobi"]},
        ],
    }

    snapshot = provider.parse(payload, ["Rwanda", "Kenya"])

    assert snapshot.countries == ["Kenya", "Rwanda"]
    assert snapshot.cities_by_country["Rwanda"] == ["Butare", "Kigali"]
    assert "France" not in snapshot.cities_by_country


def test_countriesnow_parse_empty_city_list_uses_static():
    """Test that a listed country without cities gets its bundled list."""
    provider = CountriesNowProvider("https://example.test/countries")
    payload = {"error": False, "data": [{"country": "Burundi", "cities": []}]}

    snapshot = provider.parse(payload, COUNTRIES)

    assert snapshot.cities_by_country["Burundi"] == STATIC_CITIES["Burundi"]


def test_countriesnow_parse_rejects_bad_shape():
    """Test that a payload without a data list is malformed."""
    provider = CountriesNowProvider("https://example.test/countries")
    with pytest.raises(MalformedResponse):
        provider.parse({"msg": "oops"}, COUNTRIES)


@pytest.mark.asyncio
async def test_countriesnow_fetch_failure():
    """Test that a transport error becomes a failure result."""
    provider = CountriesNowProvider("https://example.test/countries")
    with patch(FETCH_JSON, new=AsyncMock(side_effect=ProviderUnavailable("timeout", provider="countriesnow"))):
        result = await provider.fetch(COUNTRIES)

    assert result.status is TierStatus.FAILURE
    assert isinstance(result.error, ProviderUnavailable)


@pytest.mark.asyncio
async def test_countriesnow_fetch_no_matching_countries():
    """Test that a payload without any allow-listed country is empty."""
    provider = CountriesNowProvider("https://example.test/countries")
    payload = {"error": False, "data": [{"country": "France", "cities": ["Paris"]}]}
    with patch(FETCH_JSON, new=AsyncMock(return_value=payload)):
        result = await provider.fetch(COUNTRIES)

    assert result.status is TierStatus.EMPTY


# ---------------------------------------------------------------------
# GeoNames
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_geonames_partial_failure_uses_static_per_country():
    """Test that one failing country falls back alone."""
    provider = GeoNamesProvider("https://example.test/searchJSON", username="tester")

    async def fake_fetch(session, url, params=None, provider=""):
        if params["country"] == "KE":
            raise ProviderUnavailable("HTTP 503", provider=provider)
        return {"geonames": [{"name": f"City of {params['country']}"}]}

    with patch(FETCH_JSON, new=fake_fetch):
        result = await provider.fetch(["Rwanda", "Kenya"])

    assert result.ok
    assert result.value.cities_by_country["Rwanda"] == ["City of RW"]
    assert result.value.cities_by_country["Kenya"] == STATIC_CITIES["Kenya"]


@pytest.mark.asyncio
async def test_geonames_total_failure_is_failure():
    """Test that the tier fails when no country was fetched remotely."""
    provider = GeoNamesProvider("https://example.test/searchJSON")
    with patch(FETCH_JSON, new=AsyncMock(side_effect=ProviderUnavailable("down", provider="geonames"))):
        result = await provider.fetch(COUNTRIES)

    assert result.status is TierStatus.FAILURE


@pytest.mark.asyncio
async def test_geonames_sends_expected_params():
    """Test the per-country query parameters."""
    provider = GeoNamesProvider("https://example.test/searchJSON", username="tester", max_rows=15)
    mock_fetch = AsyncMock(return_value={"geonames": [{"name": "Kigali"}]})
    with patch(FETCH_JSON, new=mock_fetch):
        await provider.fetch(["Rwanda"])

    params = mock_fetch.call_args.kwargs["params"]
    assert params == {"country": "RW", "featureClass": "P", "maxRows": 15, "username": "tester"}


def test_geonames_parse_rate_limit_status():
    """Test that the credit-exhausted status maps to RateLimited."""
    provider = GeoNamesProvider("https://example.test/searchJSON")
    with pytest.raises(RateLimited):
        provider.parse({"status": {"message": "daily limit exceeded", "value": 18}})


def test_geonames_parse_other_status():
    """Test that other GeoNames status objects are unavailability."""
    provider = GeoNamesProvider("https://example.test/searchJSON")
    with pytest.raises(ProviderUnavailable):
        provider.parse({"status": {"message": "invalid user", "value": 10}})


# ---------------------------------------------------------------------
# Static dataset
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_static_provider_accepts_aliases():
    """Test that country aliases resolve to catalog names."""
    result = await StaticCatalogProvider().fetch(["DRC", "Rwanda"])

    assert result.ok
    assert result.value.countries == ["Democratic Republic of the Congo", "Rwanda"]


# ---------------------------------------------------------------------
# GeoCatalog
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_load_primary_failure_still_non_empty(cache):
    """Test that failing remote tiers fall through to the bundled data."""
    catalog = GeoCatalog(
        cache,
        providers=[failing("countriesnow"), failing("geonames"), StaticCatalogProvider()],
        countries=COUNTRIES,
    )

    snapshot = await catalog.load()

    assert len(snapshot.countries) > 0
    assert snapshot.countries == sorted(COUNTRIES)
    assert snapshot.cities_by_country["Kenya"] == STATIC_CITIES["Kenya"]


@pytest.mark.asyncio
async def test_load_first_success_wins(cache):
    """Test that later tiers are not consulted after a success."""
    static = StaticCatalogProvider()
    primary_result = await static.fetch(["Rwanda"])
    primary = StubProvider("primary", primary_result)
    secondary = StubProvider("secondary", primary_result)

    catalog = GeoCatalog(cache, providers=[primary, secondary], countries=COUNTRIES)
    await catalog.load()

    assert primary.calls == 1
    assert secondary.calls == 0


@pytest.mark.asyncio
async def test_load_is_cached(cache):
    """Test that a second load is served from the cache."""
    provider = StubProvider("primary", await StaticCatalogProvider().fetch(COUNTRIES))
    catalog = GeoCatalog(cache, providers=[provider], countries=COUNTRIES)

    first = await catalog.load()
    second = await catalog.load()

    assert first == second
    assert provider.calls == 1
    assert cache.get(CATALOG_CACHE_KEY) == first


@pytest.mark.asyncio
async def test_refresh_bypasses_cache(cache):
    """Test that refresh reloads from the providers."""
    provider = StubProvider("primary", await StaticCatalogProvider().fetch(COUNTRIES))
    catalog = GeoCatalog(cache, providers=[provider], countries=COUNTRIES)

    await catalog.load()
    await catalog.refresh()

    assert provider.calls == 2


@pytest.mark.asyncio
async def test_load_all_empty_raises(cache):
    """Test that an empty catalog after every tier is an error."""
    catalog = GeoCatalog(
        cache,
        providers=[failing("countriesnow"), StaticCatalogProvider(cities={})],
        countries=COUNTRIES,
    )

    with pytest.raises(CatalogUnavailableError):
        await catalog.load()


@pytest.mark.asyncio
async def test_cities_for(cache):
    """Test the per-country city list."""
    catalog = GeoCatalog(cache, providers=[StaticCatalogProvider()], countries=COUNTRIES)

    assert await catalog.cities_for("Uganda") == STATIC_CITIES["Uganda"]
    assert await catalog.cities_for("Atlantis") == []


@pytest.mark.asyncio
async def test_cities_for_alias(cache):
    """Test that aliases resolve to the catalogued country."""
    catalog = GeoCatalog(cache, providers=[StaticCatalogProvider()], countries=COUNTRIES)

    drc = STATIC_CITIES["Democratic Republic of the Congo"]
    assert await catalog.cities_for("DRC") == drc
    assert await catalog.cities_for("DR Congo") == drc


@pytest.mark.asyncio
@pytest.mark.parametrize("primary", [
    failing("countriesnow"),
    StubProvider("countriesnow", TierResult.empty("no countries")),
])
async def test_secondary_success_skips_static(cache, primary):
    """Test that a GeoNames success after a primary miss never reaches the static tier."""
    secondary_snapshot = (await StaticCatalogProvider().fetch(["Kenya"])).value
    secondary = StubProvider("geonames", TierResult.success(secondary_snapshot))
    static = StubProvider("static", await StaticCatalogProvider().fetch(COUNTRIES))

    catalog = GeoCatalog(cache, providers=[primary, secondary, static], countries=COUNTRIES)
    snapshot = await catalog.load()

    assert snapshot == secondary_snapshot
    assert secondary.calls == 1
    assert static.calls == 0


@pytest.mark.asyncio
async def test_geonames_all_countries_empty_is_empty_result_failure():
    """Test that a tier with no place names anywhere carries ProviderEmptyResult."""
    provider = GeoNamesProvider("https://example.test/searchJSON", username="tester")
    with patch(FETCH_JSON, new=AsyncMock(return_value={"geonames": []})):
        result = await provider.fetch(["Rwanda", "Kenya"])

    assert result.status is TierStatus.FAILURE
    assert isinstance(result.error, ProviderEmptyResult)
