"""Request dependencies resolving the services built at startup."""
from fastapi import Depends, Request

from event_locator.crud.event import EventStore
from event_locator.services.catalog import GeoCatalog
from event_locator.services.enrichment import AddressEnrichmentService
from event_locator.services.geocoding import Geocoder
from event_locator.services.notifications import EventNotifier
from event_locator.services.search import GeoQueryBuilder


def get_event_store(request: Request) -> EventStore:
    return request.app.state.event_store


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder


def get_query_builder(geocoder: Geocoder = Depends(get_geocoder)) -> GeoQueryBuilder:
    return GeoQueryBuilder(geocoder)


def get_catalog(request: Request) -> GeoCatalog:
    return request.app.state.catalog


def get_notifier(request: Request) -> EventNotifier:
    return request.app.state.notifier


def get_enrichment(request: Request) -> AddressEnrichmentService:
    return request.app.state.enrichment
