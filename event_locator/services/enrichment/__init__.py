"""Enrichment services for event data."""

from event_locator.services.enrichment.base import EnrichmentService
from event_locator.services.enrichment.address import AddressEnrichmentService, build_enhanced_location

__all__ = ["EnrichmentService", "AddressEnrichmentService", "build_enhanced_location"]
