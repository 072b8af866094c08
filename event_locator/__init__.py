"""Event Locator: place resolution, radius search and address enrichment for events."""

__version__ = "0.1.0"
