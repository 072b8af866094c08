"""Shared exceptions for location resolution and enrichment."""

class LocatorError(Exception):
    """Base exception for all event locator errors."""
    pass

class ProviderError(LocatorError):
    """Raised when a third-party geo provider cannot answer a request."""

    def __init__(self, message: str = "", provider: str = ""):
        super().__init__(message)
        self.provider = provider

class ProviderUnavailable(ProviderError):
    """Raised on network failures, timeouts and 5xx responses."""
    pass

class ProviderEmptyResult(ProviderError):
    """Raised when a well-formed response contains no matches.

    A single empty lookup is reported as an empty TierResult. This error is
    only carried when a whole tier comes back empty from every request it made.
    """
    pass

class MalformedResponse(ProviderError):
    """Raised when a response does not have the expected shape."""
    pass

class RateLimited(ProviderError):
    """Raised when a provider throttles the caller."""
    pass

class CatalogUnavailableError(LocatorError):
    """Raised when the catalog is empty even after the static dataset."""
    pass
