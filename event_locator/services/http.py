"""
HTTP helpers for the JSON geo providers.

Transport and status errors are translated into the provider error
taxonomy here so callers only ever deal with ``ProviderError`` subclasses.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from event_locator.exceptions import MalformedResponse, ProviderUnavailable, RateLimited

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "EventLocator/1.0",
    "Accept": "application/json",
}


def client_session(timeout: float, headers: Optional[Dict[str, str]] = None) -> aiohttp.ClientSession:
    """Create a session whose every request is bounded by ``timeout`` seconds."""
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout),
        headers={**DEFAULT_HEADERS, **(headers or {})},
    )


async def fetch_json(
    session: aiohttp.ClientSession,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    provider: str = "",
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises:
        RateLimited: HTTP 429
        ProviderUnavailable: other non-2xx statuses, timeouts, connection errors
        MalformedResponse: body is not JSON
    """
    try:
        async with session.get(url, params=params) as response:
            if response.status == 429:
                raise RateLimited(f"Rate limited by {url}", provider=provider)
            if response.status >= 400:
                raise ProviderUnavailable(
                    f"HTTP {response.status} from {url}", provider=provider
                )
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise MalformedResponse(f"Invalid JSON from {url}: {e}", provider=provider) from e
    except asyncio.TimeoutError as e:
        raise ProviderUnavailable(f"Request timeout to {url}", provider=provider) from e
    except aiohttp.ClientError as e:
        raise ProviderUnavailable(f"Network error for {url}: {e}", provider=provider) from e
