"""Fire-and-forget event notifications."""
import asyncio
import logging
from typing import Any, Dict, Optional, Set

import aiohttp

from event_locator.logging_config import NOTIFICATION_LOGGER
from event_locator.services.http import client_session

logger = logging.getLogger(__name__)


class EventNotifier:
    """Publish event notices without making the caller wait for delivery.

    With a webhook URL the payload is POSTed as JSON; otherwise it is written
    to the ``event_locator.notifications`` logger. Delivery failures are
    logged and dropped.
    """

    def __init__(self, webhook_url: Optional[str] = None, timeout: float = 5):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.channel_logger = logging.getLogger(NOTIFICATION_LOGGER)
        self._pending: Set[asyncio.Task] = set()

    def publish(self, payload: Dict[str, Any]) -> asyncio.Task:
        """Schedule delivery of ``payload`` and return immediately."""
        task = asyncio.create_task(self._deliver(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def event_created(self, event) -> asyncio.Task:
        return self.publish({
            "type": "event_created",
            "eventId": event.id,
            "title": event.title,
            "category": event.category,
            "city": event.city,
        })

    def event_status(self, event, status) -> asyncio.Task:
        return self.publish({
            "type": "event_status",
            "eventId": event.id,
            "title": event.title,
            "status": getattr(status, "value", status),
        })

    async def _deliver(self, payload: Dict[str, Any]) -> bool:
        if not self.webhook_url:
            self.channel_logger.info("Event notification", extra={"notification": payload})
            return True

        try:
            async with client_session(self.timeout) as session:
                async with session.post(self.webhook_url, json=payload) as response:
                    if response.status >= 400:
                        logger.warning(f"Notification webhook returned HTTP {response.status}")
                        return False
            return True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Failed to deliver notification {payload.get('type')}: {str(e)}")
            return False

    async def drain(self) -> None:
        """Wait for in-flight deliveries, e.g. at shutdown."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
