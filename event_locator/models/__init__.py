from event_locator.database import Base
from event_locator.models.event import Event

__all__ = ["Base", "Event"]
