from sqlalchemy import Column, Integer, String, Float, DateTime, Text, JSON, Index
from sqlalchemy.sql import func

from event_locator.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    category = Column(String(50), nullable=False, index=True)  # Stored lower-cased

    # Place as entered by the user
    country = Column(String(100), nullable=False, index=True)
    city = Column(String(100), nullable=False, index=True)
    venue = Column(String(255), nullable=False)

    # Resolved coordinate (WGS84 degrees)
    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)

    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    creator_id = Column(String(64), nullable=True)

    # Full postal address, written once by the enrichment sweep
    enhanced_location = Column(JSON(none_as_null=True), nullable=True)
    location_enriched_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    __table_args__ = (
        Index("ix_events_coordinates", "latitude", "longitude"),
    )

    def __repr__(self):
        return f"<Event {self.id}: {self.title}>"
