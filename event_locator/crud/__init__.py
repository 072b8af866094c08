"""Database access for events."""
