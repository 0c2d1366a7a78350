"""Query layer for database operations using SQLAlchemy Core."""

from .events import (
    claim_pool_assignment,
    get_event,
    get_event_with_relations,
    get_events_between,
    mark_reminder_sent,
)
from .pools import create_pool, create_pool_attendees, get_pools_for_event

__all__ = [
    # Events
    "get_event",
    "get_event_with_relations",
    "get_events_between",
    "claim_pool_assignment",
    "mark_reminder_sent",
    # Pools
    "get_pools_for_event",
    "create_pool",
    "create_pool_attendees",
]
