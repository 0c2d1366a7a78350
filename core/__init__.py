"""
Core business logic - pool assignment, reminders and event scheduling.
Used by the web API trigger routes and the in-process scheduler.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction

# Event time parsing
from .event_time import EventTimeRange, parse_event_time, parse_start_hour

# Errors
from .errors import (
    AssignmentError, AssignmentErrorKind, EventSnapshot,
    NotFoundError, DeadlineNotPassedError, AlreadyAssignedError,
    NoRegistrantsError, MeetingCreationFailedError, TransactionFailedError,
    NoMeetLinkError, EventHasDependentsError,
)

# Scheduling operations (async functions - must be awaited)
from .pool_assignment import assign_pools, PoolAssignment, DEFAULT_POOL_CAPACITY
from .reminders import send_due_reminders
from .event_trainers import add_event_trainers
from .events import delete_event

__all__ = [
    # Database (SQLAlchemy)
    'get_connection', 'get_transaction',
    # Event time
    'EventTimeRange', 'parse_event_time', 'parse_start_hour',
    # Errors
    'AssignmentError', 'AssignmentErrorKind', 'EventSnapshot',
    'NotFoundError', 'DeadlineNotPassedError', 'AlreadyAssignedError',
    'NoRegistrantsError', 'MeetingCreationFailedError', 'TransactionFailedError',
    'NoMeetLinkError', 'EventHasDependentsError',
    # Scheduling
    'assign_pools', 'PoolAssignment', 'DEFAULT_POOL_CAPACITY',
    'send_due_reminders', 'add_event_trainers', 'delete_event',
]
