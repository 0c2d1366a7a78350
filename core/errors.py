"""
Expected failure outcomes of the scheduling jobs.

These are reported in job summaries and escalations rather than crashing
the trigger. Each assignment error carries a snapshot of the event it was
raised for, so escalation messages never depend on shared state.
"""

import enum
from dataclasses import dataclass
from datetime import datetime


class AssignmentErrorKind(str, enum.Enum):
    not_found = "not_found"
    deadline_not_passed = "deadline_not_passed"
    already_assigned = "already_assigned"
    no_registrants = "no_registrants"
    meeting_creation_failed = "meeting_creation_failed"
    transaction_failed = "transaction_failed"


class ReminderSkipReason(str, enum.Enum):
    wrong_window = "wrong_window"


class ReminderErrorKind(str, enum.Enum):
    no_meet_link = "no_meet_link"


@dataclass(frozen=True)
class EventSnapshot:
    """The event fields an escalation message needs."""

    event_id: int
    title: str
    event_date: datetime
    event_time: str | None

    @classmethod
    def from_row(cls, event: dict) -> "EventSnapshot":
        return cls(
            event_id=event["event_id"],
            title=event["title"],
            event_date=event["event_date"],
            event_time=event.get("event_time"),
        )


class AssignmentError(Exception):
    """Base exception for pool assignment failures."""

    kind: AssignmentErrorKind

    def __init__(self, message: str, event: EventSnapshot | None = None):
        super().__init__(message)
        self.message = message
        self.event = event


class NotFoundError(AssignmentError):
    """Event does not exist."""

    kind = AssignmentErrorKind.not_found


class DeadlineNotPassedError(AssignmentError):
    """Registration is still open (or the event has no deadline)."""

    kind = AssignmentErrorKind.deadline_not_passed


class AlreadyAssignedError(AssignmentError):
    """Pools exist for the event, or another run won the race."""

    kind = AssignmentErrorKind.already_assigned


class NoRegistrantsError(AssignmentError):
    """Nobody registered for the event."""

    kind = AssignmentErrorKind.no_registrants


class MeetingCreationFailedError(AssignmentError):
    """The meeting provider did not return a shared meeting URL."""

    kind = AssignmentErrorKind.meeting_creation_failed


class TransactionFailedError(AssignmentError):
    """The assignment transaction rolled back; the event stays retryable."""

    kind = AssignmentErrorKind.transaction_failed


class NoMeetLinkError(Exception):
    """An assigned event has no pool with a shared meeting link."""

    kind = ReminderErrorKind.no_meet_link


class EventHasDependentsError(Exception):
    """Event cannot be deleted while registrations or pools reference it."""
