"""
Pool assignment for events whose registration has closed.

One run places every registrant of an event into a single "Main Pool"
bound to a freshly created Zoom meeting. The meeting is created first
(outside the database transaction); the pool, its attendees and the
pools_assigned flag are then written in one serializable transaction.
A meeting whose pool never commits is deleted again.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytz
import sentry_sdk
from sqlalchemy.exc import DBAPIError, IntegrityError

from .config import get_event_timezone
from .database import get_connection, get_serializable_transaction
from .errors import (
    AlreadyAssignedError,
    AssignmentError,
    DeadlineNotPassedError,
    EventSnapshot,
    MeetingCreationFailedError,
    NoRegistrantsError,
    NotFoundError,
    TransactionFailedError,
)
from .event_time import meeting_start, parse_event_time
from .notifications.actions import notify_assignment_failed, notify_meeting_ready
from .queries.events import claim_pool_assignment, get_event_with_relations
from .queries.pools import create_pool, create_pool_attendees, get_pools_for_event
from .zoom import MeetingData, create_meeting, delete_meeting

logger = logging.getLogger(__name__)

MAIN_POOL_NAME = "Main Pool"
DEFAULT_POOL_CAPACITY = 100

MEETING_TIMEOUT_SECONDS = 30
TRANSACTION_TIMEOUT_SECONDS = 10
LOCK_TIMEOUT_MS = 5000

SERIALIZATION_FAILURE = "40001"


@dataclass
class PoolAssignment:
    """Result of a successful assignment run."""

    pool: dict
    meeting: MeetingData | None
    attendee_count: int
    notifications: dict = field(default_factory=dict)


def _is_serialization_failure(error: DBAPIError) -> bool:
    orig = getattr(error, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == SERIALIZATION_FAILURE


def _valid_email(email: str | None) -> bool:
    return bool(email) and "@" in email


def _check_preconditions(event: dict, snapshot: EventSnapshot, now: datetime) -> None:
    """Raise the first unmet precondition. Nothing has been written yet."""
    deadline = event.get("registration_deadline")
    if deadline is None:
        raise DeadlineNotPassedError("Event has no registration deadline", snapshot)
    if deadline >= now:
        raise DeadlineNotPassedError(
            f"Registration deadline has not passed yet ({deadline.isoformat()})", snapshot
        )

    if event["pools_assigned"] or event["pools"]:
        raise AlreadyAssignedError("Pools have already been assigned for this event", snapshot)

    if not event["registrants"]:
        raise NoRegistrantsError("No registrations found for this event", snapshot)


def _collect_invitees(event: dict) -> tuple[list[str], dict[str, str]]:
    """
    Emails to invite to the meeting: registrants first, then trainers.

    Returns:
        (identities, display_names) where display_names maps email -> name
    """
    display_names: dict[str, str] = {}
    for person in event["registrants"] + event["trainers"]:
        email = person.get("email")
        if _valid_email(email) and email not in display_names:
            display_names[email] = person.get("name") or ""
    return list(display_names), display_names


async def _create_event_meeting(event: dict, snapshot: EventSnapshot) -> MeetingData | None:
    """
    Create the Zoom meeting for an event, or None if nobody can be invited.

    Raises:
        MeetingCreationFailedError: On error, timeout, or no shared URL
    """
    identities, display_names = _collect_invitees(event)
    host = next(
        (r["email"] for r in event["registrants"] if _valid_email(r.get("email"))), None
    )
    if not identities:
        logger.warning(f"Event {event['event_id']} has no valid emails, creating pool without meeting")
        return None

    time_range = parse_event_time(event.get("event_time"))
    if not time_range.parsed:
        logger.warning(
            f"Could not parse event time {event.get('event_time')!r} for event "
            f"{event['event_id']}, using {time_range.start_hour}:00 start"
        )
    start = meeting_start(event["event_date"], time_range, get_event_timezone())

    try:
        meeting = await asyncio.wait_for(
            create_meeting(
                topic=event["title"],
                start_time=start.astimezone(pytz.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
                duration_minutes=time_range.duration_minutes,
                identities=identities,
                host=host,
                display_names=display_names,
            ),
            timeout=MEETING_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as e:
        raise MeetingCreationFailedError(
            f"Meeting creation timed out after {MEETING_TIMEOUT_SECONDS}s", snapshot
        ) from e
    except Exception as e:
        raise MeetingCreationFailedError(f"Failed to create meeting: {e}", snapshot) from e

    if not meeting.shared_url:
        await _discard_meeting(meeting)
        raise MeetingCreationFailedError("Meeting provider returned no meeting URL", snapshot)

    return meeting


async def _discard_meeting(meeting: MeetingData) -> None:
    """Delete a meeting that has no pool. Failures are logged only."""
    try:
        await delete_meeting(meeting.meeting_id)
    except Exception as e:
        logger.error(f"Failed to delete orphaned meeting {meeting.meeting_id}: {e}")
        sentry_sdk.capture_exception(e)


async def _release_meeting(event_id: int, meeting: MeetingData) -> dict | None:
    """
    Delete the meeting unless a committed pool of the event links to it.

    Called after the transaction failed or was cancelled, when it may still
    have committed. Returns the committed pool, if any.
    """
    try:
        async with get_connection() as conn:
            event_pools = await get_pools_for_event(conn, event_id)
    except Exception as e:
        logger.error(
            f"Could not check pools of event {event_id}, keeping meeting {meeting.meeting_id}: {e}"
        )
        sentry_sdk.capture_exception(e)
        return None

    pool = next((p for p in event_pools if p.get("meet_link") == meeting.shared_url), None)
    if pool is None:
        await _discard_meeting(meeting)
    return pool


async def _persist_assignment(
    event: dict,
    snapshot: EventSnapshot,
    meeting: MeetingData | None,
) -> tuple[dict, int]:
    """
    Write the pool, its attendees and the assignment flag atomically.

    Returns:
        (pool row, number of attendees)

    Raises:
        AlreadyAssignedError: Another run assigned the event first
        TransactionFailedError: Anything else; all writes are rolled back
    """
    participant_urls = meeting.participant_urls if meeting else {}
    trainers = event["trainers"]

    async def write() -> tuple[dict, int]:
        async with get_serializable_transaction(lock_timeout_ms=LOCK_TIMEOUT_MS) as conn:
            if not await claim_pool_assignment(conn, event["event_id"]):
                raise AlreadyAssignedError("Pools were assigned by a concurrent run", snapshot)

            pool = await create_pool(
                conn,
                event_id=event["event_id"],
                pool_name=MAIN_POOL_NAME,
                capacity=event.get("pool_capacity") or DEFAULT_POOL_CAPACITY,
                meet_link=meeting.shared_url if meeting else None,
                trainer_id=trainers[0]["trainer_id"] if trainers else None,
            )
            attendee_count = await create_pool_attendees(
                conn,
                pool["pool_id"],
                [
                    {
                        "user_id": r["user_id"],
                        "meet_link": participant_urls.get(r.get("email") or ""),
                    }
                    for r in event["registrants"]
                ],
            )
            return pool, attendee_count

    try:
        return await asyncio.wait_for(write(), timeout=TRANSACTION_TIMEOUT_SECONDS)
    except AssignmentError:
        raise
    except IntegrityError as e:
        raise AlreadyAssignedError(
            "Pool already exists for this event (concurrent assignment)", snapshot
        ) from e
    except DBAPIError as e:
        if _is_serialization_failure(e):
            raise AlreadyAssignedError(
                "Concurrent assignment detected (serialization failure)", snapshot
            ) from e
        raise TransactionFailedError(f"Assignment transaction failed: {e}", snapshot) from e
    except asyncio.TimeoutError as e:
        raise TransactionFailedError(
            f"Assignment transaction timed out after {TRANSACTION_TIMEOUT_SECONDS}s", snapshot
        ) from e
    except Exception as e:
        raise TransactionFailedError(f"Assignment transaction failed: {e}", snapshot) from e


async def assign_pools(event_id: int, now: datetime | None = None) -> PoolAssignment:
    """
    Assign all registrants of an event to a pool with a meeting.

    Safe to call repeatedly: an assigned event raises AlreadyAssignedError
    before any meeting is created or row written.

    Args:
        event_id: Event to assign
        now: Reference time for the deadline check (defaults to now, UTC)

    Returns:
        PoolAssignment with the created pool and meeting

    Raises:
        AssignmentError: One of its subclasses; failures after the event
            was loaded are escalated to the operator first
    """
    now = now or datetime.now(timezone.utc)

    async with get_connection() as conn:
        event = await get_event_with_relations(conn, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")

    snapshot = EventSnapshot.from_row(event)

    try:
        _check_preconditions(event, snapshot, now)
        meeting = await _create_event_meeting(event, snapshot)
        try:
            pool, attendee_count = await _persist_assignment(event, snapshot, meeting)
        except TransactionFailedError:
            committed = await _release_meeting(event_id, meeting) if meeting else None
            if committed is None:
                raise
            logger.warning(f"Assignment of event {event_id} committed despite a transaction error")
            pool, attendee_count = committed, len(event["registrants"])
        except (AssignmentError, asyncio.CancelledError):
            if meeting is not None:
                await _release_meeting(event_id, meeting)
            raise
    except AssignmentError as e:
        logger.warning(f"Pool assignment failed for event {event_id} ({e.kind.value}): {e.message}")
        await notify_assignment_failed(e)
        raise

    logger.info(
        f"Assigned {attendee_count} attendees to pool {pool['pool_id']} for event {event_id}"
    )
    result = PoolAssignment(pool=pool, meeting=meeting, attendee_count=attendee_count)

    try:
        result.notifications = await notify_meeting_ready(
            event, event["registrants"], event["trainers"], meeting
        )
    except Exception as e:
        # Assignment is committed; notification problems never undo it
        logger.error(f"Error sending meeting notifications for event {event_id}: {e}")
        sentry_sdk.capture_exception(e)

    return result
