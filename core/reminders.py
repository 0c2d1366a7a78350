"""
Same-day reminders for events whose pools are assigned.

Runs twice a day. The morning pass handles events starting before noon,
the evening pass the rest. Each event is reminded once: reminder2_sent is
set after every recipient has been attempted, whether or not the sends
succeeded.
"""

import logging
from datetime import datetime, time, timedelta, timezone

import pytz
import sentry_sdk

from .config import get_event_timezone
from .database import get_connection, get_transaction
from .enums import JobStatus, NotificationReferenceType, RunWindow
from .errors import NoMeetLinkError, ReminderSkipReason
from .event_time import parse_start_hour
from .notifications.dispatcher import send_notification
from .queries.events import get_event_with_relations, get_events_between, mark_reminder_sent
from .queries.pools import get_attendee_links_for_event

logger = logging.getLogger(__name__)


def local_day_bounds(now: datetime, tz_name: str, days_ahead: int = 0) -> tuple[datetime, datetime]:
    """
    First and last instant of a local calendar day.

    Args:
        now: Reference time (timezone-aware)
        tz_name: Timezone the day is taken in
        days_ahead: 0 for today, 1 for tomorrow

    Returns:
        (00:00:00, 23:59:59.999999) as aware datetimes in tz_name
    """
    tz = pytz.timezone(tz_name)
    day = now.astimezone(tz).date() + timedelta(days=days_ahead)
    return (
        tz.localize(datetime.combine(day, time.min)),
        tz.localize(datetime.combine(day, time.max)),
    )


def is_due_in_window(event_time: str | None, run_window: RunWindow) -> bool:
    """
    Whether an event's reminder belongs to this run window.

    Events whose start cannot be parsed are always due.
    """
    start_hour = parse_start_hour(event_time)
    if start_hour is None:
        return True
    if run_window == RunWindow.morning:
        return start_hour < 12
    return start_hour >= 12


async def _send_event_reminders(event: dict) -> dict:
    """
    Send same-day reminders to everyone in one event.

    Returns:
        Per-recipient counts

    Raises:
        NoMeetLinkError: If no pool of the event has a shared meeting link
    """
    event_id = event["event_id"]
    pool = next((p for p in event["pools"] if p.get("meet_link")), None)
    if pool is None:
        raise NoMeetLinkError(f"No meet link found for event {event_id}")
    shared_link = pool["meet_link"]

    async with get_connection() as conn:
        personal_links = await get_attendee_links_for_event(conn, event_id)

    counts = {"users_sent": 0, "users_failed": 0, "trainers_sent": 0, "trainers_failed": 0}

    for registrant in event["registrants"]:
        if not registrant.get("mobile_number"):
            continue
        try:
            await send_notification(
                registrant["mobile_number"],
                "same_day_reminder_user",
                {
                    "event_title": event["title"],
                    "meet_link": personal_links.get(registrant["user_id"]) or shared_link,
                },
                user_id=registrant["user_id"],
                reference_type=NotificationReferenceType.event,
                reference_id=event_id,
            )
            counts["users_sent"] += 1
        except Exception as e:
            logger.error(f"Error sending reminder to user {registrant['user_id']}: {e}")
            counts["users_failed"] += 1

    for trainer in event["trainers"]:
        if not trainer.get("mobile_number"):
            continue
        try:
            await send_notification(
                trainer["mobile_number"],
                "same_day_reminder_trainer",
                {
                    "trainer_name": trainer["name"],
                    "event_title": event["title"],
                    "event_time": event.get("event_time") or "",
                    "meet_link": shared_link,
                },
                trainer_id=trainer["trainer_id"],
                reference_type=NotificationReferenceType.event,
                reference_id=event_id,
            )
            counts["trainers_sent"] += 1
        except Exception as e:
            logger.error(f"Error sending reminder to trainer {trainer['trainer_id']}: {e}")
            counts["trainers_failed"] += 1

    return counts


async def send_due_reminders(run_window: str | RunWindow, now: datetime | None = None) -> dict:
    """
    Send same-day reminders for today's assigned events in this window.

    Args:
        run_window: "morning" or "evening"
        now: Reference time (defaults to now, UTC)

    Returns:
        {"run_window", "summary": {"total", "success", "failed", "skipped"},
         "results": [per-event dicts]}

    Raises:
        ValueError: If run_window is not a known window
    """
    run_window = RunWindow(run_window)
    now = now or datetime.now(timezone.utc)
    day_start, day_end = local_day_bounds(now, get_event_timezone())

    async with get_connection() as conn:
        todays_events = await get_events_between(
            conn, day_start, day_end, pools_assigned=True, reminder2_sent=False
        )

    results = []
    for event in todays_events:
        base = {"event_id": event["event_id"], "title": event["title"]}

        if not is_due_in_window(event.get("event_time"), run_window):
            results.append(
                {
                    **base,
                    "status": JobStatus.skipped.value,
                    "reason": ReminderSkipReason.wrong_window.value,
                }
            )
            continue

        try:
            async with get_connection() as conn:
                full_event = await get_event_with_relations(conn, event["event_id"])
            details = await _send_event_reminders(full_event)

            async with get_transaction() as conn:
                await mark_reminder_sent(conn, event["event_id"])

            results.append({**base, "status": JobStatus.success.value, "details": details})
        except NoMeetLinkError as e:
            logger.error(f"Assigned event {event['event_id']} has no meet link: {e}")
            sentry_sdk.capture_exception(e)
            results.append(
                {
                    **base,
                    "status": JobStatus.failed.value,
                    "reason": NoMeetLinkError.kind.value,
                    "error": str(e),
                }
            )
        except Exception as e:
            logger.exception(f"Error processing reminders for event {event['event_id']}")
            sentry_sdk.capture_exception(e)
            results.append({**base, "status": JobStatus.failed.value, "error": str(e)})

    summary = {
        "total": len(results),
        "success": sum(1 for r in results if r["status"] == JobStatus.success.value),
        "failed": sum(1 for r in results if r["status"] == JobStatus.failed.value),
        "skipped": sum(1 for r in results if r["status"] == JobStatus.skipped.value),
    }
    logger.info(
        f"Reminder pass ({run_window.value}) done: {summary['success']} sent, "
        f"{summary['failed']} failed, {summary['skipped']} skipped"
    )
    return {"run_window": run_window.value, "summary": summary, "results": results}
