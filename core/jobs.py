"""
Scheduler jobs: the loops behind the cron triggers and trigger endpoints.

Every job returns a summary dict:
    {"message", "summary": {"total", "success", "failed", "skipped",
     "execution_time_seconds"}, "results": [...], "timestamp"}

One failing event never aborts a job; it is recorded in the results.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

import sentry_sdk

from .config import get_event_timezone, get_per_event_timeout
from .database import get_connection
from .enums import JobStatus, RunWindow
from .errors import AssignmentError
from .pool_assignment import assign_pools
from .queries.events import get_events_between
from .reminders import local_day_bounds, send_due_reminders

logger = logging.getLogger(__name__)


def _count(results: list[dict], status: JobStatus) -> int:
    return sum(1 for r in results if r["status"] == status.value)


async def _assign_event(event: dict, now: datetime) -> dict:
    """Run pool assignment for one event and describe the outcome."""
    base = {"event_id": event["event_id"], "title": event["title"]}

    deadline = event.get("registration_deadline")
    if deadline is not None and deadline >= now:
        logger.info(
            f"Skipping event {event['event_id']} - registration open until {deadline.isoformat()}"
        )
        return {
            **base,
            "status": JobStatus.skipped.value,
            "reason": "Registration deadline has not passed yet",
        }

    timeout = get_per_event_timeout()
    try:
        assignment = await asyncio.wait_for(assign_pools(event["event_id"], now=now), timeout)
    except AssignmentError as e:
        return {
            **base,
            "status": JobStatus.failed.value,
            "reason": e.kind.value,
            "error": e.message,
        }
    except asyncio.TimeoutError:
        logger.error(f"Pool assignment for event {event['event_id']} timed out after {timeout}s")
        return {
            **base,
            "status": JobStatus.failed.value,
            "error": f"Timed out after {timeout} seconds",
        }
    except Exception as e:
        logger.exception(f"Unexpected error assigning pools for event {event['event_id']}")
        sentry_sdk.capture_exception(e)
        return {**base, "status": JobStatus.failed.value, "error": str(e)}

    return {
        **base,
        "status": JobStatus.success.value,
        "pool_id": assignment.pool["pool_id"],
        "attendees": assignment.attendee_count,
        "notifications": assignment.notifications,
    }


async def run_assign_pools_job(now: datetime | None = None) -> dict:
    """
    Assign pools for every unassigned event dated tomorrow.

    "Tomorrow" is the next calendar day in the event timezone. Events whose
    registration is still open are skipped.
    """
    started = time.monotonic()
    now = now or datetime.now(timezone.utc)
    day_start, day_end = local_day_bounds(now, get_event_timezone(), days_ahead=1)

    async with get_connection() as conn:
        tomorrows_events = await get_events_between(
            conn, day_start, day_end, pools_assigned=False
        )
    logger.info(f"Found {len(tomorrows_events)} events for tomorrow that may need pool assignment")

    results = []
    for event in tomorrows_events:
        results.append(await _assign_event(event, now))

    elapsed = round(time.monotonic() - started, 3)
    summary = {
        "total": len(results),
        "success": _count(results, JobStatus.success),
        "failed": _count(results, JobStatus.failed),
        "skipped": _count(results, JobStatus.skipped),
        "execution_time_seconds": elapsed,
    }
    logger.info(
        f"Pool assignment job completed in {elapsed}s. Success: {summary['success']}, "
        f"Failed: {summary['failed']}, Skipped: {summary['skipped']}, Total: {summary['total']}"
    )

    return {
        "message": f"Processed {len(results)} events for tomorrow",
        "summary": summary,
        "results": results,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def run_send_reminders_job(run_window: str | RunWindow, now: datetime | None = None) -> dict:
    """
    Send same-day reminders for one run window.

    Raises:
        ValueError: If run_window is not "morning" or "evening"
    """
    started = time.monotonic()
    outcome = await send_due_reminders(run_window, now=now)
    elapsed = round(time.monotonic() - started, 3)

    return {
        "message": (
            f"Processed {outcome['summary']['total']} events for today's reminders"
        ),
        "run_window": outcome["run_window"],
        "summary": {**outcome["summary"], "execution_time_seconds": elapsed},
        "results": outcome["results"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def run_unified_job(run_window: str | RunWindow, now: datetime | None = None) -> dict:
    """
    Run pool assignment, then reminders for the given window.

    Raises:
        ValueError: If run_window is not "morning" or "evening"
    """
    run_window = RunWindow(run_window)
    started = time.monotonic()

    assign_result = await run_assign_pools_job(now=now)
    reminders_result = await run_send_reminders_job(run_window, now=now)

    elapsed = round(time.monotonic() - started, 3)
    logger.info(f"Unified scheduler ({run_window.value}) completed in {elapsed}s")

    return {
        "message": f"Unified scheduler ({run_window.value}) completed successfully",
        "execution_time_seconds": elapsed,
        "assign_pools": assign_result,
        "send_reminders": reminders_result,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
