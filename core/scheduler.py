"""
APScheduler-based cron triggers for the scheduling jobs.

Optional: deployments driven by an external cron hit the trigger endpoints
instead. Jobs are re-registered on every start, so no job store is needed.
"""

import logging

import sentry_sdk
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import get_cron_hours, get_event_timezone
from core.enums import RunWindow

logger = logging.getLogger(__name__)


_scheduler: AsyncIOScheduler | None = None


# =============================================================================
# Job functions
# =============================================================================


async def _run_assign_pools() -> None:
    """Daily pool assignment for tomorrow's events."""
    # Import here to avoid circular imports
    from core.jobs import run_assign_pools_job

    try:
        result = await run_assign_pools_job()
        logger.info(f"Scheduled pool assignment: {result['summary']}")
    except Exception as e:
        logger.exception("Scheduled pool assignment failed")
        sentry_sdk.capture_exception(e)


async def _run_reminders(run_window: str) -> None:
    """Same-day reminders for one run window."""
    from core.jobs import run_send_reminders_job

    try:
        result = await run_send_reminders_job(run_window)
        logger.info(f"Scheduled {run_window} reminders: {result['summary']}")
    except Exception as e:
        logger.exception(f"Scheduled {run_window} reminders failed")
        sentry_sdk.capture_exception(e)


# =============================================================================
# Scheduler initialization and shutdown
# =============================================================================


def init_scheduler() -> AsyncIOScheduler:
    """
    Initialize and start the APScheduler with the daily cron jobs.

    Call this during app startup (in FastAPI lifespan).
    """
    global _scheduler

    if _scheduler is not None:
        return _scheduler

    timezone = get_event_timezone()
    hours = get_cron_hours()

    _scheduler = AsyncIOScheduler(
        timezone=timezone,
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,
            "misfire_grace_time": 3600,  # Allow 1 hour late execution
        },
    )

    _scheduler.add_job(
        _run_assign_pools,
        trigger=CronTrigger(hour=hours["assign_pools"], minute=0, timezone=timezone),
        id="assign_pools",
        replace_existing=True,
    )
    for run_window in RunWindow:
        _scheduler.add_job(
            _run_reminders,
            trigger=CronTrigger(hour=hours[run_window.value], minute=0, timezone=timezone),
            id=f"reminders_{run_window.value}",
            replace_existing=True,
            kwargs={"run_window": run_window.value},
        )

    _scheduler.start()
    logger.info(
        f"Scheduler started (assign pools at {hours['assign_pools']}:00, "
        f"reminders at {hours['morning']}:00 and {hours['evening']}:00 {timezone})"
    )
    return _scheduler


def shutdown_scheduler() -> None:
    """
    Shutdown the scheduler gracefully.

    Call this during app shutdown.
    """
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=True)
        _scheduler = None
        logger.info("Scheduler stopped")
