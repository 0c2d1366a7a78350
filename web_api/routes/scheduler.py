"""
Scheduler trigger API routes.

Called by the external cron (or by hand) to run the scheduling jobs.
All endpoints require the X-API-Key header.

Endpoints:
- GET /api/scheduler/assign-pools - Assign pools for tomorrow's events
- GET /api/scheduler/send-reminders?runWindow=morning|evening - Same-day reminders
- GET /api/scheduler/unified?runWindow=morning|evening - Both, in sequence
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from core.enums import RunWindow
from core.jobs import run_assign_pools_job, run_send_reminders_job, run_unified_job
from web_api.auth import require_api_key

router = APIRouter(
    prefix="/api/scheduler",
    tags=["scheduler"],
    dependencies=[Depends(require_api_key)],
)


def _parse_run_window(value: str) -> RunWindow:
    try:
        return RunWindow(value)
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail=f"runWindow must be one of: {', '.join(w.value for w in RunWindow)}",
        )


@router.get("/assign-pools")
async def assign_pools_endpoint() -> dict[str, Any]:
    """Assign pools for every unassigned event dated tomorrow."""
    return await run_assign_pools_job()


@router.get("/send-reminders")
async def send_reminders_endpoint(
    run_window: str = Query(..., alias="runWindow"),
) -> dict[str, Any]:
    """Send same-day reminders for the given run window."""
    return await run_send_reminders_job(_parse_run_window(run_window))


@router.get("/unified")
async def unified_endpoint(
    run_window: str = Query(RunWindow.morning.value, alias="runWindow"),
) -> dict[str, Any]:
    """Run pool assignment, then reminders for the given run window."""
    return await run_unified_job(_parse_run_window(run_window))
