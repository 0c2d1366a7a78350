"""
Event scheduling API routes.

All endpoints require the X-API-Key header.

Endpoints:
- POST /api/events/{event_id}/assign-pools - Assign pools for one event now
- POST /api/events/{event_id}/trainers - Add trainers (joins existing meeting)
- DELETE /api/events/{event_id} - Delete an event without registrations or pools
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.errors import AssignmentError, AssignmentErrorKind, EventHasDependentsError, NotFoundError
from core.event_trainers import add_event_trainers
from core.events import delete_event
from core.pool_assignment import assign_pools
from web_api.auth import require_api_key

router = APIRouter(
    prefix="/api/events",
    tags=["events"],
    dependencies=[Depends(require_api_key)],
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    AssignmentErrorKind.not_found: 404,
    AssignmentErrorKind.deadline_not_passed: 400,
    AssignmentErrorKind.no_registrants: 400,
    AssignmentErrorKind.already_assigned: 409,
    AssignmentErrorKind.meeting_creation_failed: 502,
    AssignmentErrorKind.transaction_failed: 500,
}


class AddTrainersRequest(BaseModel):
    """Request body for adding trainers to an event."""

    trainer_ids: list[int]


@router.post("/{event_id}/assign-pools")
async def assign_pools_endpoint(event_id: int) -> dict[str, Any]:
    """
    Assign pools for one event immediately.

    The same preconditions as the daily job apply; an event that is already
    assigned returns 409.
    """
    try:
        assignment = await assign_pools(event_id)
    except AssignmentError as e:
        raise HTTPException(
            status_code=ERROR_STATUS.get(e.kind, 500),
            detail={"error": e.kind.value, "message": e.message},
        )

    return {
        "message": "Pools assigned successfully",
        "pool": assignment.pool,
        "attendees": assignment.attendee_count,
        "meeting_id": assignment.meeting.meeting_id if assignment.meeting else None,
        "notifications": assignment.notifications,
    }


@router.post("/{event_id}/trainers")
async def add_trainers_endpoint(
    event_id: int,
    request: AddTrainersRequest,
) -> dict[str, Any]:
    """
    Link trainers to an event.

    For assigned events the new trainers are also registered on the
    existing meeting and sent their link.
    """
    try:
        return await add_event_trainers(event_id, request.trainer_ids)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{event_id}")
async def delete_event_endpoint(event_id: int) -> dict[str, Any]:
    """Delete an event. Refused while it has registrations or pools."""
    try:
        deleted = await delete_event(event_id)
    except EventHasDependentsError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"status": "deleted", "event_id": event_id}
