"""Event lifecycle operations outside the scheduling jobs."""

import logging

from .database import get_transaction
from .errors import EventHasDependentsError
from .queries.events import count_event_dependents, delete_event_row

logger = logging.getLogger(__name__)


async def delete_event(event_id: int) -> bool:
    """
    Delete an event that nobody registered for.

    Trainer links are removed with it. Registrations and pools pin the
    event in place.

    Returns:
        False if the event does not exist

    Raises:
        EventHasDependentsError: If the event has registrations or pools
    """
    async with get_transaction() as conn:
        dependents = await count_event_dependents(conn, event_id)
        if dependents["registrations"] or dependents["pools"]:
            raise EventHasDependentsError(
                f"Event {event_id} has {dependents['registrations']} registrations "
                f"and {dependents['pools']} pools"
            )
        deleted = await delete_event_row(conn, event_id)

    if deleted:
        logger.info(f"Deleted event {event_id}")
    return deleted
