"""
Adding trainers to events after the fact.

For an event that already has its pool and meeting, new trainers are
registered on the existing meeting and sent their link. The pool and its
attendees are never recreated.
"""

import logging

import sentry_sdk

from .database import get_connection, get_transaction
from .errors import NotFoundError
from .notifications.actions import notify_trainer_added
from .queries.events import get_event, get_trainers_by_ids, link_trainers
from .queries.pools import get_pools_for_event, set_pool_trainer
from .zoom import add_participants, extract_meeting_id

logger = logging.getLogger(__name__)


async def add_event_trainers(event_id: int, trainer_ids: list[int]) -> dict:
    """
    Link trainers to an event and, if it is assigned, to its meeting.

    Trainers already linked are left alone. Meeting registration and
    notification failures are reported in the result, not raised.

    Args:
        event_id: Event to add trainers to
        trainer_ids: Trainer IDs; existing links are kept

    Returns:
        Dict with event_id, linked (newly linked trainer IDs),
        added_to_meeting, notified and errors

    Raises:
        NotFoundError: If the event does not exist
        ValueError: If any trainer ID is unknown
    """
    result = {
        "event_id": event_id,
        "linked": [],
        "added_to_meeting": [],
        "notified": [],
        "errors": [],
    }

    async with get_transaction() as conn:
        event = await get_event(conn, event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")

        known = await get_trainers_by_ids(conn, trainer_ids)
        unknown = sorted(set(trainer_ids) - {t["trainer_id"] for t in known})
        if unknown:
            raise ValueError(f"Unknown trainer ids: {unknown}")

        result["linked"] = await link_trainers(conn, event_id, trainer_ids)

    if not result["linked"] or not event["pools_assigned"]:
        return result

    new_trainers = [t for t in known if t["trainer_id"] in result["linked"]]

    async with get_connection() as conn:
        event_pools = await get_pools_for_event(conn, event_id)
    pool = next((p for p in event_pools if p.get("meet_link")), None)
    if pool is None:
        result["errors"].append("Event has no pool with a meeting link")
        return result

    meeting_id = extract_meeting_id(pool["meet_link"])
    if meeting_id is None:
        result["errors"].append(f"Could not read meeting id from {pool['meet_link']}")
        return result

    if pool["trainer_id"] is None:
        async with get_transaction() as conn:
            await set_pool_trainer(conn, pool["pool_id"], new_trainers[0]["trainer_id"])

    display_names = {
        t["email"]: t["name"] for t in new_trainers if t.get("email") and "@" in t["email"]
    }
    try:
        participant_urls = await add_participants(meeting_id, list(display_names), display_names)
    except Exception as e:
        logger.error(f"Failed to add trainers to meeting {meeting_id}: {e}")
        sentry_sdk.capture_exception(e)
        result["errors"].append(f"Failed to add trainers to meeting: {e}")
        return result

    for trainer in new_trainers:
        link = participant_urls.get(trainer.get("email") or "")
        if not link:
            continue
        result["added_to_meeting"].append(trainer["trainer_id"])
        if not trainer.get("mobile_number"):
            continue
        try:
            await notify_trainer_added(event, trainer, link)
            result["notified"].append(trainer["trainer_id"])
        except Exception as e:
            logger.error(f"Failed to notify trainer {trainer['trainer_id']}: {e}")
            result["errors"].append(f"Failed to notify trainer {trainer['trainer_id']}: {e}")

    logger.info(
        f"Added trainers {result['added_to_meeting']} to meeting {meeting_id} "
        f"for event {event_id}"
    )
    return result
