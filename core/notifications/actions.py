"""
High-level notification actions.

These functions are called by the scheduling logic (pool assignment,
trainer additions) to send notifications. They build template context
from event rows and isolate failures per recipient.
"""

import logging

import sentry_sdk

from core.config import get_event_timezone, get_operator_phone
from core.enums import NotificationReferenceType
from core.event_time import format_event_date
from core.notifications.dispatcher import send_notification
from core.notifications.urls import build_event_dashboard_path, shorten_link

logger = logging.getLogger(__name__)

DEFAULT_TRAINER_NAME = "Your trainer"


def _event_context(event: dict) -> dict:
    return {
        "event_title": event["title"],
        "event_date": format_event_date(event["event_date"], get_event_timezone()),
        "event_time": event.get("event_time") or "",
    }


async def _send_meeting_ready(
    recipient: dict,
    message_type: str,
    first_touch_type: str,
    context: dict,
    event_id: int,
    user_id: int | None = None,
    trainer_id: int | None = None,
) -> None:
    """Send the meeting-ready message, then the first-touch reminder."""
    await send_notification(
        recipient["mobile_number"],
        message_type,
        context,
        user_id=user_id,
        trainer_id=trainer_id,
        reference_type=NotificationReferenceType.event,
        reference_id=event_id,
    )

    try:
        await send_notification(
            recipient["mobile_number"],
            first_touch_type,
            {},
            user_id=user_id,
            trainer_id=trainer_id,
            reference_type=NotificationReferenceType.event,
            reference_id=event_id,
        )
    except Exception as e:
        # Don't fail the recipient if only the follow-up reminder fails
        logger.warning(f"First-touch reminder failed for {recipient['mobile_number']}: {e}")


async def notify_meeting_ready(
    event: dict,
    registrants: list[dict],
    trainers: list[dict],
    meeting,
) -> dict:
    """
    Send meeting links to everyone invited to a freshly assigned event.

    Registrants and trainers only get a message when the meeting returned a
    personal join link for their email. Each recipient is isolated: a
    failed send is logged and the loop moves on.

    Args:
        event: Event row
        registrants: Registrant rows (user_id, name, email, mobile_number)
        trainers: Trainer rows (trainer_id, name, email, mobile_number)
        meeting: MeetingData with participant_urls keyed by email

    Returns:
        Dict with counts: sent, failed, skipped
    """
    counts = {"sent": 0, "failed": 0, "skipped": 0}
    base_context = _event_context(event)
    trainer_name = trainers[0]["name"] if trainers else DEFAULT_TRAINER_NAME
    participant_urls = meeting.participant_urls if meeting else {}

    for registrant in registrants:
        link = participant_urls.get(registrant.get("email") or "")
        if not link or not registrant.get("mobile_number"):
            counts["skipped"] += 1
            continue

        try:
            await _send_meeting_ready(
                registrant,
                "meeting_ready_user",
                "first_touch_reminder_user",
                {
                    **base_context,
                    "trainer_name": trainer_name,
                    "meet_link": await shorten_link(link),
                },
                event["event_id"],
                user_id=registrant["user_id"],
            )
            counts["sent"] += 1
        except Exception as e:
            logger.error(
                f"Failed to send meeting link to user {registrant['user_id']} "
                f"for event {event['event_id']}: {e}"
            )
            counts["failed"] += 1

    for trainer in trainers:
        link = participant_urls.get(trainer.get("email") or "")
        if not link or not trainer.get("mobile_number"):
            counts["skipped"] += 1
            continue

        try:
            await notify_trainer_added(event, trainer, link)
            counts["sent"] += 1
        except Exception as e:
            logger.error(
                f"Failed to send meeting link to trainer {trainer['trainer_id']} "
                f"for event {event['event_id']}: {e}"
            )
            counts["failed"] += 1

    logger.info(
        f"Meeting-ready notifications for event {event['event_id']}: "
        f"{counts['sent']} sent, {counts['failed']} failed, {counts['skipped']} skipped"
    )
    return counts


async def notify_trainer_added(event: dict, trainer: dict, meet_link: str) -> None:
    """
    Send one trainer their meeting link and first-touch reminder.

    Used after assignment and when trainers join an already assigned event.

    Raises:
        WhatsAppError: If the meeting-ready message could not be sent
    """
    await _send_meeting_ready(
        trainer,
        "meeting_ready_trainer",
        "first_touch_reminder_trainer",
        {
            **_event_context(event),
            "trainer_name": trainer["name"],
            "meet_link": await shorten_link(meet_link),
        },
        event["event_id"],
        trainer_id=trainer["trainer_id"],
    )


async def notify_assignment_failed(error) -> bool:
    """
    Escalate a pool assignment failure to the operator.

    This is the last-resort channel, so its own failures are logged and
    swallowed.

    Args:
        error: AssignmentError carrying the event snapshot

    Returns:
        True if the escalation was sent
    """
    snapshot = getattr(error, "event", None)
    if snapshot is None:
        return False

    operator_phone = get_operator_phone()
    if not operator_phone:
        logger.warning(
            f"ADMIN_PHONE_NUMBER not set, cannot escalate failure for event {snapshot.event_id}"
        )
        return False

    try:
        await send_notification(
            operator_phone,
            "assignment_error",
            {
                "event_title": snapshot.title,
                "event_date": format_event_date(snapshot.event_date, get_event_timezone()),
                "event_time": snapshot.event_time or "",
                "error_message": getattr(error, "message", None) or str(error),
                "dashboard_path": build_event_dashboard_path(snapshot.event_id),
            },
            reference_type=NotificationReferenceType.event,
            reference_id=snapshot.event_id,
        )
        return True
    except Exception as e:
        logger.error(f"Error sending pool assignment error notification: {e}")
        sentry_sdk.capture_exception(e)
        return False
