"""
Notification dispatcher - renders a message type and delivers it over WhatsApp.
"""

import logging

from core.enums import NotificationReferenceType, NotificationStatus
from core.notifications.channels.whatsapp import WhatsAppError, send_template
from core.notifications.templates import render_template

logger = logging.getLogger(__name__)


async def log_notification(
    recipient: str,
    message_type: str,
    success: bool,
    user_id: int | None = None,
    trainer_id: int | None = None,
    provider_message_id: str | None = None,
    error_message: str | None = None,
    reference_type: NotificationReferenceType | None = None,
    reference_id: int | None = None,
) -> None:
    """
    Log a notification attempt to the database.

    Args:
        recipient: WhatsApp number the message was addressed to
        message_type: Message type key from templates.yaml
        success: Whether the notification was sent successfully
        user_id: Database user ID (None for trainers and the operator)
        trainer_id: Database trainer ID (None for users and the operator)
        provider_message_id: WhatsApp message ID on success
        error_message: Error details if failed
        reference_type: Type of entity this notification references
        reference_id: ID of the referenced entity
    """
    from sqlalchemy import insert
    from core.database import get_connection, is_configured
    from core.tables import notification_log

    if not is_configured():
        return

    try:
        async with get_connection() as conn:
            await conn.execute(
                insert(notification_log).values(
                    user_id=user_id,
                    trainer_id=trainer_id,
                    recipient=recipient,
                    message_type=message_type,
                    channel="whatsapp",
                    status=(
                        NotificationStatus.sent if success else NotificationStatus.failed
                    ).value,
                    provider_message_id=provider_message_id,
                    error_message=error_message,
                    reference_type=reference_type,
                    reference_id=reference_id,
                )
            )
            await conn.commit()
    except Exception as e:
        # Don't let logging failures break notification sending
        logger.warning(f"Failed to log notification: {e}")


async def send_notification(
    recipient: str,
    message_type: str,
    context: dict,
    user_id: int | None = None,
    trainer_id: int | None = None,
    reference_type: NotificationReferenceType | None = None,
    reference_id: int | None = None,
) -> str | None:
    """
    Send a templated WhatsApp notification to one recipient.

    Args:
        recipient: Mobile number
        message_type: Message type key from templates.yaml
        context: Template variables
        user_id: Recipient user, for the notification log
        trainer_id: Recipient trainer, for the notification log
        reference_type: Type of entity this notification references
        reference_id: ID of the referenced entity

    Returns:
        WhatsApp message ID

    Raises:
        WhatsAppError: If delivery failed (the attempt is logged first)
        KeyError: If the template needs a variable missing from context
    """
    rendered = render_template(message_type, context)

    try:
        message_id = await send_template(
            recipient,
            rendered.template_name,
            rendered.body_params,
            header_params=rendered.header_params,
            button=rendered.button,
        )
    except WhatsAppError as e:
        await log_notification(
            recipient=recipient,
            message_type=message_type,
            success=False,
            user_id=user_id,
            trainer_id=trainer_id,
            error_message=str(e),
            reference_type=reference_type,
            reference_id=reference_id,
        )
        raise

    await log_notification(
        recipient=recipient,
        message_type=message_type,
        success=True,
        user_id=user_id,
        trainer_id=trainer_id,
        provider_message_id=message_id,
        reference_type=reference_type,
        reference_id=reference_id,
    )
    return message_id
