"""Tests for notification dispatcher."""

import pytest
from unittest.mock import AsyncMock, patch

from core.enums import NotificationReferenceType
from core.notifications.channels.whatsapp import WhatsAppError


class TestSendNotification:
    @pytest.mark.asyncio
    async def test_renders_and_sends_template(self):
        """Context values should reach the WhatsApp template in order."""
        from core.notifications.dispatcher import send_notification

        mock_send = AsyncMock(return_value="wamid.1")

        with patch("core.notifications.dispatcher.send_template", mock_send), \
             patch("core.notifications.dispatcher.log_notification", AsyncMock()):
            message_id = await send_notification(
                "9876500001",
                "same_day_reminder_user",
                {"event_title": "Sunrise Yoga", "meet_link": "https://tinyurl.com/x"},
                user_id=11,
            )

        assert message_id == "wamid.1"
        args, kwargs = mock_send.call_args
        assert args == ("9876500001", "user_reminder_2", ["Sunrise Yoga", "https://tinyurl.com/x"])
        assert kwargs["button"] is None

    @pytest.mark.asyncio
    async def test_logs_successful_send(self):
        from core.notifications.dispatcher import send_notification

        mock_log = AsyncMock()

        with patch("core.notifications.dispatcher.send_template", AsyncMock(return_value="wamid.2")), \
             patch("core.notifications.dispatcher.log_notification", mock_log):
            await send_notification(
                "9876500099",
                "first_touch_reminder_trainer",
                {},
                trainer_id=21,
                reference_type=NotificationReferenceType.event,
                reference_id=1,
            )

        mock_log.assert_awaited_once()
        kwargs = mock_log.call_args.kwargs
        assert kwargs["success"] is True
        assert kwargs["trainer_id"] == 21
        assert kwargs["provider_message_id"] == "wamid.2"
        assert kwargs["reference_type"] == NotificationReferenceType.event
        assert kwargs["reference_id"] == 1

    @pytest.mark.asyncio
    async def test_failure_is_logged_then_raised(self):
        """Callers decide how to isolate failures, so the error propagates."""
        from core.notifications.dispatcher import send_notification

        mock_log = AsyncMock()

        with patch(
            "core.notifications.dispatcher.send_template",
            AsyncMock(side_effect=WhatsAppError("WhatsApp API error 400")),
        ), patch("core.notifications.dispatcher.log_notification", mock_log):
            with pytest.raises(WhatsAppError):
                await send_notification("9876500001", "first_touch_reminder_user", {}, user_id=11)

        kwargs = mock_log.call_args.kwargs
        assert kwargs["success"] is False
        assert "400" in kwargs["error_message"]

    @pytest.mark.asyncio
    async def test_missing_context_raises_before_sending(self):
        from core.notifications.dispatcher import send_notification

        mock_send = AsyncMock()

        with patch("core.notifications.dispatcher.send_template", mock_send):
            with pytest.raises(KeyError):
                await send_notification("9876500001", "meeting_ready_user", {"event_title": "x"})

        mock_send.assert_not_awaited()


class TestLogNotification:
    @pytest.mark.asyncio
    async def test_skips_without_database(self):
        from core.notifications.dispatcher import log_notification

        with patch("core.database.is_configured", return_value=False), \
             patch("core.database.get_connection") as mock_conn:
            await log_notification("9876500001", "meeting_ready_user", success=True)

        mock_conn.assert_not_called()
