"""
Notification system for sending WhatsApp template messages.

Public API:
    send_notification(recipient, message_type, context) - Send immediately

High-level actions:
    notify_meeting_ready(...) - Meeting links after pool assignment
    notify_trainer_added(...) - Meeting link for a trainer added later
    notify_assignment_failed(error) - Operator escalation
"""

from .dispatcher import send_notification
from .actions import (
    notify_meeting_ready,
    notify_trainer_added,
    notify_assignment_failed,
)

__all__ = [
    # Low-level
    "send_notification",
    # High-level actions
    "notify_meeting_ready",
    "notify_trainer_added",
    "notify_assignment_failed",
]
