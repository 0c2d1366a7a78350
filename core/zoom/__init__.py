"""Zoom meeting provider: meetings with per-participant registration links."""

from .client import (
    MeetingData,
    ZoomError,
    add_participants,
    create_meeting,
    delete_meeting,
    extract_meeting_id,
    is_zoom_configured,
)
from .names import split_display_name

__all__ = [
    "MeetingData",
    "ZoomError",
    "add_participants",
    "create_meeting",
    "delete_meeting",
    "extract_meeting_id",
    "is_zoom_configured",
    "split_display_name",
]
