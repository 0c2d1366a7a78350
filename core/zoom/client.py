"""
Zoom REST API client (server-to-server OAuth).

Meetings are created with registration enabled so every participant gets a
personal join link tied to their email.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field

import httpx
import sentry_sdk

from .names import split_display_name

logger = logging.getLogger(__name__)

ZOOM_OAUTH_URL = "https://zoom.us/oauth/token"
ZOOM_API_BASE = "https://api.zoom.us/v2"
REQUEST_TIMEOUT_SECONDS = 30.0

MEETING_SETTINGS = {
    "host_video": True,
    "participant_video": True,
    "join_before_host": True,
    "mute_upon_entry": True,
    "waiting_room": False,
    "meeting_authentication": True,
    "registrants_email_notification": True,
    "registrants_confirmation_email": True,
    "registration_type": 2,
    "approval_type": 0,  # Registrants are approved automatically
    "use_pmi": False,
    "enforce_login": True,
    "auto_recording": "none",
    "require_registration_email": True,
    "allow_multiple_devices": False,
}


class ZoomError(Exception):
    """A Zoom API call failed."""


@dataclass
class MeetingData:
    """A created meeting and the personal join links obtained for it."""

    shared_url: str
    meeting_id: str
    participant_urls: dict[str, str] = field(default_factory=dict)


def is_zoom_configured() -> bool:
    """Check if Zoom server-to-server OAuth credentials are configured."""
    return all(
        os.environ.get(name)
        for name in ("ZOOM_ACCOUNT_ID", "ZOOM_CLIENT_ID", "ZOOM_CLIENT_SECRET")
    )


def _create_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)


def _log_zoom_error(exception: Exception, operation: str) -> None:
    """Log a failed Zoom call with the response body when there is one."""
    detail = str(exception)
    if isinstance(exception, httpx.HTTPStatusError):
        detail = f"{exception.response.status_code} {exception.response.text}"
    logger.error(f"Zoom API error during {operation}: {detail}")
    sentry_sdk.capture_exception(exception)


def extract_meeting_id(meeting_url: str | None) -> str | None:
    """
    Pull the meeting ID out of a Zoom join URL.

    Example:
        "https://us06web.zoom.us/j/81234567890?pwd=abc" -> "81234567890"
    """
    if not meeting_url or "/j/" not in meeting_url:
        return None
    meeting_id = meeting_url.split("/j/", 1)[1].split("?", 1)[0].strip("/")
    return meeting_id or None


async def get_access_token(client: httpx.AsyncClient) -> str:
    """
    Fetch an OAuth access token with the account_credentials grant.

    Raises:
        ZoomError: If credentials are missing or the token request fails
    """
    if not is_zoom_configured():
        raise ZoomError("Missing Zoom credentials in environment variables")

    try:
        response = await client.post(
            ZOOM_OAUTH_URL,
            data={
                "grant_type": "account_credentials",
                "account_id": os.environ["ZOOM_ACCOUNT_ID"],
            },
            auth=(os.environ["ZOOM_CLIENT_ID"], os.environ["ZOOM_CLIENT_SECRET"]),
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        _log_zoom_error(e, "get_access_token")
        raise ZoomError(f"Could not get Zoom access token: {e}") from e

    return response.json()["access_token"]


async def _register_participants(
    client: httpx.AsyncClient,
    token: str,
    meeting_id: str,
    identities: list[str],
    display_names: dict[str, str],
) -> dict[str, str]:
    """
    Register each email on the meeting and collect personal join links.

    A participant whose registration fails is looked up among existing
    registrants instead (they may have been registered by an earlier run).
    Participants with neither are left out of the result.
    """
    headers = {"Authorization": f"Bearer {token}"}
    registrants_url = f"{ZOOM_API_BASE}/meetings/{meeting_id}/registrants"
    participant_urls: dict[str, str] = {}

    for email in identities:
        first_name, last_name = split_display_name(email, display_names.get(email))
        try:
            response = await client.post(
                registrants_url,
                json={
                    "email": email,
                    "first_name": first_name,
                    "last_name": last_name,
                    "status": "approved",
                },
                headers=headers,
            )
            join_url = response.json().get("join_url")
            join_url = response.json().get("join_url")
            if join_url:
                participant_urls[email] = join_url
            else:
                logger.warning(f"No join_url in registration response for {email}")
            continue
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error registering participant {email} on meeting {meeting_id}: {e}")

        try:
            response = await client.get(
                registrants_url, params={"email": email}, headers=headers
            )
            response.raise_for_status()
            existing = response.json().get("registrants") or []
            if existing and existing[0].get("join_url"):
                participant_urls[email] = existing[0]["join_url"]
                logger.info(f"Retrieved existing join URL for {email}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Could not retrieve join URL for {email}: {e}")

    return participant_urls


async def create_meeting(
    topic: str,
    start_time: str,
    duration_minutes: int,
    identities: list[str],
    host: str | None,
    display_names: dict[str, str],
) -> MeetingData:
    """
    Create a scheduled Zoom meeting and register every participant.

    Args:
        topic: Meeting title
        start_time: ISO 8601 start time
        duration_minutes: Meeting length
        identities: Participant emails to register
        host: First registrant email, or None; the meeting is owned by the
            OAuth account
        display_names: Email -> full name, for registrant names

    Returns:
        MeetingData; participant_urls holds the registrations that succeeded

    Raises:
        ZoomError: If the token or the meeting itself could not be created
    """
    async with _create_client() as client:
        token = await get_access_token(client)

        payload = {
            "topic": topic,
            "start_time": start_time,
            "duration": duration_minutes,
            "type": 2,  # Scheduled meeting
            "settings": MEETING_SETTINGS,
        }
        try:
            response = await client.post(
                f"{ZOOM_API_BASE}/users/me/meetings",
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            _log_zoom_error(e, "create_meeting")
            raise ZoomError(f"Could not create Zoom meeting: {e}") from e

        data = response.json()
        meeting_id = str(data["id"])
        logger.info(f"Zoom meeting {meeting_id} created for '{topic}' (host {host})")

        try:
            participant_urls = await _register_participants(
                client, token, meeting_id, identities, display_names
            )
        except (Exception, asyncio.CancelledError):
            # The caller never receives this meeting id
            logger.warning(f"Registration on meeting {meeting_id} interrupted, deleting it")
            try:
                await _delete(client, token, meeting_id)
            except ZoomError as e:
                logger.error(f"Failed to delete interrupted meeting {meeting_id}: {e}")
            raise

    if len(participant_urls) < len(identities):
        logger.warning(
            f"Registered {len(participant_urls)}/{len(identities)} participants "
            f"on meeting {meeting_id}"
        )

    return MeetingData(
        shared_url=data.get("join_url") or "",
        meeting_id=meeting_id,
        participant_urls=participant_urls,
    )


async def add_participants(
    meeting_id: str,
    identities: list[str],
    display_names: dict[str, str],
) -> dict[str, str]:
    """
    Register more participants on an existing meeting.

    Returns:
        Email -> personal join URL for the registrations that succeeded

    Raises:
        ZoomError: If no access token could be obtained
    """
    if not identities:
        return {}

    async with _create_client() as client:
        token = await get_access_token(client)
        return await _register_participants(
            client, token, meeting_id, identities, display_names
        )


async def _delete(client: httpx.AsyncClient, token: str, meeting_id: str) -> None:
    try:
        response = await client.delete(
            f"{ZOOM_API_BASE}/meetings/{meeting_id}",
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code != 404:
            response.raise_for_status()
    except httpx.HTTPError as e:
        _log_zoom_error(e, "delete_meeting")
        raise ZoomError(f"Could not delete Zoom meeting {meeting_id}: {e}") from e

    logger.info(f"Zoom meeting {meeting_id} deleted")


async def delete_meeting(meeting_id: str) -> None:
    """
    Delete a meeting.

    A meeting that is already gone (404) counts as deleted.

    Raises:
        ZoomError: If the delete call fails
    """
    async with _create_client() as client:
        token = await get_access_token(client)
        await _delete(client, token, meeting_id)
