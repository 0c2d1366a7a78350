"""WhatsApp Cloud API delivery channel (template messages)."""

import logging
import os
import re

import httpx

from core.config import get_default_country_code
from core.notifications.limits import (
    truncate_button_text,
    truncate_header,
    truncate_template_param,
    truncate_url,
)

logger = logging.getLogger(__name__)

GRAPH_API_VERSION = "v18.0"
REQUEST_TIMEOUT_SECONDS = 10.0


class WhatsAppError(Exception):
    """A template message could not be delivered to the WhatsApp API."""


def is_whatsapp_configured() -> bool:
    """Check if WhatsApp Cloud API credentials are configured."""
    return bool(os.environ.get("WHATSAPP_TOKEN") and os.environ.get("WHATSAPP_PHONE_NUMBER_ID"))


def _messages_url() -> str:
    phone_number_id = os.environ.get("WHATSAPP_PHONE_NUMBER_ID", "")
    return f"https://graph.facebook.com/{GRAPH_API_VERSION}/{phone_number_id}/messages"


def _create_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)


def normalize_phone_number(mobile_number: str, country_code: str | None = None) -> str:
    """
    Normalize a stored mobile number to the digits-only international form.

    Bare 10-digit numbers get the default country code prepended;
    anything longer is assumed to carry its own.

    Examples:
        "98765 43210"     -> "919876543210"
        "+91-9876543210"  -> "919876543210"
    """
    digits = re.sub(r"\D", "", mobile_number or "")
    if len(digits) == 10:
        digits = (country_code or get_default_country_code()) + digits
    return digits


def build_template_payload(
    recipient: str,
    template_name: str,
    body_params: list[str],
    header_params: list[str] | None = None,
    button: dict | None = None,
    language_code: str = "en",
) -> dict:
    """
    Build the Graph API request body for a template message.

    Every parameter is truncated to its component's limit.
    """
    components = []
    if header_params:
        components.append(
            {
                "type": "header",
                "parameters": [
                    {"type": "text", "text": truncate_header(p)} for p in header_params
                ],
            }
        )
    if body_params:
        components.append(
            {
                "type": "body",
                "parameters": [
                    {"type": "text", "text": truncate_template_param(p)}
                    for p in body_params
                ],
            }
        )
    if button:
        sub_type = button.get("sub_type", "url")
        truncate = truncate_url if sub_type == "url" else truncate_button_text
        components.append(
            {
                "type": "button",
                "sub_type": sub_type,
                "index": button.get("index", 0),
                "parameters": [{"type": "text", "text": truncate(button["text"])}],
            }
        )

    template: dict = {"name": template_name, "language": {"code": language_code}}
    if components:
        template["components"] = components

    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": normalize_phone_number(recipient),
        "type": "template",
        "template": template,
    }


async def send_template(
    recipient: str,
    template_name: str,
    body_params: list[str],
    header_params: list[str] | None = None,
    button: dict | None = None,
    language_code: str = "en",
) -> str | None:
    """
    Send a WhatsApp template message.

    Args:
        recipient: Mobile number in any common format
        template_name: Approved WhatsApp template name
        body_params: Ordered body placeholder values
        header_params: Ordered header placeholder values
        button: Dynamic button parameter {"sub_type", "index", "text"}
        language_code: Template language

    Returns:
        WhatsApp message ID (the delivery acknowledgement), if returned

    Raises:
        WhatsAppError: If not configured, or the API call fails
    """
    if not is_whatsapp_configured():
        raise WhatsAppError("WhatsApp not configured (WHATSAPP_TOKEN not set)")

    payload = build_template_payload(
        recipient,
        template_name,
        body_params,
        header_params=header_params,
        button=button,
        language_code=language_code,
    )

    try:
        async with _create_client() as client:
            response = await client.post(
                _messages_url(),
                json=payload,
                headers={"Authorization": f"Bearer {os.environ['WHATSAPP_TOKEN']}"},
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise WhatsAppError(
            f"WhatsApp API error {e.response.status_code} for template "
            f"{template_name}: {e.response.text}"
        ) from e
    except httpx.HTTPError as e:
        raise WhatsAppError(f"WhatsApp request failed for template {template_name}: {e}") from e

    messages = response.json().get("messages") or []
    message_id = messages[0].get("id") if messages else None
    logger.info(f"Sent WhatsApp template {template_name} to {payload['to']} ({message_id})")
    return message_id
