"""URL utilities for notification templates."""

import logging

import httpx

logger = logging.getLogger(__name__)

TINYURL_API_URL = "https://tinyurl.com/api-create.php"
SHORTEN_TIMEOUT_SECONDS = 10.0


def _create_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=SHORTEN_TIMEOUT_SECONDS)


async def shorten_link(url: str) -> str:
    """
    Shorten a URL with TinyURL.

    Meeting join links carry long tokens that get cut by WhatsApp template
    limits, so they are shortened before sending.

    Returns:
        The short URL, or the original URL if shortening fails
    """
    try:
        async with _create_client() as client:
            response = await client.get(TINYURL_API_URL, params={"url": url})
            response.raise_for_status()
        short_url = response.text.strip()
        if not short_url.startswith("http"):
            raise ValueError(f"Unexpected TinyURL response: {short_url[:100]}")
        logger.info(f"URL shortened: {url[:30]}... -> {short_url}")
        return short_url
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Error shortening URL, using original: {e}")
        return url


def build_event_dashboard_path(event_id: int) -> str:
    """
    Path suffix for the admin dashboard button of escalation messages.

    The template's URL button holds the base admin URL; only the event
    part is dynamic.
    """
    return str(event_id)
