"""
API key authentication for the scheduler trigger endpoints.

Triggers are called by cron services and admin tooling, not browsers, so a
shared key in the X-API-Key header is all they carry.
"""

import hmac

from fastapi import Header, HTTPException

from core.config import get_scheduler_api_key


async def require_api_key(x_api_key: str | None = Header(None)) -> None:
    """
    FastAPI dependency that rejects requests without the scheduler API key.

    Raises:
        HTTPException: 503 if no key is configured, 401 if the key is
            missing or wrong
    """
    expected = get_scheduler_api_key()
    if not expected:
        raise HTTPException(status_code=503, detail="SCHEDULER_API_KEY not configured")

    if not x_api_key or not hmac.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
