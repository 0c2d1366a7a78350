"""
Centralized configuration for the event scheduling backend.

All settings come from environment variables (loaded from .env / .env.local
by the entry points). Getters are functions so tests can patch the
environment without reloading modules.
"""

import os


DEFAULT_EVENT_TIMEZONE = "Asia/Kolkata"
DEFAULT_COUNTRY_CODE = "91"


def is_dev_mode() -> bool:
    """Check if running in development mode (DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def is_production() -> bool:
    """Check if running on Railway (production environment)."""
    return bool(os.environ.get("RAILWAY_ENVIRONMENT"))


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_event_timezone() -> str:
    """
    Timezone events are scheduled in.

    Event dates are calendar days in this zone; "today" and "tomorrow" for
    the scheduler jobs are computed here too.
    """
    return os.getenv("EVENT_TIMEZONE", DEFAULT_EVENT_TIMEZONE)


def get_operator_phone() -> str | None:
    """WhatsApp number that receives pool assignment escalations."""
    return os.getenv("ADMIN_PHONE_NUMBER") or None


def get_default_country_code() -> str:
    """Country calling code prepended to 10-digit mobile numbers."""
    return os.getenv("WHATSAPP_COUNTRY_CODE", DEFAULT_COUNTRY_CODE)


def get_scheduler_api_key() -> str | None:
    """Shared secret expected in the X-API-Key header of trigger endpoints."""
    return os.getenv("SCHEDULER_API_KEY") or None


def is_internal_scheduler_enabled() -> bool:
    """Run the cron triggers inside this process (APScheduler)."""
    return os.getenv("ENABLE_INTERNAL_SCHEDULER", "").lower() in ("true", "1", "yes")


def get_cron_hours() -> dict[str, int]:
    """
    Local hours at which the in-process cron triggers fire.

    Returns:
        {"assign_pools": h, "morning": h, "evening": h}
    """
    return {
        "assign_pools": int(os.getenv("ASSIGN_POOLS_HOUR", "18")),
        "morning": int(os.getenv("MORNING_REMINDER_HOUR", "6")),
        "evening": int(os.getenv("EVENING_REMINDER_HOUR", "12")),
    }


def get_per_event_timeout() -> float:
    """Seconds a job loop waits for one event before moving on."""
    return float(os.getenv("PER_EVENT_TIMEOUT_SECONDS", "60"))


# Required environment variables for production
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("SCHEDULER_API_KEY", "Shared key for scheduler trigger endpoints", False),
    ("ZOOM_ACCOUNT_ID", "Zoom server-to-server OAuth account", False),
    ("ZOOM_CLIENT_ID", "Zoom OAuth client id", False),
    ("ZOOM_CLIENT_SECRET", "Zoom OAuth client secret", False),
    ("WHATSAPP_TOKEN", "WhatsApp Cloud API token", False),
    ("WHATSAPP_PHONE_NUMBER_ID", "WhatsApp sender phone number id", False),
    ("ADMIN_PHONE_NUMBER", "Operator number for escalations", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        value = os.environ.get(name)

        if not value:
            if is_production():
                errors.append(f"  ✗ {name}: Not set ({description})")
            elif required_in_dev or not in_dev:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings
