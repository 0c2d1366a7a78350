"""
WhatsApp character limits for dynamic message content.

Values longer than a limit are truncated with an ellipsis; the API would
otherwise reject the whole message.
"""

CHARACTER_LIMITS = {
    "header_text": 60,
    "footer_text": 60,
    "button_text": 20,
    "template_parameter": 1024,
    "url": 2000,
}


def truncate_text(text: str | None, limit: int) -> str:
    """
    Truncate text to limit characters, ending in "..." when shortened.

    Returns "" for None or empty input.
    """
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def truncate_header(text: str | None) -> str:
    return truncate_text(text, CHARACTER_LIMITS["header_text"])


def truncate_button_text(text: str | None) -> str:
    return truncate_text(text, CHARACTER_LIMITS["button_text"])


def truncate_template_param(text: str | None) -> str:
    return truncate_text(text, CHARACTER_LIMITS["template_parameter"])


def truncate_url(text: str | None) -> str:
    return truncate_text(text, CHARACTER_LIMITS["url"])
