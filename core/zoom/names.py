"""Registrant name handling for Zoom meeting registration."""

DEFAULT_LAST_NAME = "User"


def split_display_name(email: str, display_name: str | None = None) -> tuple[str, str]:
    """
    Split a display name into Zoom's first_name / last_name fields.

    The last word becomes the last name and everything before it the first
    name. Single-word names get "User" as the last name. Without a display
    name, the local part of the email is used.

    Examples:
        "priya sharma"      -> ("Priya", "Sharma")
        "Anna Maria Lopez"  -> ("Anna maria", "Lopez")
        None, "raj@x.com"   -> ("Raj", "User")
    """
    full_name = (display_name or "").strip() or email.split("@")[0]
    parts = full_name.split()

    if len(parts) > 1:
        first_name = " ".join(parts[:-1])
        last_name = parts[-1]
    else:
        first_name = parts[0] if parts else email
        last_name = DEFAULT_LAST_NAME

    return first_name.capitalize(), last_name.capitalize()
