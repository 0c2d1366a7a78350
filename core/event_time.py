"""
Parsing of the free-text event time range ("10:00 AM - 2:00 PM").

Admins type these by hand, so parsing never raises: anything that does not
match falls back to 10:00-11:00.
"""

import re
from dataclasses import dataclass
from datetime import datetime, time

import pytz

DEFAULT_START = (10, 0)
DEFAULT_END = (11, 0)

_CLOCK_PATTERN = re.compile(r"(\d+):?(\d*)\s*([AaPp][Mm])?")


@dataclass(frozen=True)
class EventTimeRange:
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    parsed: bool = True

    @property
    def duration_minutes(self) -> int:
        """
        Minutes from start to end.

        A range that ends at or before its start is taken to cross midnight.
        """
        minutes = (self.end_hour * 60 + self.end_minute) - (
            self.start_hour * 60 + self.start_minute
        )
        if minutes <= 0:
            minutes += 24 * 60
        return minutes

    @property
    def start(self) -> time:
        return time(self.start_hour, self.start_minute)


def _parse_clock(part: str, default_period: str) -> tuple[int, int] | None:
    """Parse "2:30 PM" / "14" style text into 24-hour (hour, minute)."""
    match = _CLOCK_PATTERN.search(part)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    period = (match.group(3) or default_period).upper()

    if period == "PM" and hour < 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0

    if hour > 23 or minute > 59:
        return None
    return hour, minute


def parse_event_time(event_time: str | None) -> EventTimeRange:
    """
    Parse "<start> [AM|PM] - <end> [AM|PM]" into 24-hour start and end.

    The start defaults to AM and the end to PM when no period is given.
    Each side that fails to parse keeps its default (10:00 / 11:00).
    """
    if not event_time or "-" not in event_time:
        return EventTimeRange(*DEFAULT_START, *DEFAULT_END, parsed=False)

    start_part, end_part = (p.strip() for p in event_time.split("-", 1))
    start = _parse_clock(start_part, "AM")
    end = _parse_clock(end_part, "PM")

    return EventTimeRange(
        *(start or DEFAULT_START),
        *(end or DEFAULT_END),
        parsed=start is not None and end is not None,
    )


def parse_start_hour(event_time: str | None) -> int | None:
    """
    Start hour (0-23) of an event time string, or None if it can't be read.

    Only the text before the first "-" is considered, so a bare "9 AM"
    works as well.
    """
    if not event_time:
        return None
    parsed = _parse_clock(event_time.split("-", 1)[0].strip(), "AM")
    return parsed[0] if parsed else None


def meeting_start(event_date: datetime, time_range: EventTimeRange, tz_name: str) -> datetime:
    """
    Combine the event's local calendar day with the parsed start time.

    Returns a timezone-aware datetime in tz_name.
    """
    tz = pytz.timezone(tz_name)
    if event_date.tzinfo is not None:
        local_day = event_date.astimezone(tz).date()
    else:
        local_day = event_date.date()
    return tz.localize(datetime.combine(local_day, time_range.start))


def format_event_date(event_date: datetime, tz_name: str) -> str:
    """Format an event date for message templates, e.g. "05 March"."""
    if event_date.tzinfo is not None:
        event_date = event_date.astimezone(pytz.timezone(tz_name))
    return event_date.strftime("%d %B")
