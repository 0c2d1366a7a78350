"""Tests for free-text event time parsing."""

from datetime import datetime

import pytz

from core.event_time import (
    format_event_date,
    meeting_start,
    parse_event_time,
    parse_start_hour,
)


class TestParseEventTime:
    """Test parse_event_time() with well-formed and messy input."""

    def test_am_to_pm_range(self):
        result = parse_event_time("10:00 AM - 2:00 PM")

        assert (result.start_hour, result.start_minute) == (10, 0)
        assert (result.end_hour, result.end_minute) == (14, 0)
        assert result.duration_minutes == 240
        assert result.parsed is True

    def test_minutes_are_kept(self):
        result = parse_event_time("6:30 AM - 7:45 AM")

        assert (result.start_hour, result.start_minute) == (6, 30)
        assert (result.end_hour, result.end_minute) == (7, 45)
        assert result.duration_minutes == 75

    def test_missing_periods_default_start_am_end_pm(self):
        """Bare hours read as a morning start and an afternoon end."""
        result = parse_event_time("10 - 1")

        assert result.start_hour == 10
        assert result.end_hour == 13
        assert result.duration_minutes == 180

    def test_twelve_am_is_midnight_and_twelve_pm_is_noon(self):
        result = parse_event_time("12:00 AM - 12:30 PM")

        assert result.start_hour == 0
        assert (result.end_hour, result.end_minute) == (12, 30)

    def test_lowercase_periods(self):
        result = parse_event_time("9am-11am")

        assert result.start_hour == 9
        assert result.end_hour == 11

    def test_empty_string_falls_back_to_defaults(self):
        result = parse_event_time("")

        assert (result.start_hour, result.start_minute) == (10, 0)
        assert (result.end_hour, result.end_minute) == (11, 0)
        assert result.duration_minutes == 60
        assert result.parsed is False

    def test_none_falls_back_to_defaults(self):
        result = parse_event_time(None)

        assert result.duration_minutes == 60
        assert result.parsed is False

    def test_no_dash_falls_back_to_defaults(self):
        result = parse_event_time("10:00 AM")

        assert (result.start_hour, result.end_hour) == (10, 11)
        assert result.parsed is False

    def test_unparseable_side_uses_its_own_default(self):
        result = parse_event_time("7:00 AM - late")

        assert result.start_hour == 7
        assert (result.end_hour, result.end_minute) == (11, 0)
        assert result.parsed is False

    def test_out_of_range_clock_is_a_miss(self):
        result = parse_event_time("25:00 - 26:00")

        assert (result.start_hour, result.end_hour) == (10, 11)

    def test_range_crossing_midnight_wraps(self):
        result = parse_event_time("11:00 PM - 1:00 AM")

        assert result.start_hour == 23
        assert result.end_hour == 1
        assert result.duration_minutes == 120


class TestParseStartHour:
    """Test parse_start_hour() used by the reminder window gate."""

    def test_morning_start(self):
        assert parse_start_hour("09:00 AM - 10:00 AM") == 9

    def test_afternoon_start(self):
        assert parse_start_hour("03:00 PM - 04:00 PM") == 15

    def test_start_without_range(self):
        assert parse_start_hour("5 PM") == 17

    def test_missing_period_is_am(self):
        assert parse_start_hour("7 - 8") == 7

    def test_unparseable_returns_none(self):
        assert parse_start_hour("morning session") is None
        assert parse_start_hour("") is None
        assert parse_start_hour(None) is None


class TestMeetingStart:
    """Test combining the event day with the parsed start time."""

    def test_uses_local_calendar_day(self):
        tz = pytz.timezone("Asia/Kolkata")
        # Midnight IST on 5 March is still 4 March in UTC
        event_date = tz.localize(datetime(2026, 3, 5)).astimezone(pytz.utc)

        start = meeting_start(event_date, parse_event_time("6:30 AM - 7:30 AM"), "Asia/Kolkata")

        assert start.tzinfo is not None
        assert (start.year, start.month, start.day) == (2026, 3, 5)
        assert (start.hour, start.minute) == (6, 30)
        assert start.utcoffset().total_seconds() == 5.5 * 3600

    def test_naive_date_taken_as_local(self):
        start = meeting_start(
            datetime(2026, 3, 5), parse_event_time("5 PM - 6 PM"), "Asia/Kolkata"
        )

        assert (start.day, start.hour) == (5, 17)


class TestFormatEventDate:
    def test_day_and_month_name(self):
        tz = pytz.timezone("Asia/Kolkata")
        event_date = tz.localize(datetime(2026, 3, 5)).astimezone(pytz.utc)

        assert format_event_date(event_date, "Asia/Kolkata") == "05 March"
