"""Tests for WhatsApp character limit truncation."""

from core.notifications.limits import (
    CHARACTER_LIMITS,
    truncate_button_text,
    truncate_header,
    truncate_text,
    truncate_url,
)


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("Sunrise Yoga", 60) == "Sunrise Yoga"

    def test_exact_limit_unchanged(self):
        assert truncate_text("a" * 20, 20) == "a" * 20

    def test_long_text_gets_ellipsis_within_limit(self):
        result = truncate_text("a" * 25, 20)

        assert len(result) == 20
        assert result == "a" * 17 + "..."

    def test_none_and_empty(self):
        assert truncate_text(None, 10) == ""
        assert truncate_text("", 10) == ""


class TestComponentLimits:
    def test_header(self):
        assert len(truncate_header("h" * 100)) == CHARACTER_LIMITS["header_text"] == 60

    def test_button(self):
        assert len(truncate_button_text("Open the dashboard now")) == 20

    def test_url(self):
        long_url = "https://example.com/" + "x" * 3000

        assert len(truncate_url(long_url)) == 2000
