"""Tests for registrant name splitting."""

from core.zoom.names import split_display_name


class TestSplitDisplayName:
    def test_two_words(self):
        assert split_display_name("p@example.com", "priya sharma") == ("Priya", "Sharma")

    def test_last_word_is_last_name(self):
        assert split_display_name("a@example.com", "Anna Maria Lopez") == ("Anna maria", "Lopez")

    def test_single_word_gets_default_last_name(self):
        assert split_display_name("r@example.com", "Ravi") == ("Ravi", "User")

    def test_falls_back_to_email_local_part(self):
        assert split_display_name("raj.k@example.com") == ("Raj.k", "User")
        assert split_display_name("raj@example.com", "   ") == ("Raj", "User")
