"""Tests for database URL handling."""

import pytest

from core.database import _database_url, get_sync_database_url, is_configured


class TestDatabaseUrl:
    def test_async_driver_from_plain_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/events")

        assert _database_url("postgresql+asyncpg://") == "postgresql+asyncpg://u:p@db:5432/events"

    def test_sync_url_strips_asyncpg(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db:5432/events")

        assert get_sync_database_url() == "postgresql://u:p@db:5432/events"

    def test_missing_url_raises(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        assert not is_configured()
        with pytest.raises(ValueError):
            get_sync_database_url()
