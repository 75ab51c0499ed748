"""
Unit Tests for application configuration.

These tests verify:
1. Database URLs select the async driver
2. Invalid log formats are rejected
"""

import pytest
from pydantic import ValidationError

from creditmind.core.config import Settings, async_driver_url


class TestDatabaseUrl:

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgres://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgresql+asyncpg://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_async_driver_url(self, url, expected):
        assert async_driver_url(url) == expected

    def test_settings_expose_async_url(self):
        settings = Settings(database_url="postgres://u:p@db/app")

        assert settings.async_database_url == "postgresql+asyncpg://u:p@db/app"


class TestLogFormat:

    def test_console_accepted(self):
        assert Settings(log_format="console").log_format == "console"

    def test_unknown_format_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_format="xml")
