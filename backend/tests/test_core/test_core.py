"""
Tests for configuration, exceptions, token handling, database sessions
and container wiring.
"""

import asyncio
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from sales_tracker.core.config import Settings
from sales_tracker.core.container import SimpleContainer
from sales_tracker.core.database import get_db_session_context
from sales_tracker.core.exceptions import (
    ErrorCategory,
    InvalidSessionDataException,
    NavigationTimeoutException,
    SessionExpiredException,
    SessionRequiredException,
)
from sales_tracker.core.security import security_manager
from sales_tracker.models.scraper_session import ScraperSession
from sales_tracker.repositories.session_repository import SessionRepository


@pytest.mark.unit
class TestSettings:
    """Test Settings defaults and derived paths."""

    def test_scraper_defaults(self):
        settings = Settings()

        assert settings.SCRAPER_NAVIGATION_TIMEOUT == 30
        assert settings.SCRAPER_MIN_DELAY == 2.0
        assert settings.SCRAPER_MAX_DELAY == 4.0
        assert settings.INTERACTIVE_LOGIN_TIMEOUT == 300
        assert settings.SCRAPER_SESSION_TTL_DAYS == 30

    def test_cache_files(self, tmp_path):
        settings = Settings(SCRAPER_CACHE_DIR=tmp_path)

        assert settings.session_file == tmp_path / "linkedin-session.json"
        assert settings.legacy_cookies_file == tmp_path / "linkedin-cookies.json"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RENDER", "true")
        monkeypatch.setenv("SCRAPER_CACHE_DIR", "/tmp/scraper-cache")

        settings = Settings()

        assert settings.RENDER is True
        assert settings.SCRAPER_CACHE_DIR == Path("/tmp/scraper-cache")

    def test_cors_lists(self):
        settings = Settings(CORS_ORIGINS="http://a.test, http://b.test")

        assert settings.get_cors_origins_list() == ["http://a.test", "http://b.test"]


@pytest.mark.unit
class TestExceptions:
    """Test scraper exception messages and metadata."""

    def test_session_required(self):
        exc = SessionRequiredException()

        assert exc.user_message == (
            "LinkedIn authentication required. "
            "Please upload your LinkedIn cookies at /linkedin-auth.html"
        )
        assert exc.http_status == 424
        assert exc.category is ErrorCategory.CONFIGURATION

    def test_session_expired_default_and_reason(self):
        assert SessionExpiredException().message == (
            "LinkedIn authentication expired or invalid. Please re-upload your LinkedIn cookies."
        )
        assert SessionExpiredException("Login page shown.").message == (
            "LinkedIn authentication expired or invalid. Login page shown."
        )

    def test_timeout_keeps_technical_message(self):
        exc = NavigationTimeoutException("page navigation", 30)

        assert "30s" in exc.message
        assert exc.user_message.startswith("Request timed out.")

    def test_to_dict(self):
        payload = InvalidSessionDataException().to_dict()

        assert payload["error_code"] == "INVALID_SESSION_DATA"
        assert payload["category"] == "validation"
        assert payload["message"].startswith("Invalid cookies format.")
        assert "timestamp" in payload


@pytest.mark.unit
class TestSecurityManager:
    """Test JWT round trips."""

    def test_token_round_trip(self):
        token = security_manager.create_access_token({"sub": "user-1", "scopes": ["admin"]})

        payload = security_manager.verify_token(token)

        assert payload["sub"] == "user-1"
        assert payload["scopes"] == ["admin"]

    def test_expired_token_rejected(self):
        token = security_manager.create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(HTTPException) as exc_info:
            security_manager.verify_token(token)

        assert exc_info.value.status_code == 401

    def test_garbage_token_rejected(self):
        with pytest.raises(HTTPException):
            security_manager.verify_token("not-a-jwt")


@pytest.mark.database
@pytest.mark.unit
class TestDatabaseSessionContext:
    """Test get_db_session_context transactions."""

    async def test_commits_on_success(self, db_manager):
        async with get_db_session_context(db_manager) as session:
            session.add(ScraperSession(user_id="user-1", cookies=[{"name": "li_at", "value": "x"}]))

        assert await SessionRepository(db_manager).get_by_owner("user-1") is not None

    async def test_rolls_back_on_error(self, db_manager):
        with pytest.raises(RuntimeError):
            async with get_db_session_context(db_manager) as session:
                session.add(ScraperSession(user_id="user-1", cookies=[{"name": "li_at", "value": "x"}]))
                await session.flush()
                raise RuntimeError("abort")

        assert await SessionRepository(db_manager).get_by_owner("user-1") is None


@pytest.mark.unit
class TestContainer:
    """Test SimpleContainer initialization."""

    async def test_concurrent_initialize_builds_once(self, test_settings):
        async def slow_init():
            await asyncio.sleep(0.01)

        manager = MagicMock()
        manager.init_database = AsyncMock(side_effect=slow_init)
        manager.create_tables = AsyncMock()
        manager.close_connections = AsyncMock()
        container = SimpleContainer()

        with patch("sales_tracker.core.container.DatabaseManager", return_value=manager) as factory:
            await asyncio.gather(
                container.initialize(settings=test_settings),
                container.initialize(settings=test_settings),
            )

        assert factory.call_count == 1
        assert manager.init_database.await_count == 1
        assert container.initialized is True
        assert container.get("db_manager") is manager

        await container.shutdown()
        manager.close_connections.assert_awaited_once()
