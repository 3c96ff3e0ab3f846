"""
Tests for the scraper session repository and model.
"""

from datetime import datetime, timedelta, timezone

import pytest

from sales_tracker.models.scraper_session import ScraperSession


@pytest.mark.database
@pytest.mark.unit
class TestSessionRepository:
    """Test SessionRepository."""

    async def test_upsert_creates_row(self, session_repository, sample_cookies):
        row = await session_repository.upsert_for_owner(
            "user-1", sample_cookies, user_agent="UA", platform="MacIntel"
        )

        assert row is not None
        assert row.id is not None
        assert row.user_id == "user-1"
        assert row.site == "linkedin"
        assert row.cookies == sample_cookies

    async def test_upsert_updates_in_place(self, session_repository, sample_cookies):
        first = await session_repository.upsert_for_owner("user-1", sample_cookies, user_agent="old")
        second = await session_repository.upsert_for_owner("user-1", sample_cookies[:1], user_agent="new")

        assert first.id == second.id
        assert second.user_agent == "new"
        assert len(second.cookies) == 1

    async def test_get_by_id(self, session_repository, sample_cookies):
        row = await session_repository.upsert_for_owner("user-1", sample_cookies)

        fetched = await session_repository.get_by_id(row.id)

        assert fetched.user_id == "user-1"

    async def test_get_active_skips_expired(self, session_repository, sample_cookies):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        await session_repository.upsert_for_owner("user-1", sample_cookies, expires_at=past)

        assert await session_repository.get_active_for_owner("user-1") is None
        assert await session_repository.get_by_owner("user-1") is not None

    async def test_get_active_without_expiry(self, session_repository, sample_cookies):
        await session_repository.upsert_for_owner("user-1", sample_cookies, expires_at=None)

        assert await session_repository.get_active_for_owner("user-1") is not None

    async def test_delete_for_owner(self, session_repository, sample_cookies):
        await session_repository.upsert_for_owner("user-1", sample_cookies)

        assert await session_repository.delete_for_owner("user-1") is True
        assert await session_repository.delete_for_owner("user-1") is False
        assert await session_repository.get_by_owner("user-1") is None

    async def test_rows_are_per_site(self, session_repository, sample_cookies):
        linkedin = await session_repository.upsert_for_owner("user-1", sample_cookies, user_agent="LI")
        indeed = await session_repository.upsert_for_owner("user-1", sample_cookies[:1], user_agent="IN", site="indeed")

        assert linkedin.id != indeed.id
        assert (await session_repository.get_by_owner("user-1")).user_agent == "LI"
        assert (await session_repository.get_by_owner("user-1", site="indeed")).user_agent == "IN"
        assert await session_repository.count_for_site() == 1

        assert await session_repository.delete_for_owner("user-1", site="indeed") is True
        assert await session_repository.get_by_owner("user-1") is not None

    async def test_count_for_site(self, session_repository, sample_cookies):
        assert await session_repository.count_for_site() == 0

        await session_repository.upsert_for_owner("user-1", sample_cookies)
        await session_repository.upsert_for_owner("user-2", sample_cookies)

        assert await session_repository.count_for_site() == 2
        assert await session_repository.count_for_site("indeed") == 0

    async def test_delete_by_id(self, session_repository, sample_cookies):
        row = await session_repository.upsert_for_owner("user-1", sample_cookies)

        assert await session_repository.delete(row.id) is True
        assert await session_repository.get_by_id(row.id) is None


@pytest.mark.unit
class TestScraperSessionModel:
    """Test ScraperSession.is_expired."""

    def test_no_expiry_never_expires(self):
        assert ScraperSession(cookies=[], expires_at=None).is_expired() is False

    def test_naive_datetimes_are_utc(self):
        now = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
        row = ScraperSession(cookies=[], expires_at=datetime(2026, 5, 1, 11, 59))

        assert row.is_expired(now) is True

    def test_future_expiry(self):
        row = ScraperSession(cookies=[], expires_at=datetime.now(timezone.utc) + timedelta(days=1))

        assert row.is_expired() is False
