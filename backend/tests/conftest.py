"""
Test Configuration for Sales Tracker

Fixtures for an in-memory database, a session store in a temporary cache
directory, fake browsers and an API client wired to them.
"""

import os

os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest")

import pytest
from httpx import ASGITransport, AsyncClient

from sales_tracker.core.config import Settings
from sales_tracker.core.container import get_container
from sales_tracker.core.database import DatabaseManager
from sales_tracker.core.security import ADMIN_SCOPE, security_manager
from sales_tracker.repositories.session_repository import SessionRepository
from sales_tracker.scrapers.browser import BrowserLaunchConfig, BrowserSessionDriver
from sales_tracker.scrapers.job_scraper import JobPostingScraper
from sales_tracker.scrapers.session_store import SessionStore
from sales_tracker.services.linkedin_auth import LinkedInAuthService

from tests.fakes import FakeDriverFactory, FakePageDriver, no_delay


SAMPLE_COOKIES = [
    {"name": "li_at", "value": "AQEDAR-token", "domain": ".linkedin.com", "path": "/", "secure": True, "httpOnly": True},
    {"name": "JSESSIONID", "value": "ajax:123", "domain": ".www.linkedin.com", "path": "/"},
]

SAMPLE_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"


@pytest.fixture
def sample_cookies():
    """Cookie export as uploaded from a logged-in browser."""
    return [dict(cookie) for cookie in SAMPLE_COOKIES]


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing the cache at a temporary directory."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        SCRAPER_CACHE_DIR=tmp_path / "cache",
        SCRAPER_MIN_DELAY=0,
        SCRAPER_MAX_DELAY=0,
        TESTING=True,
    )


@pytest.fixture
async def db_manager():
    """Initialized in-memory database with all tables."""
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await manager.init_database()
    await manager.create_tables()
    yield manager
    await manager.close_connections()


@pytest.fixture
def session_repository(db_manager):
    return SessionRepository(db_manager)


@pytest.fixture
def session_store(session_repository, tmp_path):
    """Session store backed by the test database and a temporary cache."""
    return SessionStore(
        repository=session_repository,
        cache_dir=tmp_path / "cache",
        ttl_days=30,
    )


@pytest.fixture
def file_session_store(tmp_path):
    """Session store with no database behind it."""
    return SessionStore(repository=None, cache_dir=tmp_path / "cache", ttl_days=30)


@pytest.fixture
def launch_config():
    return BrowserLaunchConfig(headless=True, navigation_timeout=30)


@pytest.fixture
def fake_driver():
    return FakePageDriver()


@pytest.fixture
def driver_factory(fake_driver):
    return FakeDriverFactory(fake_driver)


@pytest.fixture
def browser_driver(launch_config, session_store, driver_factory):
    """Browser session driver running on a fake browser with no dwell time."""
    return BrowserSessionDriver(
        launch_config=launch_config,
        session_store=session_store,
        driver_factory=driver_factory,
        delay=no_delay,
    )


@pytest.fixture
def job_scraper(browser_driver):
    return JobPostingScraper(browser_driver)


@pytest.fixture
def auth_service(session_store, launch_config, driver_factory):
    return LinkedInAuthService(
        session_store=session_store,
        launch_config=launch_config,
        driver_factory=driver_factory,
        login_timeout=5,
        settle=no_delay,
    )


@pytest.fixture
async def app_container(test_settings, db_manager, browser_driver, job_scraper, auth_service, session_store):
    """Global container initialized against the test doubles."""
    container = get_container()
    await container.shutdown()
    await container.initialize(settings=test_settings, db_manager=db_manager)

    container.override("session_store", session_store)
    container.override("browser", browser_driver)
    container.override("job_scraper", job_scraper)
    container.override("linkedin_auth_service", auth_service)

    yield container

    container._instances.clear()
    container._initialized = False


@pytest.fixture
async def test_client(app_container):
    """HTTP client for the API running against the test container."""
    from sales_tracker.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def user_token():
    return security_manager.create_access_token({"sub": "user-1", "email": "rep@example.com"})


@pytest.fixture
def admin_token():
    return security_manager.create_access_token({"sub": "admin-1", "scopes": [ADMIN_SCOPE]})


@pytest.fixture
def auth_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}
