"""
Simple Dependency Container

Wires the scraper pipeline together once per process: database, session
store, browser driver, scraper and LinkedIn auth service.
"""

import asyncio
import functools
from typing import Dict, Any, Optional

from sales_tracker.core.config import Settings, get_settings
from sales_tracker.core.database import DatabaseManager
from sales_tracker.repositories.session_repository import SessionRepository
from sales_tracker.scrapers.browser import BrowserLaunchConfig, BrowserSessionDriver, human_delay
from sales_tracker.scrapers.job_scraper import JobPostingScraper
from sales_tracker.scrapers.session_store import SessionStore
from sales_tracker.services.linkedin_auth import LinkedInAuthService
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class SimpleContainer:
    """Simple dependency injection container."""

    def __init__(self):
        self._instances: Dict[str, Any] = {}
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(
        self,
        settings: Optional[Settings] = None,
        db_manager: Optional[DatabaseManager] = None
    ):
        """Initialize container and dependencies."""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return
            await self._build(settings, db_manager)

    async def _build(self, settings: Optional[Settings], db_manager: Optional[DatabaseManager]):
        logger.info("Initializing application container...")

        settings = settings or get_settings()
        self._instances['settings'] = settings

        if db_manager is None:
            db_manager = DatabaseManager(settings.DATABASE_URL)
            await db_manager.init_database()
            # Migrations own the schema outside development
            if settings.ENVIRONMENT != "production":
                await db_manager.create_tables()
        self._instances['db_manager'] = db_manager

        session_store = SessionStore(
            repository=SessionRepository(db_manager),
            cache_dir=settings.SCRAPER_CACHE_DIR,
            ttl_days=settings.SCRAPER_SESSION_TTL_DAYS,
        )
        self._instances['session_store'] = session_store

        launch_config = BrowserLaunchConfig.from_settings(settings)
        self._instances['launch_config'] = launch_config

        browser = BrowserSessionDriver(
            launch_config=launch_config,
            session_store=session_store,
            delay=functools.partial(
                human_delay, settings.SCRAPER_MIN_DELAY, settings.SCRAPER_MAX_DELAY
            ),
        )
        self._instances['browser'] = browser
        self._instances['job_scraper'] = JobPostingScraper(browser)

        self._instances['linkedin_auth_service'] = LinkedInAuthService(
            session_store=session_store,
            launch_config=launch_config,
            login_timeout=settings.INTERACTIVE_LOGIN_TIMEOUT,
        )

        self._initialized = True
        logger.info("Container initialized successfully")

    async def shutdown(self):
        """Shutdown container and cleanup resources."""
        logger.info("Shutting down container...")

        if 'db_manager' in self._instances:
            await self._instances['db_manager'].close_connections()

        self._instances.clear()
        self._initialized = False
        logger.info("Container shutdown complete")

    def get(self, name: str) -> Any:
        """Get dependency by name."""
        return self._instances.get(name)

    def override(self, name: str, instance: Any) -> None:
        """Replace a dependency, e.g. with a fake in tests."""
        self._instances[name] = instance


# Global container instance
container = SimpleContainer()


async def init_container(**kwargs):
    """Initialize the global container."""
    await container.initialize(**kwargs)


async def shutdown_container():
    """Shutdown the global container."""
    await container.shutdown()


def get_container() -> SimpleContainer:
    """Get the global container instance."""
    return container


async def get_job_scraper() -> JobPostingScraper:
    """Get the shared scraper, initializing the container on first use."""
    await init_container()
    return container.get('job_scraper')
