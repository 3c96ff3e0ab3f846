"""
API Dependencies

Common dependencies used across API endpoints: the shared scraper and
auth service from the container, and error conversion for route handlers.
"""

from fastapi import HTTPException

from sales_tracker.core.container import get_container, init_container
from sales_tracker.core.exceptions import BaseApplicationException
from sales_tracker.scrapers.job_scraper import JobPostingScraper
from sales_tracker.services.linkedin_auth import LinkedInAuthService
from sales_tracker.utils.logger import get_logger

# Initialize logger
logger = get_logger(__name__)


async def get_job_scraper() -> JobPostingScraper:
    """
    Job scraper dependency.

    Returns:
        JobPostingScraper: Scraper wired to the application's session store
    """
    await init_container()
    return get_container().get("job_scraper")


async def get_linkedin_auth_service() -> LinkedInAuthService:
    """LinkedIn auth service dependency."""
    await init_container()
    return get_container().get("linkedin_auth_service")


def to_http_exception(exc: BaseApplicationException) -> HTTPException:
    """
    Convert an application exception into the HTTP error returned to clients.

    Args:
        exc: Application exception raised by a service

    Returns:
        HTTPException: Exception carrying the status code and user message
    """
    logger.warning(
        "Request failed",
        error_code=exc.error_code,
        error=exc.message,
        status_code=exc.http_status,
    )
    return HTTPException(status_code=exc.http_status, detail=exc.user_message)
