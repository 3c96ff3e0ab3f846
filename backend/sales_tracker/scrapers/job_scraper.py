"""
Job Posting Scraper

Turns a job posting URL into structured fields: classify the board, render
the page, run the board's extraction recipe. Failures come back as a
failed ScrapeResult carrying a message fit to show the user.
"""

from typing import Optional

from sales_tracker.core.exceptions import (
    BaseApplicationException,
    INVALID_URL_USER_MESSAGE,
    NAVIGATION_USER_MESSAGE,
    TIMEOUT_USER_MESSAGE,
)
from sales_tracker.scrapers.base import ScrapeResult
from sales_tracker.scrapers.browser import BrowserSessionDriver
from sales_tracker.scrapers.extractors import get_extractor
from sales_tracker.scrapers.utils import detect_job_site
from sales_tracker.utils.logger import get_logger, log_error, log_scraping_activity

logger = get_logger(__name__)


def normalize_error_message(error: Exception) -> str:
    """
    Map a low-level failure to the message shown to the user.

    Application exceptions already carry one. Anything else is matched on
    its text and otherwise passed through unchanged.
    """
    if isinstance(error, BaseApplicationException):
        return error.user_message

    message = str(error) or type(error).__name__

    if isinstance(error, TimeoutError) or "timeout" in message.lower():
        return TIMEOUT_USER_MESSAGE
    if "Navigation failed" in message:
        return NAVIGATION_USER_MESSAGE
    if "ERR_NAME_NOT_RESOLVED" in message:
        return INVALID_URL_USER_MESSAGE

    return message


class JobPostingScraper:
    """Runs one URL through classification, rendering and extraction."""

    def __init__(self, browser: BrowserSessionDriver) -> None:
        self.browser = browser

    async def scrape(self, url: str, user_id: Optional[str] = None) -> ScrapeResult:
        """
        Scrape a single job posting.

        Args:
            url: Job posting URL
            user_id: Owner whose stored session gated boards should use

        Returns:
            ScrapeResult: Extracted posting and source site, or an error
        """
        site = None
        try:
            site = detect_job_site(url)
            extractor = get_extractor(site)
            log_scraping_activity(site, "scrape_started", url=url, user_id=user_id)

            async with self.browser.open_page(url, owner_id=user_id, site=site) as page:
                posting = extractor.extract(page)

            log_scraping_activity(
                site,
                "scrape_completed",
                url=url,
                user_id=user_id,
                title=posting.job_title,
                company=posting.company_name,
            )
            return ScrapeResult.ok(posting, extractor.name)

        except BaseApplicationException as e:
            logger.warning(
                "Scrape failed",
                site=site,
                url=url,
                error_code=e.error_code,
                error=e.message,
            )
            return ScrapeResult.failure(e.user_message)

        except Exception as e:
            log_error(e, context={"operation": "scrape_job_posting", "site": site, "url": url}, user_id=user_id)
            return ScrapeResult.failure(normalize_error_message(e))


async def scrape_job_posting(url: str, user_id: Optional[str] = None) -> ScrapeResult:
    """Scrape a job posting with the application's shared scraper."""
    from sales_tracker.core.container import get_job_scraper

    scraper = await get_job_scraper()
    return await scraper.scrape(url, user_id=user_id)
