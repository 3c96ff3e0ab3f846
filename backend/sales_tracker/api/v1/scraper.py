"""
Scraper API v1 Endpoints

Fills in a job posting's details from its URL.
"""

from typing import Dict, Any

from fastapi import APIRouter, Depends

from sales_tracker.api.deps import get_job_scraper
from sales_tracker.core.security import get_current_user
from sales_tracker.schemas.scraper import ScrapeRequest, ScrapeResponse
from sales_tracker.scrapers.job_scraper import JobPostingScraper
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/scraper", tags=["scraper"])


@router.post("/scrape", response_model=ScrapeResponse)
async def scrape_job(
    request: ScrapeRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    scraper: JobPostingScraper = Depends(get_job_scraper)
):
    """
    Scrape a job posting.

    Failures are part of the response body (``success: false`` with a
    message to show), not HTTP errors.
    """
    user_id = current_user["user_id"]
    logger.info("Scrape requested", url=request.url, user_id=user_id)

    result = await scraper.scrape(request.url, user_id=user_id)
    return result.to_dict()
