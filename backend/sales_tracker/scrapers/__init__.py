"""
Job Posting Scrapers Package

Turns a job posting URL into structured fields. A headless browser renders
the page, optionally with a stored LinkedIn session, and a per-site recipe
reads title, company and salary from the snapshot.
"""

from .base import Extractor, JobPosting, RenderedPage, ScrapeResult
from .browser import BrowserLaunchConfig, BrowserSessionDriver, PageDriver, SeleniumPageDriver
from .extractors import (
    GenericExtractor,
    GreenhouseExtractor,
    IndeedExtractor,
    LinkedInExtractor,
    get_extractor,
)
from .job_scraper import JobPostingScraper, scrape_job_posting
from .salary import format_salary_range, parse_salary
from .session_store import Session, SessionStore
from .utils import detect_job_site, extract_experience_level, extract_sector

__all__ = [
    # Data
    'JobPosting',
    'RenderedPage',
    'ScrapeResult',
    'Session',

    # Pipeline
    'BrowserLaunchConfig',
    'BrowserSessionDriver',
    'PageDriver',
    'SeleniumPageDriver',
    'SessionStore',
    'JobPostingScraper',
    'scrape_job_posting',

    # Extraction
    'Extractor',
    'GenericExtractor',
    'GreenhouseExtractor',
    'IndeedExtractor',
    'LinkedInExtractor',
    'get_extractor',
    'detect_job_site',
    'extract_experience_level',
    'extract_sector',

    # Salary
    'parse_salary',
    'format_salary_range',
]
