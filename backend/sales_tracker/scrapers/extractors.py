"""
Site Extractors

Per-board extraction recipes. Each recipe is a cascade of selectors, most
current markup first, because the boards rename classes often and several
generations of markup are live at once.
"""

from typing import Dict, Optional, Type
from urllib.parse import urlparse, parse_qs

from sales_tracker.core.exceptions import SessionExpiredException
from sales_tracker.scrapers.base import Extractor, JobPosting, RenderedPage, first_match, selector_probes
from sales_tracker.scrapers.utils import (
    GENERIC_SITE,
    company_from_domain,
    is_plausible_company_name,
    title_case_slug,
)
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class GreenhouseExtractor(Extractor):
    """
    Greenhouse boards (boards.greenhouse.io, job-boards.greenhouse.io).

    The company comes from the URL, ``/acme-corp/jobs/123``, which is
    steadier than any element on the page.
    """

    TITLE_SELECTORS = ("h1.app-title", "h1.section-header", "h1", "title")
    SALARY_SELECTORS = (".pay-range", ".pay-input")

    _BOARD_HOST_LABELS = {"boards", "job-boards", "www"}

    @property
    def name(self) -> str:
        return "greenhouse"

    def extract_company(self, page: RenderedPage) -> str:
        parsed = urlparse(page.url)
        path_parts = [part for part in parsed.path.split("/") if part]

        if path_parts and path_parts[0] == "embed":
            board = parse_qs(parsed.query).get("for")
            if board and board[0]:
                return title_case_slug(board[0])
        elif path_parts:
            return title_case_slug(path_parts[0])

        host_label = (parsed.hostname or "").split(".")[0]
        if host_label and host_label not in self._BOARD_HOST_LABELS:
            return title_case_slug(host_label)

        return ""


class LinkedInExtractor(Extractor):
    """LinkedIn job view, logged-in and guest layouts."""

    TITLE_SELECTORS = (
        "h1.top-card-layout__title",
        "h1.topcard__title",
        ".job-details-jobs-unified-top-card__job-title",
        "h1.jobs-unified-top-card__job-title",
        "h1",
        '[class*="job-title"]',
    )
    COMPANY_SELECTORS = (
        ".topcard__org-name-link",
        ".job-details-jobs-unified-top-card__company-name",
        ".jobs-unified-top-card__company-name",
        '[class*="company-name"]',
        ".top-card-layout__card a",
    )
    SALARY_SELECTORS = (
        "button .tvm__text strong",
        ".tvm__text strong",
        '[class*="salary"]',
        ".job-details-jobs-unified-top-card__job-insight",
    )
    DESCRIPTION_SELECTORS = (
        ".description__text",
        ".jobs-description",
        '[class*="description"]',
    )

    LOGIN_TITLE_MARKERS = ("sign in", "login")

    @property
    def name(self) -> str:
        return "linkedin"

    def check_title(self, title: str) -> None:
        title_lower = title.lower()
        if any(marker in title_lower for marker in self.LOGIN_TITLE_MARKERS):
            logger.warning("Login page detected in place of job posting", title=title)
            raise SessionExpiredException(
                "The page shows a login prompt instead of the job posting."
            )

    def extract_company(self, page: RenderedPage) -> str:
        company = first_match(page, selector_probes(*self.COMPANY_SELECTORS))
        return company if is_plausible_company_name(company) else ""

    def description_text(self, page: RenderedPage) -> str:
        return first_match(page, selector_probes(*self.DESCRIPTION_SELECTORS)) or page.body_text

    def analysis_text(self, page: RenderedPage, posting: JobPosting) -> str:
        return f"{posting.job_title} {self.description_text(page)}"

    def extract_salary_text(self, page: RenderedPage) -> Optional[str]:
        salary_text = super().extract_salary_text(page)
        if not salary_text:
            logger.info("No salary pattern matched in LinkedIn description", url=page.url)
        return salary_text


class IndeedExtractor(Extractor):
    """Indeed ``viewjob`` pages."""

    TITLE_SELECTORS = (
        "h1.jobsearch-JobInfoHeader-title",
        'h1[class*="jobTitle"]',
        'h2[data-testid="jobsearch-JobInfoHeader-title"]',
        "h1",
    )
    COMPANY_SELECTORS = (
        '[data-company-name="true"]',
        '[data-testid="inlineHeader-companyName"]',
        '[class*="company"]',
        ".icl-u-lg-mr--sm",
    )
    SALARY_SELECTORS = (
        "#salaryInfoAndJobType",
        '[data-testid*="salary"]',
    )
    DESCRIPTION_SELECTORS = (
        "#jobDescriptionText",
        '[class*="description"]',
    )

    @property
    def name(self) -> str:
        return "indeed"

    def extract_company(self, page: RenderedPage) -> str:
        company = first_match(page, selector_probes(*self.COMPANY_SELECTORS))
        return company if is_plausible_company_name(company) else ""

    def analysis_text(self, page: RenderedPage, posting: JobPosting) -> str:
        description = first_match(page, selector_probes(*self.DESCRIPTION_SELECTORS)) or page.body_text
        return f"{posting.job_title} {description}"


class GenericExtractor(Extractor):
    """
    Fallback for company career pages and unknown boards.

    The company defaults to the host's domain label and is replaced by a
    company element only when its text does not look like a form label.
    """

    TITLE_SELECTORS = ("h1", '[class*="job-title"]', '[class*="title"]', "title")
    COMPANY_SELECTORS = ('[class*="company-name"]', "[data-company]")
    SALARY_SELECTORS = ('[class*="salary"]', '[class*="compensation"]')

    @property
    def name(self) -> str:
        return GENERIC_SITE

    def extract_company(self, page: RenderedPage) -> str:
        company = first_match(page, selector_probes(*self.COMPANY_SELECTORS))
        if is_plausible_company_name(company):
            return company
        return company_from_domain(page.url)


EXTRACTORS: Dict[str, Type[Extractor]] = {
    "greenhouse": GreenhouseExtractor,
    "linkedin": LinkedInExtractor,
    "indeed": IndeedExtractor,
    GENERIC_SITE: GenericExtractor,
}


def get_extractor(site: str) -> Extractor:
    """Get the extractor for a classified site, falling back to the generic one."""
    return EXTRACTORS.get(site, GenericExtractor)()
