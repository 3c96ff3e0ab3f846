"""
Base Scraper Classes

Data structures shared by the extraction pipeline and the abstract
extractor interface every site recipe implements.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from functools import cached_property
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern

from bs4 import BeautifulSoup

from sales_tracker.scrapers.salary import parse_salary
from sales_tracker.scrapers.utils import extract_experience_level, extract_sector
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class JobPosting:
    """Structured fields pulled from a job posting page."""

    job_title: str = ""
    company_name: str = ""
    salary_range: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    experience_level: Optional[str] = None
    aligned_sector: List[str] = field(default_factory=lambda: ["Other"])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScrapeResult:
    """Outcome of one extraction attempt. Never persisted here."""

    success: bool
    data: Optional[JobPosting] = None
    source: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: JobPosting, source: str) -> "ScrapeResult":
        return cls(success=True, data=data, source=source)

    @classmethod
    def failure(cls, error: str) -> "ScrapeResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data.to_dict(), "source": self.source}
        return {"success": False, "error": self.error}


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


class RenderedPage:
    """
    Snapshot of a loaded page: final URL, serialized DOM and title.

    Extractors only ever see this object, never the browser, so they can be
    exercised against static HTML.
    """

    def __init__(self, url: str, html: str, title: Optional[str] = None) -> None:
        self.url = url
        self.html = html or ""
        self._title = title

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    @property
    def title(self) -> str:
        if self._title is not None:
            return self._title
        tag = self.soup.title
        return _collapse_whitespace(tag.get_text()) if tag else ""

    @cached_property
    def body_text(self) -> str:
        root = self.soup.body or self.soup
        return _collapse_whitespace(root.get_text(" "))

    def select_text(self, selector: str) -> Optional[str]:
        """Text of the first element matching a CSS selector, or None."""
        element = self.soup.select_one(selector)
        if element is None:
            return None
        text = _collapse_whitespace(element.get_text(" "))
        return text or None

    def has_element(self, selector: str) -> bool:
        return self.soup.select_one(selector) is not None


# A probe reads one field from a page and returns None when it has nothing.
FieldProbe = Callable[[RenderedPage], Optional[str]]


def selector_probes(*selectors: str) -> List[FieldProbe]:
    """One probe per CSS selector, in the given order."""
    return [lambda page, css=css: page.select_text(css) for css in selectors]


def pattern_probes(patterns: Iterable[Pattern[str]], source: Callable[[RenderedPage], str]) -> List[FieldProbe]:
    """One probe per regex, each searching the text produced by ``source``."""
    def make(pattern: Pattern[str]) -> FieldProbe:
        def probe(page: RenderedPage) -> Optional[str]:
            match = pattern.search(source(page))
            return _collapse_whitespace(match.group(0)) if match else None
        return probe

    return [make(pattern) for pattern in patterns]


def first_match(page: RenderedPage, probes: Iterable[FieldProbe]) -> Optional[str]:
    """Run probes in order and return the first non-empty result."""
    for probe in probes:
        value = probe(page)
        if value:
            return value
    return None


# Dollar ranges as they appear in page copy, most explicit first.
SALARY_TEXT_PATTERNS: List[Pattern[str]] = [
    # "$173,000 - $197,400", "$85.10/hour to $251,000/year", "$25 - $30 an hour"
    re.compile(
        r"\$\s*[\d,]+(?:\.\d+)?\s*(?:k\b)?\s*(?:/\s*(?:hour|hr|year|yr)\b)?\s*"
        r"(?:-|–|—|to)\s*"
        r"\$\s*[\d,]+(?:\.\d+)?(?:\s*k\b)?"
        r"(?:\s*(?:/\s*|(?:per|an|a)\s+)(?:hour|hr|year|yr|annual|annually|month)\b)?",
        re.IGNORECASE,
    ),
    # "$120-180k"
    re.compile(
        r"\$\s*[\d,]+(?:\.\d+)?\s*(?:k\b)?\s*(?:-|–|—|to)\s*[\d,]+(?:\.\d+)?\s*k\b",
        re.IGNORECASE,
    ),
]


class Extractor(ABC):
    """
    Abstract base class for a site's extraction recipe.

    Subclasses list their selector cascades; the shared ``extract`` flow
    reads title, company and salary and then classifies the posting.
    """

    TITLE_SELECTORS: tuple = ("h1", "title")
    SALARY_SELECTORS: tuple = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """Site name reported back as the result source."""
        pass

    def extract(self, page: RenderedPage) -> JobPosting:
        """
        Pull a JobPosting out of a rendered page.

        Missing fields stay empty rather than failing the extraction.
        """
        posting = JobPosting(job_title=self.extract_title(page))
        self.check_title(posting.job_title)

        posting.company_name = self.extract_company(page)

        analysis_text = self.analysis_text(page, posting)
        posting.experience_level = extract_experience_level(analysis_text)
        posting.aligned_sector = extract_sector(analysis_text)

        salary_text = self.extract_salary_text(page)
        if salary_text:
            posting.salary_range = salary_text
            parsed = parse_salary(salary_text)
            posting.salary_min = parsed["salary_min"]
            posting.salary_max = parsed["salary_max"]

        logger.debug(
            "Extracted job posting",
            site=self.name,
            title=posting.job_title,
            company=posting.company_name,
            salary=posting.salary_range,
        )
        return posting

    def extract_title(self, page: RenderedPage) -> str:
        return first_match(page, selector_probes(*self.TITLE_SELECTORS)) or ""

    def check_title(self, title: str) -> None:
        """Hook for recipes that must reject certain titles."""

    @abstractmethod
    def extract_company(self, page: RenderedPage) -> str:
        pass

    def description_text(self, page: RenderedPage) -> str:
        return page.body_text

    def analysis_text(self, page: RenderedPage, posting: JobPosting) -> str:
        """Text the experience and sector classifiers run over."""
        return page.body_text

    def extract_salary_text(self, page: RenderedPage) -> Optional[str]:
        """Labeled salary element first, then a dollar-range scan of the copy."""
        labeled = first_match(page, selector_probes(*self.SALARY_SELECTORS))
        if labeled and "$" in labeled:
            return labeled

        return first_match(page, pattern_probes(SALARY_TEXT_PATTERNS, self.description_text))
