"""
Scraper Utilities

Site detection, keyword classification and company-name helpers shared by
the per-site extractors.
"""

import re
from typing import List, Optional, Pattern, Tuple
from urllib.parse import urlparse

from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)

GENERIC_SITE = "generic"

# Ordered; first substring hit wins.
KNOWN_SITES: Tuple[Tuple[str, str], ...] = (
    ("greenhouse.io", "greenhouse"),
    ("linkedin.com", "linkedin"),
    ("indeed.com", "indeed"),
)

# Second-level labels that sit under a ccTLD, e.g. acme.co.uk
_SECOND_LEVEL_LABELS = {"co", "com", "org", "net", "ac", "gov", "edu"}


def detect_job_site(url: str) -> str:
    """
    Classify a job posting URL by its board.

    Args:
        url: Job posting URL

    Returns:
        str: Site name from KNOWN_SITES or ``"generic"``
    """
    url_lower = (url or "").lower()

    for host_fragment, site in KNOWN_SITES:
        if host_fragment in url_lower:
            return site

    return GENERIC_SITE


class ExperienceLevelClassifier:
    """
    Keyword classifier for seniority.

    Levels are checked in order, so a posting that says both "senior" and
    "3+ years" is Senior.
    """

    LEVEL_PATTERNS: List[Tuple[str, Pattern[str]]] = [
        ("Senior", re.compile(r"\b(?:senior|lead|principal|staff)\b|\bsr\.")),
        ("Mid-Level", re.compile(r"\bmid(?:-level)?\b|\bintermediate\b|\b\d+\+?\s*years?\b")),
        ("Entry Level", re.compile(r"\b(?:junior|entry|associate)\b|\bjr\.")),
    ]

    @classmethod
    def classify(cls, text: Optional[str]) -> Optional[str]:
        if not text:
            return None

        text_lower = text.lower()
        for level, pattern in cls.LEVEL_PATTERNS:
            if pattern.search(text_lower):
                return level

        return None


class SectorClassifier:
    """
    Keyword classifier for the sector a posting belongs to.

    Healthcare is checked first because clinical postings routinely mention
    software, data and engineering as well.
    """

    DEFAULT_SECTOR = "Other"

    SECTOR_PATTERNS: List[Tuple[str, Pattern[str]]] = [
        ("Healthcare", re.compile(
            r"\b(?:health\w*|medical|hospital\w*|clinic\w*|nurs\w*|doctors?|patients?|pharma\w*|care)\b"
        )),
        ("Software Engineer", re.compile(
            r"\b(?:software|developers?|engineer\w*|tech\w*|programming|code|coding|web|apps?|"
            r"data|cloud|ai|machine learning)\b"
        )),
        ("Finance", re.compile(
            r"\b(?:financ\w*|banking|investment\w*|accounting|trading|analysts?)\b"
        )),
        ("Manufacturing", re.compile(
            r"\b(?:manufacturing|production|factory|industrial|assembly)\b"
        )),
        ("Retail", re.compile(
            r"\b(?:retail|stores?|sales|customer service|merchandis\w*)\b"
        )),
        ("Construction", re.compile(
            r"\b(?:construction|building|contractors?|architects?|civil engineer\w*)\b"
        )),
        ("Professional Services", re.compile(
            r"\b(?:consulting|professional services|advisory|legal|law)\b"
        )),
        ("Education", re.compile(
            r"\b(?:education\w*|teachers?|professors?|schools?|universit\w*|academic|training)\b"
        )),
    ]

    @classmethod
    def classify(cls, text: Optional[str]) -> List[str]:
        """Return a one-element list so callers can store it as a set of tags."""
        if not text:
            return [cls.DEFAULT_SECTOR]

        text_lower = text.lower()
        for sector, pattern in cls.SECTOR_PATTERNS:
            if pattern.search(text_lower):
                return [sector]

        return [cls.DEFAULT_SECTOR]


def extract_experience_level(text: Optional[str]) -> Optional[str]:
    """Classify seniority from free text; None when no keyword is present."""
    return ExperienceLevelClassifier.classify(text)


def extract_sector(text: Optional[str]) -> List[str]:
    """Classify the posting's sector from free text, defaulting to Other."""
    return SectorClassifier.classify(text)


def title_case_slug(slug: str) -> str:
    """Turn ``acme-corp`` into ``Acme Corp``."""
    words = slug.replace("-", " ").replace("_", " ")
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), words).strip()


def registrable_domain_label(url: str) -> str:
    """
    Get the organisation label of a URL's host.

    ``careers.healthee.com`` gives ``healthee``, ``jobs.acme.co.uk`` gives
    ``acme``.
    """
    hostname = (urlparse(url).hostname or "").lower()
    labels = [label for label in hostname.split(".") if label]

    if not labels:
        return ""
    if len(labels) == 1:
        return labels[0]

    if len(labels) >= 3 and len(labels[-1]) == 2 and labels[-2] in _SECOND_LEVEL_LABELS:
        return labels[-3]

    return labels[-2]


def company_from_domain(url: str) -> str:
    """Company name guessed from the host, first letter capitalized."""
    label = registrable_domain_label(url)
    return label[:1].upper() + label[1:]


def is_plausible_company_name(text: Optional[str]) -> bool:
    """
    Reject DOM text that looks like a form label rather than a company.

    ``"Company name*"`` and ``"Company:"`` are labels; anything of 2 or fewer
    characters, or 50 or more, is noise.
    """
    if not text:
        return False

    text = text.strip()
    return (
        "*" not in text
        and not text.endswith(":")
        and 2 < len(text) < 50
    )
