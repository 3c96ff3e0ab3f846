"""
Salary Normalization

Turns human-written compensation text into annualized USD figures.

Handles formats like:
    "$85.10/hour to $251,000/year + bonus"
    "$120k-$180k"
    "$85.10/yr - $251K/yr"
    "$150,000 - $200,000 per year"
"""

import math
import re
from typing import Any, Dict, List, Optional

HOURS_PER_YEAR = 2080
MONTHS_PER_YEAR = 12
MIN_PLAUSIBLE_SALARY = 1_000
MAX_PLAUSIBLE_SALARY = 10_000_000

# Everything from the first perk keyword to the end is dropped.
_EXTRAS_PATTERN = re.compile(
    r"\+?\s*(bonus|equity|benefits|stock|401k|retirement|insurance|pto|time off|vacation).*$"
)

_DOLLAR_AMOUNT_PATTERN = re.compile(
    r"\$\s*([\d,]+(?:\.\d+)?)\s*(k)?\s*(?:/\s*|(?:per|an|a)\s+)?"
    r"(?:(hourly|hour|hr|yearly|year|yr|annually|annual|monthly|month|mo)\b)?"
)

_BARE_RANGE_PATTERN = re.compile(
    r"(\d[\d,]*(?:\.\d+)?)\s*(?:-|–|—|to)\s*(\d[\d,]*(?:\.\d+)?)\s*(k)?"
)

# Only a dash or "to" may sit between the two ends of one range
_RANGE_CONNECTOR_PATTERN = re.compile(r"^\s*(?:-|–|—|to)\s*$")


def _to_number(raw: str) -> Optional[float]:
    try:
        value = float(raw.replace(",", ""))
    except ValueError:
        return None
    # Multipliers only grow a figure, so anything past the ceiling is already out
    if not math.isfinite(value) or value > MAX_PLAUSIBLE_SALARY:
        return None
    return value


def _annualize(amount: float, has_k: bool, unit: Optional[str]) -> int:
    value = amount * (1000 if has_k else 1)
    unit = unit or "year"

    if unit.startswith("hour") or unit == "hr":
        value *= HOURS_PER_YEAR
    elif unit.startswith("month") or unit == "mo":
        value *= MONTHS_PER_YEAR

    return int(round(value))


def _is_plausible(value: int) -> bool:
    return MIN_PLAUSIBLE_SALARY <= value <= MAX_PLAUSIBLE_SALARY


def _dollar_candidates(clean_text: str) -> List[int]:
    matches = list(_DOLLAR_AMOUNT_PATTERN.finditer(clean_text))
    units = [m.group(3) for m in matches]

    # "$25 - $30 an hour": the upper end's unit covers the lower end
    for i in range(len(matches) - 2, -1, -1):
        between = clean_text[matches[i].end():matches[i + 1].start()]
        if not units[i] and units[i + 1] and _RANGE_CONNECTOR_PATTERN.match(between):
            units[i] = units[i + 1]

    candidates = []
    for match, unit in zip(matches, units):
        amount = _to_number(match.group(1))
        if amount is not None:
            candidates.append(_annualize(amount, bool(match.group(2)), unit))
    return candidates


def _collect_candidates(clean_text: str) -> List[int]:
    """Annualized, plausible amounts found in the text."""
    candidates = _dollar_candidates(clean_text)

    if not candidates:
        # Currency symbol already stripped upstream, e.g. "120 - 180k"
        bare = _BARE_RANGE_PATTERN.search(clean_text)
        if bare:
            has_k = bool(bare.group(3))
            for raw in (bare.group(1), bare.group(2)):
                amount = _to_number(raw)
                if amount is not None:
                    candidates.append(_annualize(amount, has_k, None))

    return [value for value in candidates if _is_plausible(value)]


def parse_salary(salary_text: Any) -> Dict[str, Optional[Any]]:
    """
    Parse a salary string into min/max annual values.

    A single figure is treated as a ceiling: it lands in ``salary_max`` and
    ``salary_min`` stays None. Figures outside the plausible band are
    discarded before min/max are chosen.

    Args:
        salary_text: Raw salary text from a job posting

    Returns:
        Dict[str, Optional[Any]]: ``salary_range`` (trimmed input),
        ``salary_min`` and ``salary_max``
    """
    if not salary_text or not isinstance(salary_text, str):
        return {"salary_range": None, "salary_min": None, "salary_max": None}

    clean_text = re.sub(r"\s+", " ", salary_text.lower()).strip()
    clean_text = _EXTRAS_PATTERN.sub("", clean_text).strip()

    candidates = _collect_candidates(clean_text)

    salary_min: Optional[int] = None
    salary_max: Optional[int] = None

    if len(candidates) == 1:
        salary_max = candidates[0]
    elif candidates:
        salary_min = min(candidates)
        salary_max = max(candidates)

    return {
        "salary_range": salary_text.strip(),
        "salary_min": salary_min,
        "salary_max": salary_max,
    }


def _format_amount(amount: int) -> str:
    if amount >= 1000:
        return f"${int(amount + 500) // 1000}K"
    return f"${amount:,}"


def format_salary_range(salary_min: Optional[int], salary_max: Optional[int]) -> Optional[str]:
    """
    Format a salary range for display, e.g. ``"$120K - $180K"``.

    Returns:
        Optional[str]: Display string, or None when neither bound is known
    """
    if salary_min and salary_max:
        return f"{_format_amount(salary_min)} - {_format_amount(salary_max)}"
    if salary_max:
        return f"Up to {_format_amount(salary_max)}"
    if salary_min:
        return f"From {_format_amount(salary_min)}"
    return None
