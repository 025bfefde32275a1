"""Request validation for the aggregation endpoint.

Turns a decoded JSON payload into a ``NewsQuery`` or raises ``BadRequest``
with a message suitable for returning to the client.
"""

import math
import re
from typing import Any, List, Optional, Tuple

from company_news.errors import BadRequest
from company_news.models.schemas import NewsQuery


# =============================================================================
# Constants
# =============================================================================

# Strict YYYY-MM-DD; calendar validity is left to the upstream
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

# Leading integer of a string, mirroring lenient integer parsing of form input
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)", re.ASCII)

DEFAULT_PAGES_PER_COMPANY = 2
MAX_PAGES_PER_COMPANY = 5


# =============================================================================
# Field Parsers
# =============================================================================

def parse_companies(value: Any) -> List[str]:
    """
    Parse the ``companies`` field.

    Args:
        value: A list of names or a single comma-separated string.

    Returns:
        Trimmed, non-empty company names in request order.

    Raises:
        BadRequest: If no company names remain after trimming.
    """
    if value is None:
        raw: List[Any] = []
    elif isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, list):
        raw = value
    else:
        raise BadRequest("companies must be a list or a comma-separated string")

    companies = [str(c).strip() for c in raw if c is not None]
    companies = [c for c in companies if c]

    if not companies:
        raise BadRequest("No companies provided")

    return companies


def parse_date_range(
    from_value: Any,
    to_value: Any,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Validate the optional ``from``/``to`` bounds.

    Both must be given or both omitted; when given, each must be YYYY-MM-DD.
    """
    from_date = _blank_to_none(from_value)
    to_date = _blank_to_none(to_value)

    if from_date is None and to_date is None:
        return None, None

    if from_date is None or to_date is None:
        raise BadRequest("Both 'from' and 'to' must be provided together")

    for name, value in (("from", from_date), ("to", to_date)):
        if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
            raise BadRequest(f"'{name}' must be a date in YYYY-MM-DD format")

    return from_date, to_date


def clamp_pages(
    value: Any,
    default: int = DEFAULT_PAGES_PER_COMPANY,
    maximum: int = MAX_PAGES_PER_COMPANY,
) -> int:
    """
    Parse ``pagesPerCompany`` and clamp it to ``[1, maximum]``.

    Missing, zero or non-numeric input falls back to ``default``.
    """
    pages = _parse_int(value)
    if not pages:
        pages = default
    return max(1, min(maximum, pages))


def _parse_int(value: Any) -> Optional[int]:
    # bool is an int subclass but never a page count
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = LEADING_INT_PATTERN.match(value)
        if match:
            return int(match.group(1))
    return None


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


# =============================================================================
# Request Parsing
# =============================================================================

def parse_query(
    payload: Any,
    default_pages: int = DEFAULT_PAGES_PER_COMPANY,
    max_pages: int = MAX_PAGES_PER_COMPANY,
) -> NewsQuery:
    """
    Build a validated ``NewsQuery`` from a decoded JSON body.

    Args:
        payload: The decoded request body.
        default_pages: Page count used when ``pagesPerCompany`` is absent.
        max_pages: Upper bound for ``pagesPerCompany``.

    Raises:
        BadRequest: If the payload is not an object or any field is invalid.
    """
    if not isinstance(payload, dict):
        raise BadRequest("Invalid JSON body")

    companies = parse_companies(payload.get("companies"))
    from_date, to_date = parse_date_range(payload.get("from"), payload.get("to"))
    pages = clamp_pages(
        payload.get("pagesPerCompany"),
        default=default_pages,
        maximum=max_pages,
    )

    return NewsQuery(
        companies=companies,
        from_date=from_date,
        to_date=to_date,
        pages_per_company=pages,
    )
