"""News deduplication and recency ordering.

Articles gathered for several companies often describe the same story.
Duplicates are merged in two passes, first by URL and then by normalized
title, and the surviving article records every company that produced it.
"""

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Iterable, List, Optional

from company_news.models.schemas import Article

logger = logging.getLogger(__name__)

NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9\s]")
WHITESPACE_PATTERN = re.compile(r"\s+")

NO_URL_KEY_PREFIX = "no-url|"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize text into a deduplication key.

    Lowercases, drops everything but letters, digits and whitespace,
    collapses whitespace runs and trims.
    """
    text = (text or "").lower()
    text = NON_ALNUM_PATTERN.sub("", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def dedup_key(article: Article) -> str:
    """Normalized title, falling back to the description."""
    return normalize_text(article.title or article.description)


def merge_companies(existing: str, incoming: str) -> str:
    """Union two comma-joined company lists, keeping first-seen order."""
    names: List[str] = []
    for name in f"{existing},{incoming}".split(","):
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return ",".join(names)


def _merge_by_key(articles: Iterable[Article], key_func) -> List[Article]:
    """First article per key wins; later ones contribute only companies.

    A key of None means the article is never merged.
    """
    kept: Dict[str, Article] = {}
    result: List[Article] = []

    for article in articles:
        key = key_func(article)
        if key is None:
            result.append(article.model_copy())
            continue

        existing = kept.get(key)
        if existing is None:
            copy = article.model_copy()
            kept[key] = copy
            result.append(copy)
        else:
            existing.company_queried = merge_companies(
                existing.company_queried, article.company_queried
            )

    return result


def _url_key(article: Article) -> str:
    if article.url:
        return article.url
    return NO_URL_KEY_PREFIX + dedup_key(article)


def _text_key(article: Article) -> Optional[str]:
    return dedup_key(article) or None


def deduplicate_articles(articles: List[Article]) -> List[Article]:
    """
    Merge duplicate articles across all companies and pages.

    Args:
        articles: Articles in fetch order (company order, then page order).

    Returns:
        New Article objects, at most one per URL and one per normalized
        title. Input articles are left untouched.
    """
    by_url = _merge_by_key(articles, _url_key)
    unique = _merge_by_key(by_url, _text_key)

    merged = len(articles) - len(unique)
    if merged:
        logger.info(f"Merged {merged} duplicate articles ({len(unique)} unique)")

    return unique


def parse_published_at(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a provider timestamp.

    Accepts ISO 8601 (with ``Z`` or a space separator) and RFC 2822 dates.
    Naive timestamps are taken as UTC.

    Returns:
        An aware datetime, or None if the value cannot be parsed.
    """
    if not value or not value.strip():
        return None

    value = value.strip()
    parsed: Optional[datetime] = None

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_by_recency(articles: List[Article]) -> List[Article]:
    """Newest first; articles without a parsable date sort last."""
    return sorted(
        articles,
        key=lambda a: parse_published_at(a.published_at) or EPOCH,
        reverse=True,
    )
