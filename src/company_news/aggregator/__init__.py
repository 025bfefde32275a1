"""News aggregation and deduplication module.

This module fetches news for several companies, merges duplicate stories
and orders the result newest first.
"""

from company_news.aggregator.deduplicator import (
    deduplicate_articles,
    merge_companies,
    normalize_text,
    sort_by_recency,
)
from company_news.aggregator.pipeline import NewsAggregator, aggregate_news

__all__ = [
    "NewsAggregator",
    "aggregate_news",
    "deduplicate_articles",
    "merge_companies",
    "normalize_text",
    "sort_by_recency",
]
