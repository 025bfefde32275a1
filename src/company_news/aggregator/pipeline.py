"""Aggregation orchestrator: fetch, deduplicate, sort."""

import logging
import time
from typing import List, Optional

from company_news.aggregator.deduplicator import deduplicate_articles, sort_by_recency
from company_news.config import get_settings
from company_news.errors import ServerMisconfigured
from company_news.models.schemas import Article, NewsQuery
from company_news.sources.base import BaseNewsSource
from company_news.sources.newsdata import NewsDataClient

logger = logging.getLogger(__name__)


class NewsAggregator:
    """
    Collects news for a list of companies into one deduplicated feed.

    Orchestrates:
    1. Sequential paginated fetches per company
    2. Two-pass deduplication (URL, then normalized title)
    3. Newest-first ordering
    """

    def __init__(
        self,
        source: Optional[BaseNewsSource] = None,
        api_key: Optional[str] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            source: News source to query. Defaults to a NewsDataClient.
            api_key: API key for the default source. If not provided, reads
                from settings.

        Raises:
            ServerMisconfigured: If no source is given and no API key is set.
        """
        if source is None:
            settings = get_settings()
            key = api_key or settings.news_api_key
            if not key:
                raise ServerMisconfigured()
            source = NewsDataClient(api_key=key)
        self.source = source

    async def close(self) -> None:
        """Close the underlying source."""
        await self.source.close()

    async def aggregate(self, query: NewsQuery) -> List[Article]:
        """
        Run the full aggregation for a validated query.

        Raises:
            UpstreamError: If any upstream request fails.
        """
        start_time = time.time()

        collected: List[Article] = []
        for company in query.companies:
            logger.info(
                f"Fetching {query.mode.value} news for {company!r} "
                f"(up to {query.pages_per_company} pages)"
            )
            collected.extend(
                await self.source.fetch_company(
                    company,
                    max_pages=query.pages_per_company,
                    from_date=query.from_date,
                    to_date=query.to_date,
                )
            )

        unique = deduplicate_articles(collected)
        ordered = sort_by_recency(unique)

        logger.info(
            f"Aggregated {len(ordered)} articles from {len(collected)} fetched "
            f"for {len(query.companies)} companies in {time.time() - start_time:.2f}s"
        )
        return ordered


async def aggregate_news(
    query: NewsQuery,
    api_key: Optional[str] = None,
) -> List[Article]:
    """
    Convenience function to run one aggregation and release the client.

    Args:
        query: The validated query.
        api_key: Optional API key (uses settings if not provided).
    """
    aggregator = NewsAggregator(api_key=api_key)
    try:
        return await aggregator.aggregate(query)
    finally:
        await aggregator.close()
