"""newsdata.io integration for per-company news search."""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from company_news.config import get_settings
from company_news.errors import UpstreamError
from company_news.models.schemas import Article, FetchMode
from company_news.sources.base import BaseNewsSource, FieldCandidate, first_present

logger = logging.getLogger(__name__)

# The provider's item schema changed across its API versions, so each
# logical field is read from an ordered list of candidates.
FIELD_CANDIDATES: Dict[str, List[FieldCandidate]] = {
    "title": ["title", "title_no_formatting"],
    "url": ["link", "url", ("source", "url")],
    "source": ["source_id", "source_name", ("source", "name")],
    "published_at": ["pubDate", "publishedAt", "pubdate"],
    "description": ["description", "summary", "snippet"],
}

RESULT_LIST_KEYS = ("results", "articles")
NEXT_PAGE_KEY = "nextPage"

APIKEY_PARAM_PATTERN = re.compile(r"(apikey=)[^&\s\"']+", re.IGNORECASE)
REDACTED = "***"

# Longest upstream body echoed back to clients
MAX_ERROR_BODY_CHARS = 500


def select_endpoint(mode: FetchMode, base_url: str) -> str:
    """Return the upstream endpoint for a fetch mode."""
    base = base_url.rstrip("/")
    if mode == FetchMode.ARCHIVE:
        return f"{base}/archive"
    return f"{base}/latest"


def redact_api_key(text: str, api_key: Optional[str]) -> str:
    """Remove the API key from text that may echo the request URL."""
    if not text:
        return ""
    redacted = APIKEY_PARAM_PATTERN.sub(rf"\g<1>{REDACTED}", text)
    if api_key:
        redacted = redacted.replace(api_key, REDACTED)
    return redacted


def parse_item(item: Dict[str, Any], company: str) -> Article:
    """Map a raw upstream result item into an Article."""
    return Article(
        title=first_present(item, FIELD_CANDIDATES["title"]),
        url=first_present(item, FIELD_CANDIDATES["url"]),
        source=first_present(item, FIELD_CANDIDATES["source"]),
        published_at=first_present(item, FIELD_CANDIDATES["published_at"]),
        description=first_present(item, FIELD_CANDIDATES["description"]),
        company_queried=company,
    )


class NewsDataClient(BaseNewsSource):
    """
    Search newsdata.io for articles mentioning a company.

    Uses the ``latest`` endpoint without a date range and the ``archive``
    endpoint with one. Pages are followed through the opaque ``nextPage``
    cursor. Requests are issued strictly one at a time to stay within the
    free tier's rate limit.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize the newsdata.io client.

        Args:
            api_key: newsdata.io API key. If not provided, reads from settings.
            base_url: API base URL. If not provided, reads from settings.
            language: Language filter. If not provided, reads from settings.
            timeout: Request timeout in seconds.
        """
        settings = get_settings()
        super().__init__(timeout or settings.request_timeout)
        self._api_key = api_key or settings.news_api_key
        self.base_url = base_url or settings.news_api_base_url
        self.language = language or settings.news_language

    @property
    def is_configured(self) -> bool:
        """Check if the client has an API key."""
        return bool(self._api_key)

    def build_params(
        self,
        company: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> Dict[str, str]:
        """Build query parameters for one page request."""
        params = {
            "apikey": self._api_key or "",
            "q": company,
            "language": self.language,
        }
        if from_date and to_date:
            params["from_date"] = from_date
            params["to_date"] = to_date
        if cursor:
            params["page"] = cursor
        return params

    async def fetch_page(
        self,
        company: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> Tuple[List[Article], Optional[str]]:
        """
        Fetch a single page of results.

        Returns:
            Tuple of (articles, next_cursor). ``next_cursor`` is None when
            the upstream reports no further pages.

        Raises:
            UpstreamError: On transport failure, non-2xx status or a body
                that is not a JSON object.
        """
        mode = FetchMode.ARCHIVE if from_date and to_date else FetchMode.LATEST
        endpoint = select_endpoint(mode, self.base_url)
        params = self.build_params(company, from_date, to_date, cursor)

        client = await self.get_client()

        try:
            response = await client.get(endpoint, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            detail = redact_api_key(f"{type(e).__name__}: {e}", self._api_key)
            logger.warning(f"News API request failed for {company!r}: {detail}")
            raise UpstreamError(None, detail) from e

        if not 200 <= response.status_code < 300:
            body = redact_api_key(response.text or "", self._api_key)
            body = body[:MAX_ERROR_BODY_CHARS]
            logger.warning(
                f"News API returned {response.status_code} for {company!r}: {body}"
            )
            raise UpstreamError(response.status_code, body)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                response.status_code,
                "response body is not valid JSON",
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                response.status_code,
                "response body is not a JSON object",
            )

        items: Any = []
        for key in RESULT_LIST_KEYS:
            if data.get(key):
                items = data[key]
                break

        articles = [
            parse_item(item, company)
            for item in items or []
            if isinstance(item, dict)
        ]
        next_cursor = data.get(NEXT_PAGE_KEY) or None

        return articles, str(next_cursor) if next_cursor else None

    async def fetch_company(
        self,
        company: str,
        max_pages: int,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> List[Article]:
        """Follow the pagination cursor for one company, up to ``max_pages``."""
        articles: List[Article] = []
        cursor: Optional[str] = None

        for page in range(1, max_pages + 1):
            page_articles, cursor = await self.fetch_page(
                company,
                from_date=from_date,
                to_date=to_date,
                cursor=cursor,
            )
            logger.debug(
                f"{company!r} page {page}: {len(page_articles)} articles, "
                f"next cursor {'present' if cursor else 'absent'}"
            )

            if not page_articles:
                break
            articles.extend(page_articles)
            if not cursor:
                break

        return articles
