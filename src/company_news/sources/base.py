"""Base news source interface and common utilities."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from company_news.models.schemas import Article


# A candidate is a top-level key or a path into nested objects
FieldCandidate = Union[str, Tuple[str, ...]]


def first_present(item: Dict[str, Any], candidates: Sequence[FieldCandidate]) -> str:
    """
    Return the first non-empty value among candidate fields.

    Args:
        item: A raw result item from the upstream.
        candidates: Field names or nested paths, in priority order.

    Returns:
        The first non-empty value as a string, or "" if none is present.
    """
    for candidate in candidates:
        path = (candidate,) if isinstance(candidate, str) else candidate
        value: Any = item
        for key in path:
            if not isinstance(value, dict):
                value = None
                break
            value = value.get(key)
        if value:
            return value if isinstance(value, str) else str(value)
    return ""


class BaseNewsSource(ABC):
    """Abstract base class for upstream news sources."""

    def __init__(self, timeout: int = 30):
        """Initialize the source with a timeout."""
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    @abstractmethod
    async def fetch_company(
        self,
        company: str,
        max_pages: int,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> List[Article]:
        """
        Fetch articles mentioning a company.

        Args:
            company: Free-text company name to search for.
            max_pages: Maximum number of result pages to request.
            from_date: Optional lower date bound (YYYY-MM-DD).
            to_date: Optional upper date bound (YYYY-MM-DD).

        Returns:
            Articles in upstream order, attributed to ``company``.

        Raises:
            UpstreamError: If any upstream request fails.
        """
        pass
