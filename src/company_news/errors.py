"""Error taxonomy for the aggregation endpoint.

Every error carries the HTTP status it maps to, so the API layer can
render any of them as ``{"error": message}`` without a lookup table.
"""

from typing import Optional


class NewsAggregatorError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(NewsAggregatorError):
    """Raised when the request body or its parameters are malformed."""

    status_code = 400


class MethodNotAllowed(NewsAggregatorError):
    """Raised for any HTTP method other than POST."""

    status_code = 405

    def __init__(self, message: str = "Only POST allowed"):
        super().__init__(message)


class ServerMisconfigured(NewsAggregatorError):
    """Raised when the upstream API key is missing from the environment."""

    status_code = 500

    def __init__(self, message: str = "Server missing NEWS_API_KEY"):
        super().__init__(message)


class UpstreamError(NewsAggregatorError):
    """Raised when the news provider fails; aborts the whole aggregation.

    Attributes:
        upstream_status: Status code returned by the provider, or None for
            transport failures and unreadable responses.
        body: Response body with the API key already redacted.
    """

    status_code = 502

    def __init__(
        self,
        upstream_status: Optional[int],
        body: str = "",
        message: Optional[str] = None,
    ):
        self.upstream_status = upstream_status
        self.body = body
        if message is None:
            if upstream_status is None:
                message = f"News API error: {body}"
            else:
                message = f"News API error {upstream_status}: {body}"
        super().__init__(message)
