"""Upstream news sources."""

from .base import BaseNewsSource, first_present
from .newsdata import NewsDataClient, redact_api_key, select_endpoint

__all__ = [
    "BaseNewsSource",
    "NewsDataClient",
    "first_present",
    "redact_api_key",
    "select_endpoint",
]
