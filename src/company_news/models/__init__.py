"""Pydantic models for structured data."""

from .schemas import (
    Article,
    ErrorResponse,
    FetchMode,
    NewsQuery,
)

__all__ = [
    "Article",
    "ErrorResponse",
    "FetchMode",
    "NewsQuery",
]
