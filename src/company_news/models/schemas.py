"""Pydantic models for request and response data."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FetchMode(str, Enum):
    """Upstream endpoint family, chosen by whether a date range was given."""

    LATEST = "latest"
    ARCHIVE = "archive"


class Article(BaseModel):
    """A single news article in the common output shape.

    Serialized with camelCase keys (``publishedAt``, ``companyQueried``).
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    url: str = ""
    source: str = ""
    published_at: str = Field(default="", alias="publishedAt")
    description: str = ""
    company_queried: str = Field(default="", alias="companyQueried")

    def to_response(self) -> dict:
        """Dump with the public camelCase field names."""
        return self.model_dump(by_alias=True)


class NewsQuery(BaseModel):
    """A validated aggregation request."""

    companies: List[str] = Field(..., min_length=1)
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    pages_per_company: int = Field(default=2, ge=1)

    @property
    def mode(self) -> FetchMode:
        if self.from_date and self.to_date:
            return FetchMode.ARCHIVE
        return FetchMode.LATEST


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str
