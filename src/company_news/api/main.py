"""FastAPI application for the Company News Aggregator."""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from company_news.aggregator.pipeline import aggregate_news
from company_news.config import get_settings
from company_news.errors import (
    BadRequest,
    MethodNotAllowed,
    NewsAggregatorError,
    ServerMisconfigured,
)
from company_news.models.schemas import ErrorResponse
from company_news.validation import parse_query

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Sent on every response, errors included, so browser clients can read them
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

NEWS_PATH = "/api/news"

app = FastAPI(
    title="Company News Aggregator API",
    description=(
        "Aggregates news for a list of companies from newsdata.io, "
        "merges duplicate stories and returns them newest first."
    ),
    version="0.1.0",
)


def json_response(content: Any, status_code: int = 200) -> JSONResponse:
    """JSON response carrying the CORS headers."""
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


def error_response(message: str, status_code: int) -> JSONResponse:
    return json_response({"error": message}, status_code=status_code)


async def read_json_body(request: Request) -> Any:
    """Decode the request body; an empty body is treated as ``{}``."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise BadRequest("Invalid JSON body") from e


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return json_response(
        {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
    )


@app.options(NEWS_PATH)
async def news_preflight():
    """Answer CORS preflight requests."""
    return Response(status_code=204, headers=CORS_HEADERS)


@app.post(
    NEWS_PATH,
    responses={
        status: {"model": ErrorResponse} for status in (400, 405, 500, 502)
    },
)
async def aggregate_company_news(request: Request):
    """
    Aggregate news for a list of companies.

    Body: ``{"companies": [...] | "a,b", "from"?, "to"?, "pagesPerCompany"?}``.
    Returns the deduplicated articles, newest first, as a bare JSON array.
    """
    settings = get_settings()
    if not settings.has_api_key:
        raise ServerMisconfigured()

    payload = await read_json_body(request)
    query = parse_query(
        payload,
        default_pages=settings.default_pages_per_company,
        max_pages=settings.max_pages_per_company,
    )

    articles = await aggregate_news(query, api_key=settings.news_api_key)
    return json_response([article.to_response() for article in articles])


@app.api_route(NEWS_PATH, methods=["GET", "PUT", "PATCH", "DELETE"])
async def news_method_not_allowed():
    raise MethodNotAllowed()


# Error handlers
@app.exception_handler(NewsAggregatorError)
async def aggregator_error_handler(request: Request, exc: NewsAggregatorError):
    """Render domain errors as ``{"error": message}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(exc.message, exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors (unknown path or method) use the same error shape."""
    return error_response(str(exc.detail), exc.status_code)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception("Unhandled exception")
    return error_response("Internal server error", 500)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "company_news.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
