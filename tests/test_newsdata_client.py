"""Tests for the newsdata.io client."""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from company_news.errors import UpstreamError
from company_news.models.schemas import FetchMode
from company_news.sources.base import first_present
from company_news.sources.newsdata import (
    NewsDataClient,
    parse_item,
    redact_api_key,
    select_endpoint,
)


API_KEY = "pub_test_key_123"
BASE_URL = "https://newsdata.io/api/1"

# Sample newsdata.io page
SAMPLE_PAGE = {
    "status": "success",
    "totalResults": 2,
    "results": [
        {
            "article_id": "a1",
            "title": "Acme Wins Award",
            "link": "https://news.example.com/acme-award",
            "source_id": "example_news",
            "pubDate": "2024-01-02 10:00:00",
            "description": "Acme was recognized for innovation.",
        },
        {
            "article_id": "a2",
            "title": "Acme Opens New Plant",
            "link": "https://news.example.com/acme-plant",
            "source_id": "example_news",
            "pubDate": "2024-01-01 09:00:00",
            "description": None,
        },
    ],
    "nextPage": "cursor-2",
}

# Older NewsAPI-style item shape
LEGACY_ITEM = {
    "title_no_formatting": "Globex Merger Talks",
    "source": {"name": "Legacy Wire", "url": "https://legacy.example.com/globex"},
    "publishedAt": "2024-01-03T08:00:00Z",
    "summary": "Globex is in talks.",
}


def make_response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.text = text
    return response


def page(results, next_page=None):
    return make_response(json_data={"status": "success", "results": results, "nextPage": next_page})


class TestHelpers:
    """Tests for module-level helpers."""

    def test_select_endpoint(self):
        assert select_endpoint(FetchMode.LATEST, BASE_URL) == f"{BASE_URL}/latest"
        assert select_endpoint(FetchMode.ARCHIVE, BASE_URL + "/") == f"{BASE_URL}/archive"

    def test_redact_api_key_in_query_string(self):
        text = f"Bad request: https://newsdata.io/api/1/latest?apikey={API_KEY}&q=Acme"
        redacted = redact_api_key(text, API_KEY)

        assert API_KEY not in redacted
        assert "apikey=***&q=Acme" in redacted

    def test_redact_api_key_literal(self):
        assert redact_api_key(f'{{"key": "{API_KEY}"}}', API_KEY) == '{"key": "***"}'

    def test_redact_unknown_key_in_url(self):
        assert redact_api_key("?APIKEY=other", None) == "?APIKEY=***"

    def test_redact_empty(self):
        assert redact_api_key("", API_KEY) == ""

    def test_first_present_order_and_nesting(self):
        item = {"url": "", "source": {"url": "https://nested"}}
        assert first_present(item, ["link", "url", ("source", "url")]) == "https://nested"
        assert first_present({"source": "flat"}, [("source", "url")]) == ""

    def test_parse_item_current_schema(self):
        article = parse_item(SAMPLE_PAGE["results"][0], "Acme")

        assert article.title == "Acme Wins Award"
        assert article.url == "https://news.example.com/acme-award"
        assert article.source == "example_news"
        assert article.published_at == "2024-01-02 10:00:00"
        assert article.description == "Acme was recognized for innovation."
        assert article.company_queried == "Acme"

    def test_parse_item_legacy_schema(self):
        article = parse_item(LEGACY_ITEM, "Globex")

        assert article.title == "Globex Merger Talks"
        assert article.url == "https://legacy.example.com/globex"
        assert article.source == "Legacy Wire"
        assert article.published_at == "2024-01-03T08:00:00Z"
        assert article.description == "Globex is in talks."

    def test_parse_item_missing_fields_are_empty(self):
        article = parse_item({}, "Acme")

        assert article.title == ""
        assert article.url == ""
        assert article.description == ""


class TestNewsDataClient:
    """Tests for NewsDataClient."""

    @pytest.fixture
    def client(self):
        """Create a client with a test API key."""
        return NewsDataClient(api_key=API_KEY, base_url=BASE_URL, language="en")

    def test_is_configured(self, client):
        assert client.is_configured is True

    def test_build_params_first_page(self, client):
        params = client.build_params("Acme")

        assert params == {"apikey": API_KEY, "q": "Acme", "language": "en"}
        assert "page" not in params

    def test_build_params_archive_with_cursor(self, client):
        params = client.build_params("Acme", "2024-01-01", "2024-01-31", cursor="abc")

        assert params["from_date"] == "2024-01-01"
        assert params["to_date"] == "2024-01-31"
        assert params["page"] == "abc"

    @pytest.mark.asyncio
    async def test_fetch_page_latest(self, client):
        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(return_value=make_response(json_data=SAMPLE_PAGE))
            mock_get_client.return_value = mock_http

            articles, cursor = await client.fetch_page("Acme")

            assert len(articles) == 2
            assert cursor == "cursor-2"
            endpoint = mock_http.get.call_args.args[0]
            assert endpoint == f"{BASE_URL}/latest"

    @pytest.mark.asyncio
    async def test_fetch_page_archive_endpoint(self, client):
        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(return_value=page([]))
            mock_get_client.return_value = mock_http

            await client.fetch_page("Acme", from_date="2024-01-01", to_date="2024-01-31")

            call = mock_http.get.call_args
            assert call.args[0] == f"{BASE_URL}/archive"
            assert call.kwargs["params"]["from_date"] == "2024-01-01"
            assert call.kwargs["params"]["to_date"] == "2024-01-31"

    @pytest.mark.asyncio
    async def test_fetch_page_falls_back_to_articles_list(self, client):
        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(
                return_value=make_response(json_data={"articles": [LEGACY_ITEM]})
            )
            mock_get_client.return_value = mock_http

            articles, cursor = await client.fetch_page("Globex")

            assert [a.title for a in articles] == ["Globex Merger Talks"]
            assert cursor is None

    @pytest.mark.asyncio
    async def test_fetch_page_error_status_is_redacted(self, client):
        body = f'{{"message": "quota exceeded for https://newsdata.io/api/1/latest?apikey={API_KEY}"}}'

        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(return_value=make_response(429, text=body))
            mock_get_client.return_value = mock_http

            with pytest.raises(UpstreamError) as exc_info:
                await client.fetch_page("Acme")

        error = exc_info.value
        assert error.status_code == 502
        assert error.upstream_status == 429
        assert "429" in error.message
        assert "quota exceeded" in error.message
        assert API_KEY not in error.message

    @pytest.mark.asyncio
    async def test_fetch_page_transport_error(self, client):
        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))
            mock_get_client.return_value = mock_http

            with pytest.raises(UpstreamError) as exc_info:
                await client.fetch_page("Acme")

        assert exc_info.value.upstream_status is None
        assert "ConnectTimeout" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_fetch_page_invalid_json(self, client):
        response = make_response(text="<html>oops</html>")
        response.json.side_effect = ValueError("no json")

        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(return_value=response)
            mock_get_client.return_value = mock_http

            with pytest.raises(UpstreamError) as exc_info:
                await client.fetch_page("Acme")

        assert "not valid JSON" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_fetch_company_follows_cursor(self, client):
        responses = [
            page([SAMPLE_PAGE["results"][0]], next_page="c2"),
            page([SAMPLE_PAGE["results"][1]], next_page="c3"),
            page([LEGACY_ITEM], next_page=None),
        ]

        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(side_effect=responses)
            mock_get_client.return_value = mock_http

            articles = await client.fetch_company("Acme", max_pages=5)

            assert len(articles) == 3
            assert mock_http.get.call_count == 3
            pages_sent = [c.kwargs["params"].get("page") for c in mock_http.get.call_args_list]
            assert pages_sent == [None, "c2", "c3"]

    @pytest.mark.asyncio
    async def test_fetch_company_stops_at_page_limit(self, client):
        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(
                side_effect=lambda *a, **kw: page([SAMPLE_PAGE["results"][0]], next_page="more")
            )
            mock_get_client.return_value = mock_http

            articles = await client.fetch_company("Acme", max_pages=2)

            assert len(articles) == 2
            assert mock_http.get.call_count == 2

    @pytest.mark.asyncio
    async def test_fetch_company_stops_on_empty_page(self, client):
        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(
                side_effect=[
                    page([SAMPLE_PAGE["results"][0]], next_page="c2"),
                    page([], next_page="c3"),
                    page([SAMPLE_PAGE["results"][1]], next_page=None),
                ]
            )
            mock_get_client.return_value = mock_http

            articles = await client.fetch_company("Acme", max_pages=5)

            assert len(articles) == 1
            assert mock_http.get.call_count == 2

    @pytest.mark.asyncio
    async def test_fetch_company_error_on_second_page_propagates(self, client):
        with patch.object(client, "get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.get = AsyncMock(
                side_effect=[
                    page([SAMPLE_PAGE["results"][0]], next_page="c2"),
                    make_response(503, text="Service Unavailable"),
                ]
            )
            mock_get_client.return_value = mock_http

            with pytest.raises(UpstreamError) as exc_info:
                await client.fetch_company("Acme", max_pages=3)

        assert exc_info.value.upstream_status == 503

    @pytest.mark.asyncio
    async def test_close_without_client_is_noop(self, client):
        await client.close()
