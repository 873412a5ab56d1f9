import pytest
from aiohttp.test_utils import TestClient, TestServer

from api import ReaderService
from errors import ErrorCode, InvalidUrlError
from models import ArticleRecord, FeedItem, FeedRecord
from server import create_app


class StubExtractor:
    def __init__(self, error=None):
        self.error = error

    async def extract_article_content(self, url, feed_name=None):
        if self.error is not None:
            raise self.error
        return ArticleRecord(
            url=url, title="A", author="Unknown", publish_date="2024-01-01T00:00:00.000Z",
            description="", image=None, site_name="", content="<div>body</div>",
            text_content="body", reading_time=1, word_count=1,
            extracted_at="2024-01-01T00:00:00.000Z", feed_name=feed_name,
        )


class StubFeedFetcher:
    async def fetch_feed(self, url):
        item = FeedItem(title="Hello", link="https://example.com/hello", feed_name="Example", slug="hello")
        return FeedRecord(feed_url=url, title="Example", slug="example", items=[item])


def _app(article_error=None):
    service = ReaderService(extractor=StubExtractor(article_error), feed_fetcher=StubFeedFetcher())
    return create_app(service)


@pytest.mark.asyncio
async def test_article_success():
    async with TestClient(TestServer(_app())) as client:
        response = await client.post("/api/article", json={"url": "https://example.com/a"})
        body = await response.json()

    assert response.status == 200
    assert body["success"] is True
    assert body["data"]["url"] == "https://example.com/a"


@pytest.mark.asyncio
async def test_article_failure_is_400():
    async with TestClient(TestServer(_app(article_error=InvalidUrlError("bad")))) as client:
        response = await client.post("/api/article", json={"url": "ftp://example.com/a"})
        body = await response.json()

    assert response.status == 400
    assert body == {"success": False, "error": "The provided URL is invalid.", "code": ErrorCode.INVALID_URL}


@pytest.mark.asyncio
async def test_missing_url_is_400():
    async with TestClient(TestServer(_app())) as client:
        response = await client.post("/api/rss", json={})
        body = await response.json()

    assert response.status == 400
    assert body["code"] == ErrorCode.MISSING_URL


@pytest.mark.asyncio
async def test_feed_success():
    async with TestClient(TestServer(_app())) as client:
        response = await client.post("/api/rss", json={"url": "https://example.com/feed.xml"})
        body = await response.json()

    assert response.status == 200
    assert body["data"]["slug"] == "example"
    assert body["data"]["items"][0]["link"] == "https://example.com/hello"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/article", "/api/rss"])
async def test_get_is_method_not_allowed(path):
    async with TestClient(TestServer(_app())) as client:
        response = await client.get(path)
        body = await response.json()

    assert response.status == 405
    assert response.headers["Allow"] == "POST"
    assert body["code"] == ErrorCode.METHOD_NOT_ALLOWED


@pytest.mark.asyncio
async def test_invalid_json_is_internal_error():
    async with TestClient(TestServer(_app())) as client:
        response = await client.post(
            "/api/article", data="{not json", headers={"Content-Type": "application/json"}
        )
        body = await response.json()

    assert response.status == 500
    assert body == {"success": False, "error": "Internal server error", "code": ErrorCode.INTERNAL_ERROR}
