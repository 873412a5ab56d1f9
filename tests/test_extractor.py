from math import ceil

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from cache import ResultCache
from errors import HttpError, InvalidUrlError, ReadabilityFailedError
from extractor import ArticleExtractor
from http_client import FetchClient, FetchResponse
from readability_engine import ReadabilityConfig

URL = "https://example.com/posts/tide-pools"


class StaticClient:
    """Returns the same page for every URL and records what was requested."""

    def __init__(self, html):
        self.body = html.encode("utf-8")
        self.calls = []

    async def fetch_with_retry(self, url, **kwargs):
        self.calls.append(url)
        return FetchResponse(
            url=url,
            status=200,
            body=self.body,
            headers={"Content-Type": "text/html; charset=utf-8"},
            charset="utf-8",
        )


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def _extractor(client, **kwargs):
    kwargs.setdefault("jitter", (0, 0))
    return ArticleExtractor(
        client=client,
        cache=kwargs.pop("cache", ResultCache(capacity=10)),
        readability=ReadabilityConfig(),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_extracts_article_record(article_html):
    extractor = _extractor(StaticClient(article_html))
    record = await extractor.extract_article_content(URL, feed_name="Shore Feed")

    assert record.url == URL
    assert record.title == "Understanding Tide Pools"
    assert record.author == "Jane Doe"
    assert record.description == "A field guide to tide pools."
    assert record.publish_date == "2024-05-01T10:00:00Z"
    assert record.image == "https://example.com/pool.jpg"
    assert record.site_name == "Shore Notes"
    assert record.feed_name == "Shore Feed"
    assert record.from_cache is False
    assert record.extracted_at.endswith("Z")


@pytest.mark.asyncio
async def test_reading_statistics_invariant(article_html):
    record = await _extractor(StaticClient(article_html)).extract_article_content(URL)

    assert record.word_count == len(record.text_content.split())
    assert record.reading_time == ceil(record.word_count / 200)
    assert record.word_count > 0


@pytest.mark.asyncio
async def test_content_is_sanitized(article_html):
    record = await _extractor(StaticClient(article_html)).extract_article_content(URL)

    assert "<script" not in record.content
    assert "trackReading" not in record.content
    assert record.content.startswith('<div id="readability-page-1" class="page">')


@pytest.mark.asyncio
async def test_cache_hit_skips_network(article_html):
    client = StaticClient(article_html)
    extractor = _extractor(client)

    first = await extractor.extract_article_content(URL)
    second = await extractor.extract_article_content(URL)

    assert len(client.calls) == 1
    assert second.from_cache is True
    assert second.content == first.content
    assert first.from_cache is False


@pytest.mark.asyncio
async def test_extraction_is_idempotent(article_html):
    extractor = _extractor(StaticClient(article_html))

    first = await extractor.extract_article_content(URL)
    extractor.cache.clear()
    second = await extractor.extract_article_content(URL)

    assert second.from_cache is False
    assert second.content == first.content
    assert second.text_content == first.text_content


@pytest.mark.asyncio
async def test_invalid_url_fails_before_network(article_html):
    client = StaticClient(article_html)
    sleeper = SleepRecorder()
    extractor = _extractor(client, jitter=(0.2, 0.8), sleeper=sleeper)

    with pytest.raises(InvalidUrlError):
        await extractor.extract_article_content("not a url")

    assert client.calls == []
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_random_pause_before_fetch(article_html):
    sleeper = SleepRecorder()
    extractor = _extractor(StaticClient(article_html), jitter=(0.2, 0.8), sleeper=sleeper)

    await extractor.extract_article_content(URL)

    assert len(sleeper.delays) == 1
    assert 0.2 <= sleeper.delays[0] <= 0.8


@pytest.mark.asyncio
async def test_script_shell_fails_readability(spa_html):
    extractor = _extractor(StaticClient(spa_html))
    with pytest.raises(ReadabilityFailedError) as excinfo:
        await extractor.extract_article_content("https://app.example.com/")

    assert "JavaScript" in excinfo.value.message
    assert len(extractor.cache) == 0


def _flaky_article_app(article_html, failures, hits):
    async def handler(request):
        hits.append(request.path)
        if len(hits) <= failures:
            return web.Response(status=500, reason="Internal Server Error")
        return web.Response(text=article_html, content_type="text/html")

    app = web.Application()
    app.router.add_get("/posts/tide-pools", handler)
    return app


@pytest.mark.asyncio
async def test_succeeds_after_two_server_errors(article_html):
    hits = []
    sleeper = SleepRecorder()
    async with TestServer(_flaky_article_app(article_html, 2, hits)) as server:
        client = FetchClient(max_attempts=3, base_delay=1.0, sleeper=sleeper)
        record = await _extractor(client).extract_article_content(str(server.make_url("/posts/tide-pools")))

    assert len(hits) == 3
    assert sleeper.delays == [1.0, 2.0]
    assert "Tide pools form where" in record.text_content


@pytest.mark.asyncio
async def test_persistent_server_errors_surface_http_error(article_html):
    hits = []
    sleeper = SleepRecorder()
    async with TestServer(_flaky_article_app(article_html, 10, hits)) as server:
        client = FetchClient(max_attempts=3, base_delay=1.0, sleeper=sleeper)
        with pytest.raises(HttpError) as excinfo:
            await _extractor(client).extract_article_content(str(server.make_url("/posts/tide-pools")))

    assert excinfo.value.status == 500
    assert len(hits) == 3
    assert sleeper.delays == [1.0, 2.0]
