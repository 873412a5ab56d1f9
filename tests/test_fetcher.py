import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from errors import FetchError, InvalidUrlError, NoValidItemsError
from fetcher import FeedFetcher, looks_like_feed_url
from http_client import FetchClient
from proxies import TEMPLATE, ProxyResolver, ProxyStrategy

HOMEPAGE = """<html><head>
  <title>Example Blog</title>
  <link rel="shortcut icon" href="/static/favicon.ico">
  <link rel="icon" href="/static/icon.png">
  <link rel="alternate" type="application/atom+xml" href="/atom.xml">
  <link rel="alternate" type="application/rss+xml" href="/rss.xml">
</head><body><p>Welcome</p></body></html>"""

BARE_HOMEPAGE = "<html><head><title>Bare</title></head><body><p>No links</p></body></html>"


class StubResolver:
    """Serves canned bodies by URL and fails like an exhausted proxy chain otherwise."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    async def fetch_via_proxy(self, url, expected_content_type="text/xml"):
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError("All proxy fetches failed", failures=[("stub", "HTTP 404: Not Found")])
        return self.pages[url]


def test_looks_like_feed_url():
    assert looks_like_feed_url("https://example.com/feed.xml")
    assert looks_like_feed_url("https://example.com/rss")
    assert not looks_like_feed_url("https://example.com/blog/")


@pytest.mark.asyncio
async def test_fetch_direct_feed_with_favicon(atom_feed):
    resolver = StubResolver({
        "https://example.com/feed.xml": atom_feed,
        "https://example.com": HOMEPAGE,
    })
    record = await FeedFetcher(resolver).fetch_feed("https://example.com/feed.xml")

    assert record.feed_url == "https://example.com/feed.xml"
    assert record.title == "Example Atom"
    assert record.slug == "example-atom"
    assert record.favicon == "https://example.com/static/icon.png"
    assert len(record.items) == 1
    assert record.items[0].favicon == record.favicon
    assert record.items[0].feed_name == "Example Atom"
    assert resolver.calls[0] == "https://example.com/feed.xml"


@pytest.mark.asyncio
async def test_autodiscovery_uses_first_advertised_feed(atom_feed):
    resolver = StubResolver({
        "https://blog.example.com/": HOMEPAGE,
        "https://blog.example.com/atom.xml": atom_feed,
        "https://blog.example.com": BARE_HOMEPAGE,
    })
    record = await FeedFetcher(resolver).fetch_feed("https://blog.example.com/")

    assert record.feed_url == "https://blog.example.com/atom.xml"
    assert record.favicon == "https://blog.example.com/favicon.ico"
    assert record.to_dict()["feedUrl"] == "https://blog.example.com/atom.xml"


@pytest.mark.asyncio
async def test_failed_discovery_falls_back_to_input(rss_feed):
    resolver = StubResolver({"https://example.com/latest": rss_feed})
    record = await FeedFetcher(resolver).fetch_feed("https://example.com/latest")

    assert record.feed_url == "https://example.com/latest"
    assert record.title == "Example RSS"
    assert record.favicon is None
    assert [item.title for item in record.items] == ["Linked Item", "Guid Item"]


@pytest.mark.asyncio
async def test_invalid_url_fails_before_fetching():
    resolver = StubResolver({})
    with pytest.raises(InvalidUrlError):
        await FeedFetcher(resolver).fetch_feed("not a url")
    assert resolver.calls == []


@pytest.mark.asyncio
async def test_feed_without_valid_items():
    body = """<?xml version="1.0"?><rss version="2.0"><channel><title>Empty</title>
      <item><description>nothing</description></item></channel></rss>"""
    resolver = StubResolver({"https://example.com/empty.xml": body})
    with pytest.raises(NoValidItemsError):
        await FeedFetcher(resolver).fetch_feed("https://example.com/empty.xml")


@pytest.mark.asyncio
async def test_missing_feed_404_on_every_proxy():
    async def not_found(request):
        return web.Response(status=404, text="not found")

    app = web.Application()
    app.router.add_get("/first", not_found)
    app.router.add_get("/second", not_found)

    async def no_sleep(delay):
        return None

    async with TestServer(app) as server:
        resolver = ProxyResolver(
            client=FetchClient(sleeper=no_sleep),
            strategies=[
                ProxyStrategy(TEMPLATE, str(server.make_url("/first")) + "?url={url}"),
                ProxyStrategy(TEMPLATE, str(server.make_url("/second")) + "?url={url}"),
            ],
        )
        with pytest.raises(FetchError):
            await FeedFetcher(resolver).fetch_feed("https://example.com/missing.xml")
