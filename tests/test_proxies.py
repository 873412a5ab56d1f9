import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from errors import FetchError
from http_client import FetchClient
from proxies import DIRECT, HTTP_PROXY, TEMPLATE, ProxyResolver, ProxyStrategy, build_strategies


async def _no_sleep(delay):
    return None


def _proxy_app(hits):
    async def broken(request):
        hits.append(("broken", request.query.get("url")))
        return web.Response(status=404, text="not found")

    async def working(request):
        hits.append(("working", request.query.get("url")))
        return web.Response(text=f"fetched {request.query['url']}", content_type="text/xml")

    async def target(request):
        hits.append(("direct", str(request.rel_url)))
        return web.Response(text="<rss/>", content_type="application/rss+xml")

    app = web.Application()
    app.router.add_get("/broken", broken)
    app.router.add_get("/working", working)
    app.router.add_get("/feed.xml", target)
    return app


def test_build_strategies_accepts_known_shapes():
    strategies = build_strategies([
        "https://proxy.example/raw?url={url}",
        "direct",
        {"type": "http", "url": "http://proxy.internal:3128"},
        "https://missing-placeholder.example/",
        {"type": "http"},
        42,
    ])

    assert [s.kind for s in strategies] == [TEMPLATE, DIRECT, HTTP_PROXY]
    assert strategies[2].forward_proxy() == "http://proxy.internal:3128"
    assert strategies[0].forward_proxy() is None


def test_template_encodes_target_url():
    strategy = ProxyStrategy(TEMPLATE, "https://proxy.example/raw?url={url}")
    assert strategy.request_url("https://example.com/feed.xml?a=1") == \
        "https://proxy.example/raw?url=https%3A%2F%2Fexample.com%2Ffeed.xml%3Fa%3D1"
    assert ProxyStrategy(DIRECT).request_url("https://example.com/") == "https://example.com/"


@pytest.mark.asyncio
async def test_falls_back_to_next_proxy():
    hits = []
    async with TestServer(_proxy_app(hits)) as server:
        resolver = ProxyResolver(
            client=FetchClient(sleeper=_no_sleep),
            strategies=[
                ProxyStrategy(TEMPLATE, str(server.make_url("/broken")) + "?url={url}"),
                ProxyStrategy(TEMPLATE, str(server.make_url("/working")) + "?url={url}"),
            ],
        )
        body = await resolver.fetch_via_proxy("https://example.com/feed.xml")

    assert body == "fetched https://example.com/feed.xml"
    assert hits == [
        ("broken", "https://example.com/feed.xml"),
        ("working", "https://example.com/feed.xml"),
    ]


@pytest.mark.asyncio
async def test_each_proxy_is_tried_once():
    hits = []
    async with TestServer(_proxy_app(hits)) as server:
        resolver = ProxyResolver(
            client=FetchClient(max_attempts=3, sleeper=_no_sleep),
            strategies=[ProxyStrategy(TEMPLATE, str(server.make_url("/broken")) + "?url={url}")],
        )
        with pytest.raises(FetchError):
            await resolver.fetch_via_proxy("https://example.com/feed.xml")

    assert len(hits) == 1


@pytest.mark.asyncio
async def test_all_proxies_failing_aggregates_reasons():
    hits = []
    async with TestServer(_proxy_app(hits)) as server:
        resolver = ProxyResolver(
            client=FetchClient(sleeper=_no_sleep),
            strategies=[
                ProxyStrategy(TEMPLATE, str(server.make_url("/broken")) + "?url={url}"),
                ProxyStrategy(TEMPLATE, str(server.make_url("/broken")) + "?url={url}"),
            ],
        )
        with pytest.raises(FetchError) as excinfo:
            await resolver.fetch_via_proxy("https://example.com/missing.xml")

    assert excinfo.value.message == "All proxy fetches failed"
    assert len(excinfo.value.failures) == 2
    assert all("404" in reason for _, reason in excinfo.value.failures)


@pytest.mark.asyncio
async def test_direct_strategy_fetches_target():
    hits = []
    async with TestServer(_proxy_app(hits)) as server:
        resolver = ProxyResolver(client=FetchClient(sleeper=_no_sleep), strategies=[ProxyStrategy(DIRECT)])
        body = await resolver.fetch_via_proxy(str(server.make_url("/feed.xml")))

    assert body == "<rss/>"
    assert hits == [("direct", "/feed.xml")]
