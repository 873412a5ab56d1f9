#!/usr/bin/env python3
"""
Feed ingestion: autodiscovery, fetch through the proxy chain, parse, and
favicon lookup.

Given a homepage or a feed URL, FeedFetcher finds the feed, downloads it via
ProxyResolver, resolves the site favicon concurrently with parsing and returns
a FeedRecord whose items all carry a title and a link.
"""

from asyncio import create_task, get_event_loop
from concurrent.futures import Executor
from functools import partial
from typing import Any, Optional

from bs4 import Tag

from config import get_logger
from errors import ReaderError
from html_parser import parse_html
from models import FeedRecord
from normalizer import build_items, parse_feed
from proxies import ProxyResolver
from telemetry import trace_span
from utils import parse_http_url, site_origin, slugify

logger = get_logger("fetcher")

FEED_LINK_TYPES = ('application/rss+xml', 'application/atom+xml')
FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8"
HTML_ACCEPT = "text/html"

# rel values in preference order
ICON_RELS = ('icon', 'shortcut icon', 'apple-touch-icon')


def looks_like_feed_url(url: str) -> bool:
    """Direct feed endpoints end in .xml or mention rss somewhere."""
    lowered = url.lower()
    return lowered.endswith('.xml') or 'rss' in lowered


class FeedFetcher:
    def __init__(self, resolver: Optional[ProxyResolver] = None, executor: Optional[Executor] = None) -> None:
        self.resolver = resolver or ProxyResolver()
        self.executor = executor

    async def run_in_executor(self, func, *args) -> Any:
        """Run a blocking function in a thread pool executor."""
        loop = get_event_loop()
        return await loop.run_in_executor(self.executor, partial(func, *args))

    async def discover_feed_url(self, site_url: str) -> Optional[str]:
        """Find the first advertised RSS/Atom <link> on a homepage.

        Returns the absolute feed URL, or None when the page cannot be fetched
        or advertises no feed.
        """
        logger.info(f"Attempting to discover feed URL from: {site_url}")
        try:
            html = await self.resolver.fetch_via_proxy(site_url, HTML_ACCEPT)
            document = await self.run_in_executor(parse_html, html, site_url)
        except ReaderError as e:
            logger.warning(f"Feed discovery failed for {site_url}: {e.message}")
            return None

        for link in document.soup.find_all('link', href=True):
            type_attr = (link.get('type') or '').strip().lower()
            if type_attr in FEED_LINK_TYPES:
                href = document.resolve(link['href'])
                if href:
                    logger.info(f"Discovered feed: {href}")
                    return href

        logger.info(f"No feed links found in {site_url}")
        return None

    async def resolve_favicon(self, feed_url: str) -> Optional[str]:
        """Locate the site icon for the feed's homepage; None on any failure."""
        try:
            origin = site_origin(feed_url)
            html = await self.resolver.fetch_via_proxy(origin, HTML_ACCEPT)
            document = await self.run_in_executor(parse_html, html, origin)
        except ReaderError as e:
            logger.warning(f"Favicon lookup failed for {feed_url}: {e.message}")
            return None

        links = [link for link in document.soup.find_all('link', href=True) if isinstance(link, Tag)]
        for wanted in ICON_RELS:
            for link in links:
                rel = link.get('rel') or []
                rel = ' '.join(rel) if isinstance(rel, list) else str(rel)
                if rel.strip().lower() == wanted:
                    href = document.resolve(link['href'])
                    if href:
                        return href
        return f"{origin}/favicon.ico"

    @trace_span(
        "fetch_feed",
        tracer_name="fetcher",
        attr_from_args=lambda self, input_url: {"feed.url": str(input_url)},
    )
    async def fetch_feed(self, input_url: str) -> FeedRecord:
        """Fetch and normalize a feed from a feed URL or a homepage.

        Raises:
            InvalidUrlError: the input is not an http(s) URL
            FetchError: every proxy failed for the feed document
            NoValidItemsError: the feed has no item with both title and link
        """
        parse_http_url(input_url)
        feed_url = input_url.strip()

        if not looks_like_feed_url(feed_url):
            discovered = await self.discover_feed_url(feed_url)
            if discovered:
                feed_url = discovered

        body = await self.resolver.fetch_via_proxy(feed_url, FEED_ACCEPT)

        favicon_task = create_task(self.resolve_favicon(feed_url))
        try:
            parsed = await self.run_in_executor(parse_feed, body, feed_url)
            items = build_items(parsed, feed_name=parsed.title)
            favicon = await favicon_task
        except BaseException:
            favicon_task.cancel()
            raise

        for item in items:
            item.favicon = favicon

        logger.info(f"Fetched {len(items)} items from {feed_url}")
        return FeedRecord(
            feed_url=feed_url,
            title=parsed.title,
            slug=slugify(parsed.title),
            favicon=favicon,
            items=items,
        )
