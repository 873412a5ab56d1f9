#!/usr/bin/env python3
"""
Request/response boundary for the two pipelines.

ReaderService owns the shared HTTP session, the result cache and both
orchestrators. Its methods take a JSON-like payload and always return either
``{"success": True, "data": ...}`` or ``{"success": False, "error": ..., "code": ...}``;
pipeline exceptions never escape. Cancellation is not converted.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from aiohttp import ClientSession

from cache import ResultCache
from config import config, get_logger
from errors import (
    DnsError,
    ErrorCode,
    HttpError,
    InvalidUrlError,
    ParseError,
    ReadabilityFailedError,
    ReaderError,
)
from extractor import ArticleExtractor
from fetcher import FeedFetcher
from http_client import FetchClient
from proxies import ProxyResolver, build_strategies
from readability_engine import ReadabilityConfig

logger = get_logger("api")

DNS_MESSAGE = "DNS resolution failed. Please check your network or try again later."
INVALID_URL_MESSAGE = "The provided URL is invalid."
PARSE_MESSAGE = "Failed to parse the webpage HTML. The page may be malformed."
EXTRACTION_MESSAGE = "Failed to extract content"
MISSING_URL_MESSAGE = "URL is required"
INTERNAL_MESSAGE = "Internal server error"


def success(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def failure(message: str, code: str) -> Dict[str, Any]:
    return {"success": False, "error": message, "code": code}


def _payload_url(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    url = payload.get("url")
    if url is None or (isinstance(url, str) and not url.strip()):
        return None
    return url


def article_failure(error: Exception) -> Dict[str, Any]:
    """Map an extraction exception to the article boundary shape."""
    if isinstance(error, DnsError):
        return failure(DNS_MESSAGE, ErrorCode.DNS_ERROR)
    if isinstance(error, InvalidUrlError):
        return failure(INVALID_URL_MESSAGE, ErrorCode.INVALID_URL)
    if isinstance(error, HttpError):
        return failure(f"Server error: {error.message}", ErrorCode.HTTP_ERROR)
    if isinstance(error, ParseError):
        return failure(PARSE_MESSAGE, ErrorCode.JSDOM_ERROR)
    if isinstance(error, ReadabilityFailedError):
        return failure(error.message, ErrorCode.READABILITY_FAILED)
    return failure(EXTRACTION_MESSAGE, ErrorCode.EXTRACTION_FAILED)


def feed_failure(error: Exception) -> Dict[str, Any]:
    """Map a feed-ingestion exception to the feed boundary shape."""
    if isinstance(error, InvalidUrlError):
        return failure(INVALID_URL_MESSAGE, ErrorCode.INVALID_URL)
    if isinstance(error, ReaderError):
        return failure(f"Failed to fetch RSS feed: {error.message}", ErrorCode.FETCH_ERROR)
    return failure(INTERNAL_MESSAGE, ErrorCode.INTERNAL_ERROR)


class ReaderService:
    """Owns pipeline resources; use as an async context manager or call start/close."""

    def __init__(
        self,
        extractor: Optional[ArticleExtractor] = None,
        feed_fetcher: Optional[FeedFetcher] = None,
        cache: Optional[ResultCache] = None,
    ) -> None:
        self.cache = cache if cache is not None else ResultCache(config.CACHE_CAPACITY, config.CACHE_TTL_SECONDS)
        self.extractor = extractor
        self.feed_fetcher = feed_fetcher
        self.session: Optional[ClientSession] = None
        self.executor: Optional[ThreadPoolExecutor] = None

    async def start(self) -> None:
        """Open the shared session and build any orchestrator not injected."""
        if self.extractor is not None and self.feed_fetcher is not None:
            return
        self.session = ClientSession()
        self.executor = ThreadPoolExecutor(thread_name_prefix="reader")
        client = FetchClient(session=self.session)
        if self.extractor is None:
            self.extractor = ArticleExtractor(
                client=client,
                cache=self.cache,
                readability=ReadabilityConfig.from_mapping(config.READABILITY),
                executor=self.executor,
            )
        if self.feed_fetcher is None:
            resolver = ProxyResolver(client=client, strategies=build_strategies(config.PROXIES))
            self.feed_fetcher = FeedFetcher(resolver=resolver, executor=self.executor)
        logger.info("Reader service started")

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None
        if self.executor is not None:
            self.executor.shutdown(wait=False)
            self.executor = None
        logger.info("Reader service closed")

    async def __aenter__(self) -> "ReaderService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def extract_article(self, payload: Any) -> Dict[str, Any]:
        """Handle ``{url, feedName?}``; MISSING_URL is reported before any pipeline work."""
        url = _payload_url(payload)
        if url is None:
            return failure(MISSING_URL_MESSAGE, ErrorCode.MISSING_URL)
        feed_name = payload.get("feedName")

        try:
            record = await self.extractor.extract_article_content(url, feed_name=feed_name)
        except ReaderError as e:
            logger.error(f"Article extraction failed for {url}: {e.code} {e.message}")
            return article_failure(e)
        except Exception as e:
            logger.error(f"Unexpected error extracting {url}: {e}", exc_info=True)
            return article_failure(e)
        return success(record.to_dict())

    async def fetch_feed(self, payload: Any) -> Dict[str, Any]:
        """Handle ``{url}`` for a feed or a homepage advertising one."""
        url = _payload_url(payload)
        if url is None:
            return failure(MISSING_URL_MESSAGE, ErrorCode.MISSING_URL)

        try:
            record = await self.feed_fetcher.fetch_feed(url)
        except ReaderError as e:
            logger.error(f"Feed fetch failed for {url}: {e.code} {e.message}")
            return feed_failure(e)
        except Exception as e:
            logger.error(f"Unexpected error fetching feed {url}: {e}", exc_info=True)
            return feed_failure(e)
        return success(record.to_dict())
