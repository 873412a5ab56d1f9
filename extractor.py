#!/usr/bin/env python3
"""
Article extraction pipeline.

validate URL -> result cache -> fetch with retry -> parse -> metadata and
readability -> reading statistics and sanitizing -> cache -> ArticleRecord.

Extraction is all-or-nothing: any failure raises a ReaderError subclass and
nothing is cached.
"""

from asyncio import get_event_loop, sleep
from concurrent.futures import Executor
from functools import partial
from typing import Any, Awaitable, Callable, Optional, Tuple
import random

from cache import ResultCache
from config import config, get_logger
from errors import ReadabilityFailedError
from html_parser import parse_html
from http_client import FetchClient
from metadata import extract_metadata
from models import ArticleRecord
from readability_engine import ReadabilityConfig, ReadabilityEngine
from telemetry import trace_span
from utils import isoformat_utc, parse_http_url, reading_stats, sanitize_content

logger = get_logger("extractor")

READABILITY_FAILED_MESSAGE = (
    "Could not extract readable content from this page. The page may not contain "
    "enough readable text or may require JavaScript rendering."
)


class ArticleExtractor:
    """Turn a page URL into an ArticleRecord."""

    def __init__(
        self,
        client: Optional[FetchClient] = None,
        cache: Optional[ResultCache] = None,
        readability: Optional[ReadabilityConfig] = None,
        jitter: Optional[Tuple[float, float]] = None,
        sleeper: Callable[[float], Awaitable[None]] = sleep,
        words_per_minute: Optional[int] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        """
        Args:
            client: Fetch client (default: a FetchClient with configured retry budget)
            cache: Result cache owned by the caller (default: a fresh one)
            readability: Engine knobs (default: from configuration)
            jitter: (min, max) seconds slept before the first request
            sleeper: Coroutine used for the jitter wait
            words_per_minute: Reading speed for readingTime
            executor: Executor for parsing and scoring (default: the loop's)
        """
        self.client = client or FetchClient()
        self.cache = cache if cache is not None else ResultCache(config.CACHE_CAPACITY, config.CACHE_TTL_SECONDS)
        self.engine = ReadabilityEngine(readability)
        self.jitter = jitter if jitter is not None else (config.REQUEST_JITTER_MIN, config.REQUEST_JITTER_MAX)
        self.sleeper = sleeper
        self.words_per_minute = words_per_minute or config.WORDS_PER_MINUTE
        self.executor = executor

    async def run_in_executor(self, func, *args) -> Any:
        """Run a blocking function in a thread pool executor."""
        loop = get_event_loop()
        return await loop.run_in_executor(self.executor, partial(func, *args))

    async def _pause_before_request(self) -> None:
        low, high = self.jitter
        delay = random.uniform(low, high) if high > 0 else 0
        if delay > 0:
            await self.sleeper(delay)

    def _build_record(self, url: str, body: bytes, charset: Optional[str],
                      feed_name: Optional[str]) -> ArticleRecord:
        """Parse and isolate the article; runs off the event loop."""
        document = parse_html(body, url, encoding=charset)
        metadata = extract_metadata(document)
        article = self.engine.isolate_article(document)
        if article is None:
            raise ReadabilityFailedError(READABILITY_FAILED_MESSAGE)

        reading_time, word_count = reading_stats(article.text_content, self.words_per_minute)
        return ArticleRecord(
            url=url,
            title=article.title or metadata.title,
            author=metadata.author,
            publish_date=metadata.publish_date,
            description=metadata.description,
            image=metadata.image,
            site_name=metadata.site_name,
            content=sanitize_content(article.content),
            text_content=article.text_content,
            reading_time=reading_time,
            word_count=word_count,
            extracted_at=isoformat_utc(),
            from_cache=False,
            feed_name=feed_name,
        )

    @trace_span(
        "extract_article_content",
        tracer_name="extractor",
        attr_from_args=lambda self, url, feed_name=None: {"article.url": str(url)},
    )
    async def extract_article_content(self, url: str, feed_name: Optional[str] = None) -> ArticleRecord:
        """Extract the readable article at ``url``.

        Raises:
            InvalidUrlError: before any network access, for malformed or non-http(s) URLs
            DnsError, HttpError, NetworkError: the fetch failed after all retries
            ParseError: the body could not be parsed as HTML
            ReadabilityFailedError: no article could be isolated
        """
        parse_http_url(url)

        cached = self.cache.get(url)
        if cached is not None:
            logger.info(f"Cache hit for {url}")
            return cached.with_cache_flag(True)

        await self._pause_before_request()
        response = await self.client.fetch_with_retry(url)

        record = await self.run_in_executor(self._build_record, url, response.body, response.charset, feed_name)
        logger.info(f"Extracted {record.word_count} words from {url}")

        self.cache.put(url, record)
        return record
