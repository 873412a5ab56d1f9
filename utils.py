#!/usr/bin/env python3
"""
Utility classes and functions shared by the article and feed pipelines.

This module contains URL validation, linear retry backoff, slug generation,
reading statistics and HTML sanitizing helpers.
"""

from asyncio import sleep
from datetime import datetime, timezone
from math import ceil
from typing import Awaitable, Callable, List, Optional, Tuple
from urllib.parse import urlsplit, SplitResult
import re

from bs4 import BeautifulSoup, Comment

from config import get_logger
from errors import InvalidUrlError

logger = get_logger("utils")

_SLUG_STRIP = re.compile(r'[^a-z0-9\s-]')
_SLUG_SPACES = re.compile(r'\s+')
_SLUG_HYPHENS = re.compile(r'-+')


def validate_url(url: str) -> bool:
    """Validate if a string is a well-formed http(s) URL.

    Args:
        url: The URL string to validate

    Returns:
        True if the URL has an http/https scheme and a host, False otherwise
    """
    try:
        parse_http_url(url)
    except InvalidUrlError:
        return False
    return True


def parse_http_url(url: str) -> SplitResult:
    """Split ``url`` and insist on an http/https scheme with a host.

    Raises:
        InvalidUrlError: for non-strings, malformed input or other schemes
    """
    if not url or not isinstance(url, str):
        raise InvalidUrlError("Invalid URL format")
    candidate = url.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        raise InvalidUrlError("Invalid URL format")
    try:
        parts = urlsplit(candidate)
        # Accessing port validates it (raises ValueError when out of range)
        parts.port
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL format: {e}") from e
    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidUrlError("Invalid URL protocol")
    if not parts.hostname:
        raise InvalidUrlError("Invalid URL format")
    return parts


def site_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` for ``url``."""
    parts = parse_http_url(url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if parts.port:
        host = f"{host}:{parts.port}"
    return f"{parts.scheme.lower()}://{host}"


def slugify(text: Optional[str]) -> str:
    """Convert a title into a URL-friendly slug.

    Lowercases, drops anything that is not [a-z0-9], whitespace or a hyphen,
    turns whitespace runs into a hyphen and collapses repeated hyphens.
    """
    if not text:
        return ""
    slug = _SLUG_STRIP.sub('', text.lower().strip())
    slug = _SLUG_SPACES.sub('-', slug)
    return _SLUG_HYPHENS.sub('-', slug)


def reading_stats(text: Optional[str], words_per_minute: int = 200) -> Tuple[int, int]:
    """Return ``(reading_time_minutes, word_count)`` for plain text.

    Words are whitespace-delimited tokens; reading time is rounded up.
    """
    word_count = len((text or "").split())
    return ceil(word_count / words_per_minute), word_count


def sanitize_content(html_content: str) -> str:
    """Remove <script>, <style> and comment nodes from an HTML fragment."""
    if not html_content:
        return ""
    soup = BeautifulSoup(html_content, 'html.parser')
    for tag in soup(["script", "style"]):
        tag.decompose()
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()
    return str(soup)


def isoformat_utc(value: Optional[datetime] = None) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision and a Z suffix."""
    dt = value or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def summarize_proxy(proxy_url: Optional[str]) -> Optional[str]:
    """Provide a redacted proxy identifier (scheme://host[:port]) for logging."""
    if not proxy_url:
        return None
    try:
        parsed = urlsplit(proxy_url)
        if parsed.scheme and parsed.hostname:
            host = parsed.hostname
            if parsed.port:
                host = f"{host}:{parsed.port}"
            return f"{parsed.scheme}://{host}"
    except ValueError:
        return proxy_url
    return proxy_url


def format_client_error(error: BaseException) -> str:
    """Describe aiohttp client errors with any available status/errno."""
    parts: List[str] = [error.__class__.__name__]
    status = getattr(error, 'status', None)
    if status is not None:
        parts.append(f"status={status}")
    os_error = getattr(error, 'os_error', None)
    if os_error is not None:
        errno = getattr(os_error, 'errno', None)
        strerror = getattr(os_error, 'strerror', None)
        if errno is not None:
            parts.append(f"errno={errno}")
        if strerror:
            parts.append(str(strerror))
    message = str(error)
    if message:
        parts.append(message)
    return " ".join(parts)


class RetryHelper:
    """Helper class for linear retry backoff.

    The delay before attempt ``n + 1`` is ``base_delay * n``.
    """

    def __init__(self, max_attempts: int = 3, base_delay: float = 1.0,
                 sleeper: Callable[[float], Awaitable[None]] = sleep):
        """Initialize the retry helper.

        Args:
            max_attempts: Total number of attempts, including the first one
            base_delay: Delay unit in seconds
            sleeper: Coroutine used to wait (injectable for tests)
        """
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay = base_delay
        self.sleeper = sleeper

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds after the given 1-based failed attempt."""
        return self.base_delay * attempt

    async def sleep_for_attempt(self, attempt: int):
        """Sleep for the calculated delay after the given 1-based attempt."""
        delay = self.calculate_delay(attempt)
        if delay > 0:
            logger.debug(f"Retry delay: sleeping for {delay:.2f} seconds")
            await self.sleeper(delay)
