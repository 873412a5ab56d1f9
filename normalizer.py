#!/usr/bin/env python3
"""
RSS/Atom parsing and item normalization.

feedparser does the XML work; this module maps its entries onto FeedItem,
applies the link/description/author fallbacks and normalizes dates to
ISO-8601 UTC.
"""

from calendar import timegm
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from io import BytesIO
from typing import Any, List, Optional, Union
import time

import feedparser
from feedparser.datetimes import _parse_date

from config import get_logger
from errors import NoValidItemsError
from models import FeedItem
from utils import isoformat_utc, slugify

logger = get_logger("normalizer")

FEEDPARSER_OPTIONS = {
    'sanitize_html': True,
    'resolve_relative_uris': True,
}

DATE_FIELDS = ('published', 'updated', 'created', 'date')

CUSTOM_DATE_FORMATS = (
    "%d %b %Y %H:%M:%S %z",
    "%d %b %Y %H:%M:%S %Z",
    "%d %b %Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
)


@dataclass
class ParsedFeed:
    feed_url: str
    title: str
    version: str
    entries: List[Any] = field(default_factory=list)

    @property
    def is_atom(self) -> bool:
        return self.version.startswith('atom')


def parse_feed(body: Union[str, bytes], feed_url: str) -> ParsedFeed:
    """Parse a feed document; relative links resolve against ``feed_url``.

    Malformed XML is tolerated as far as feedparser goes; a document that is
    not a feed at all yields no entries.
    """
    headers = {'content-location': feed_url}
    if isinstance(body, str):
        body = body.encode('utf-8')
        headers['content-type'] = 'application/xml; charset=utf-8'

    feed = feedparser.parse(BytesIO(body), response_headers=headers, **FEEDPARSER_OPTIONS)

    version = getattr(feed, 'version', '') or ''
    logger.info(f"Feed {feed_url} parsed as {version or 'unknown'} format")
    if feed.bozo and hasattr(feed, 'bozo_exception'):
        logger.warning(f"Feed parsing warning for {feed_url}: {feed.bozo_exception}")

    title = (feed.feed.get('title') or '').strip() if 'feed' in feed else ''
    return ParsedFeed(
        feed_url=feed_url,
        title=title or "Untitled Feed",
        version=version,
        entries=list(feed.get('entries') or []),
    )


def _get_entry_value(entry, name: str) -> Any:
    """Safely fetch feedparser entry fields."""
    getter = getattr(entry, 'get', None)
    if callable(getter):
        return getter(name)
    return getattr(entry, name, None)


def _parse_date_string(value: str) -> Optional[datetime]:
    value = value.strip()
    if not value:
        return None
    try:
        time_struct = _parse_date(value)
        if time_struct:
            return datetime.fromtimestamp(timegm(time_struct), tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        pass
    for fmt in CUSTOM_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def normalize_date(value: Any, now: Optional[datetime] = None) -> str:
    """Render a feed date as ISO-8601 UTC; unparseable values become ``now``.

    Accepts date strings, ``time.struct_time`` (feedparser's ``*_parsed``
    fields, always UTC) and datetimes.
    """
    parsed: Optional[datetime] = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, time.struct_time):
        try:
            parsed = datetime.fromtimestamp(timegm(value), tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            parsed = None
    elif isinstance(value, str):
        parsed = _parse_date_string(value)

    if parsed is None:
        if value:
            logger.debug(f"Unparseable date {value!r}, using current time")
        return isoformat_utc(now)
    return isoformat_utc(parsed)


def _entry_date(entry) -> Any:
    """Prefer feedparser's parsed struct for each field, then the raw string."""
    for name in DATE_FIELDS:
        value = _get_entry_value(entry, f"{name}_parsed") or _get_entry_value(entry, name)
        if value:
            return value
    return None


def _entry_description(entry) -> str:
    summary = _get_entry_value(entry, 'summary')
    if summary:
        return summary
    for content in _get_entry_value(entry, 'content') or []:
        value = content.get('value') if hasattr(content, 'get') else None
        if value:
            return value
    return _get_entry_value(entry, 'description') or ""


def _entry_author(entry) -> str:
    author = (_get_entry_value(entry, 'author') or '').strip()
    if author:
        return author
    detail = _get_entry_value(entry, 'author_detail') or {}
    name = (detail.get('name') or '').strip() if hasattr(detail, 'get') else ''
    return name or "Unknown"


def _atom_href(entry) -> str:
    """href of the alternate <link>, else the first <link>; never the entry id."""
    links = [link for link in _get_entry_value(entry, 'links') or [] if (link.get('href') or '').strip()]
    for link in links:
        if link.get('rel', 'alternate') == 'alternate':
            return link['href'].strip()
    return links[0]['href'].strip() if links else ''


def _entry_link(entry, is_atom: bool) -> str:
    if is_atom:
        return _atom_href(entry)
    link = (_get_entry_value(entry, 'link') or '').strip()
    return link or (_get_entry_value(entry, 'id') or '').strip() or "#"


def build_items(parsed: ParsedFeed, feed_name: Optional[str] = None, favicon: Optional[str] = None,
                now: Optional[datetime] = None) -> List[FeedItem]:
    """Turn parsed entries into FeedItems, dropping those without title or link.

    Raises:
        NoValidItemsError: no entry survived the filter
    """
    items: List[FeedItem] = []
    skipped = 0
    for entry in parsed.entries:
        title = (_get_entry_value(entry, 'title') or '').strip()
        link = _entry_link(entry, parsed.is_atom)
        if not title or not link:
            skipped += 1
            continue
        items.append(FeedItem(
            title=title,
            link=link,
            description=_entry_description(entry),
            pub_date=normalize_date(_entry_date(entry), now),
            author=_entry_author(entry),
            feed_name=feed_name or "Unknown Feed",
            favicon=favicon,
            slug=slugify(title) or slugify(link),
        ))

    if skipped:
        logger.info(f"Dropped {skipped} items without title or link from {parsed.feed_url}")
    if not items:
        raise NoValidItemsError("No valid items found in feed")
    return items
