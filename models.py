#!/usr/bin/env python3
"""
Records produced by the extraction and feed pipelines.

Field names are snake_case in Python; ``to_dict`` renders the camelCase
shape handed to callers and to the persistence layer.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ArticleRecord:
    """A normalized article; immutable once built.

    ``with_cache_flag`` is the only way the serving layer changes a record.
    """

    url: str
    title: str
    author: str
    publish_date: str
    description: str
    image: Optional[str]
    site_name: str
    content: str
    text_content: str
    reading_time: int
    word_count: int
    extracted_at: str
    from_cache: bool = False
    feed_name: Optional[str] = None

    def with_cache_flag(self, from_cache: bool) -> "ArticleRecord":
        return replace(self, from_cache=from_cache)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "author": self.author,
            "publishDate": self.publish_date,
            "description": self.description,
            "image": self.image,
            "siteName": self.site_name,
            "content": self.content,
            "textContent": self.text_content,
            "readingTime": self.reading_time,
            "wordCount": self.word_count,
            "extractedAt": self.extracted_at,
            "fromCache": self.from_cache,
            "feedName": self.feed_name,
        }


@dataclass
class FeedItem:
    title: str
    link: str
    description: str = ""
    pub_date: str = ""
    author: str = "Unknown"
    feed_name: str = "Unknown Feed"
    favicon: Optional[str] = None
    slug: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "pubDate": self.pub_date,
            "author": self.author,
            "feedName": self.feed_name,
            "favicon": self.favicon,
            "slug": self.slug,
        }


@dataclass
class FeedRecord:
    feed_url: str
    title: str
    slug: str
    favicon: Optional[str] = None
    items: List[FeedItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feedUrl": self.feed_url,
            "title": self.title,
            "slug": self.slug,
            "favicon": self.favicon,
            "items": [item.to_dict() for item in self.items],
        }
