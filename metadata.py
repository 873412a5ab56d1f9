#!/usr/bin/env python3
"""
Descriptive metadata from <meta> tags and the document title.

Each field is looked up in a fixed precedence order; the first non-empty value
wins. A lookup reads the matched tag's ``content`` attribute or, when that is
absent, its text.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from bs4 import Tag

from config import get_logger
from html_parser import ParsedDocument
from utils import isoformat_utc

logger = get_logger("metadata")

# (attribute, value) pairs tried in order for each field
TITLE_SOURCES: Tuple[Tuple[str, str], ...] = (("property", "og:title"), ("name", "twitter:title"))
DESCRIPTION_SOURCES = (("property", "og:description"), ("name", "description"))
AUTHOR_SOURCES = (("name", "author"), ("property", "article:author"))
DATE_SOURCES = (("property", "article:published_time"), ("name", "date"))
IMAGE_SOURCES = (("property", "og:image"), ("name", "twitter:image"))
SITE_NAME_SOURCES = (("property", "og:site_name"),)


@dataclass
class Metadata:
    title: str
    description: str
    author: str
    publish_date: str
    image: Optional[str]
    site_name: str


def _tag_value(tag: Tag) -> str:
    content = tag.get("content")
    if content is None:
        content = tag.get_text()
    if isinstance(content, list):
        content = " ".join(content)
    return content.strip()


def _first_meta(document: ParsedDocument, sources: Sequence[Tuple[str, str]]) -> Optional[str]:
    for attr, value in sources:
        # Attribute values are matched case-insensitively, as og:/twitter: casing varies in the wild
        for tag in document.soup.find_all("meta", attrs={attr: True}):
            if str(tag.get(attr, "")).strip().lower() != value:
                continue
            text = _tag_value(tag)
            if text:
                return text
    return None


def extract_metadata(document: ParsedDocument, now: Optional[datetime] = None) -> Metadata:
    """Collect title, description, author, publish date, image and site name.

    Args:
        document: Parsed page
        now: Timestamp used when no publish date is advertised (default: current time)
    """
    title = _first_meta(document, TITLE_SOURCES) or document.title or "Untitled"
    description = _first_meta(document, DESCRIPTION_SOURCES) or ""
    author = _first_meta(document, AUTHOR_SOURCES) or "Unknown"
    publish_date = _first_meta(document, DATE_SOURCES) or isoformat_utc(now)

    image = _first_meta(document, IMAGE_SOURCES)
    site_name = _first_meta(document, SITE_NAME_SOURCES) or ""

    logger.debug(f"Metadata for {document.base_url}: title={title!r} author={author!r}")
    return Metadata(
        title=title,
        description=description,
        author=author,
        publish_date=publish_date,
        image=image,
        site_name=site_name,
    )
