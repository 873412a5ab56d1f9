#!/usr/bin/env python3
"""
Tolerant HTML parsing into a navigable document.

BeautifulSoup with the built-in html.parser backend accepts unclosed tags,
invalid nesting and missing doctypes, which is what arbitrary public pages
look like.
"""

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urljoin
import re

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from config import get_logger
from errors import ParseError

logger = get_logger("html_parser")

_WHITESPACE = re.compile(r'\s+')


@dataclass
class ParsedDocument:
    """A parsed page together with the URL relative references resolve against."""

    soup: BeautifulSoup
    base_url: str

    @property
    def title(self) -> str:
        """Text of the first <title>, whitespace-collapsed (empty when absent)."""
        node = self.soup.find("title")
        if not isinstance(node, Tag):
            return ""
        return _WHITESPACE.sub(" ", node.get_text()).strip()

    def resolve(self, href: Optional[str]) -> Optional[str]:
        """Resolve ``href`` against the document base, or None when empty."""
        if not href or not href.strip():
            return None
        return urljoin(self.base_url, href.strip())


def parse_html(markup: Union[bytes, str], base_url: str, encoding: Optional[str] = None) -> ParsedDocument:
    """Parse raw page bytes (or text) into a ParsedDocument.

    A ``<base href>`` inside the document overrides ``base_url`` the way a
    browser would.

    Raises:
        ParseError: empty input, markup rejected by the parser, or no elements at all
    """
    if markup is None or not markup.strip():
        raise ParseError("Failed to parse HTML content: empty document")
    try:
        if isinstance(markup, bytes):
            soup = BeautifulSoup(markup, "html.parser", from_encoding=encoding)
        else:
            soup = BeautifulSoup(markup, "html.parser")
    except (ParserRejectedMarkup, AssertionError, ValueError) as e:
        logger.error(f"HTML parsing failed for {base_url}: {e}")
        raise ParseError(f"Failed to parse HTML content: {e}") from e

    if soup.find(True) is None:
        raise ParseError("Failed to parse HTML content: no elements found")

    document_base = base_url
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        document_base = urljoin(base_url, base_tag["href"].strip())

    return ParsedDocument(soup=soup, base_url=document_base)
