#!/usr/bin/env python3
"""
Main-content isolation for article pages.

A scoring pass in the Readability family: paragraph-like elements award points
to their nearest ancestors, scores are discounted by link density and
class/id hints, the best container is picked (climbing to a shared ancestor
when several strong candidates agree) and siblings that plausibly continue
the article are merged in. The result is cleaned of boilerplate and returned
together with a derived title and its plain text.

When the best attempt does not reach ``char_threshold`` characters of text the
page is reported as having no article (``None``), which is what script-rendered
shells and paywall stubs look like.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import urljoin
import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from config import config, get_logger
from errors import ExtractionError
from html_parser import ParsedDocument

logger = get_logger("readability")

FLAG_STRIP_UNLIKELYS = 0x1
FLAG_WEIGHT_CLASSES = 0x2
FLAG_CLEAN_CONDITIONALLY = 0x4

# Tags whose text never counts as readable content
_NON_TEXT_TAGS = frozenset(("script", "style", "noscript", "template"))

_BLOCK_TAGS = frozenset((
    "address", "article", "aside", "blockquote", "dl", "div", "fieldset", "figure", "footer",
    "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "img", "main", "nav", "ol",
    "p", "pre", "section", "select", "table", "ul",
))

_TAGS_TO_SCORE = frozenset(("section", "h2", "h3", "h4", "h5", "h6", "p", "td", "pre"))
_KEEP_TAG_NAMES = frozenset(("div", "article", "section", "p"))
_MEDIA_TAGS = ("img", "embed", "object", "iframe", "video", "audio", "picture", "svg")
_URL_ATTRIBUTES = ("src", "poster")
_PRESENTATIONAL_ATTRIBUTES = (
    "align", "background", "bgcolor", "border", "cellpadding", "cellspacing",
    "frame", "hspace", "rules", "style", "valign", "vspace",
)
_SEPARATOR_CHARS = r"\|\-–—\\\/>»"
_WHITESPACE = re.compile(r"\s+")
_HIDDEN_STYLE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.I)

# <meta property=...> and <meta name=...> keys that can carry the article title
_META_PROPERTY = re.compile(
    r"\s*(article|dc|dcterm|og|twitter)\s*:\s*(author|creator|description|published_time|title|site_name)\s*",
    re.I,
)
_META_NAME = re.compile(
    r"^\s*(?:(dc|dcterm|og|twitter|parsely|weibo:(article|webpage))\s*[-\.:]\s*)?"
    r"(author|creator|pubdate|description|title|site_name)\s*$",
    re.I,
)
_TITLE_KEYS = (
    "dc:title", "dcterm:title", "og:title", "weibo:article:title",
    "weibo:webpage:title", "title", "twitter:title", "parsely-title",
)


@dataclass(frozen=True)
class ScoringRules:
    """Weights and patterns driving candidate scoring.

    Kept separate from control flow so pages that misbehave can be tuned
    without touching the algorithm.
    """

    unlikely_candidates: re.Pattern = re.compile(
        r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|"
        r"footer|gdpr|header|legends|menu|related|remark|replies|rss|shoutbox|sidebar|"
        r"skyscraper|social|sponsor|supplemental|ad-break|agegate|pagination|pager|popup|"
        r"yom-remote",
        re.I,
    )
    maybe_candidate: re.Pattern = re.compile(r"and|article|body|column|content|main|shadow", re.I)
    positive: re.Pattern = re.compile(
        r"article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story",
        re.I,
    )
    negative: re.Pattern = re.compile(
        r"-ad-|hidden|^hid$| hid$| hid |^hid |banner|combx|comment|com-|contact|foot|footer|"
        r"footnote|gdpr|masthead|media|meta|outbrain|promo|related|scroll|share|shoutbox|"
        r"sidebar|skyscraper|sponsor|shopping|tags|tool|widget",
        re.I,
    )
    share_elements: re.Pattern = re.compile(r"(\b|_)(share|sharedaddy)(\b|_)", re.I)
    videos: re.Pattern = re.compile(
        r"//(www\.)?((dailymotion|youtube|youtube-nocookie|player\.vimeo|v\.qq)\.com|"
        r"(archive|upload\.wikimedia)\.org|player\.twitch\.tv)",
        re.I,
    )
    unlikely_roles: frozenset = frozenset(
        ("menu", "menubar", "complementary", "navigation", "alert", "alertdialog", "dialog")
    )
    tag_scores: Mapping[str, int] = field(default_factory=lambda: {
        "div": 5,
        "pre": 3, "td": 3, "blockquote": 3,
        "address": -3, "ol": -3, "ul": -3, "dl": -3, "dd": -3, "dt": -3, "li": -3, "form": -3,
        "h1": -5, "h2": -5, "h3": -5, "h4": -5, "h5": -5, "h6": -5, "th": -5,
    })
    class_weight: int = 25
    min_paragraph_length: int = 25
    ancestor_depth: int = 3
    top_candidate_agreement: int = 3
    alternative_ratio: float = 0.75
    sibling_min_score: float = 10.0
    sibling_ratio: float = 0.2
    share_text_limit: int = 500
    hash_link_weight: float = 0.3


@dataclass
class ReadabilityConfig:
    debug: bool = False
    max_elems_to_parse: int = 0
    nb_top_candidates: int = 10
    char_threshold: int = 250
    classes_to_preserve: Tuple[str, ...] = ("caption", "credit", "highlight")

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> "ReadabilityConfig":
        """Build from a ``readability:`` style mapping, ignoring bad values."""
        values = dict(config.READABILITY if values is None else values)
        defaults = cls()
        preserve = values.get("classes_to_preserve", defaults.classes_to_preserve) or ()
        if isinstance(preserve, str):
            preserve = preserve.split()
        result = cls(
            debug=bool(values.get("debug", defaults.debug)),
            classes_to_preserve=tuple(str(name) for name in preserve),
        )
        for key in ("max_elems_to_parse", "nb_top_candidates", "char_threshold"):
            raw = values.get(key, getattr(defaults, key))
            try:
                number = int(raw)
            except (TypeError, ValueError):
                logger.warning(f"Invalid readability {key} {raw!r}, using default {getattr(defaults, key)}")
                continue
            if number < 0 or (key == "nb_top_candidates" and number < 1):
                logger.warning(f"Readability {key} out of range ({number}), using default {getattr(defaults, key)}")
                continue
            setattr(result, key, number)
        return result


@dataclass
class ReadableArticle:
    title: str
    content: str
    text_content: str

    @property
    def length(self) -> int:
        return len(self.text_content)


def _match_string(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return f"{' '.join(classes)} {tag.get('id') or ''}"


def _in_tree(node, root) -> bool:
    current = node
    while current is not None:
        if current is root:
            return True
        current = current.parent
    return False


def _has_ancestor(tag: Tag, names: Sequence[str]) -> bool:
    parent = tag.parent
    while isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
        if parent.name in names:
            return True
        parent = parent.parent
    return False


def _raw_text(tag: Tag) -> str:
    parts = []
    for node in tag.descendants:
        # Tags, comments, doctypes and script/style string containers are skipped
        if type(node) is not NavigableString:
            continue
        if node.parent is not None and node.parent.name in _NON_TEXT_TAGS:
            continue
        parts.append(str(node))
    return "".join(parts)


def inner_text(tag: Tag) -> str:
    """Visible text with whitespace runs collapsed."""
    return _WHITESPACE.sub(" ", _raw_text(tag)).strip()


def _word_count(text: str) -> int:
    return len(text.split())


class ReadabilityEngine:
    """Isolate the main article of a parsed page."""

    def __init__(self, settings: Optional[ReadabilityConfig] = None, rules: Optional[ScoringRules] = None):
        self.settings = settings or ReadabilityConfig.from_mapping()
        self.rules = rules or ScoringRules()
        self._preserved = frozenset(self.settings.classes_to_preserve)

    def _log(self, message: str, *args) -> None:
        if self.settings.debug:
            logger.debug(message, *args)

    # ----- public entry point -----

    def isolate_article(self, document: ParsedDocument) -> Optional[ReadableArticle]:
        """Return title, cleaned HTML and plain text, or None when no article is found.

        Raises:
            ExtractionError: the page has more elements than ``max_elems_to_parse``
        """
        limit = self.settings.max_elems_to_parse
        if limit > 0:
            element_count = len(document.soup.find_all(True))
            if element_count > limit:
                raise ExtractionError(f"Aborting parsing document; {element_count} elements found")

        title = self._metadata_title(document) or self._article_title(document)
        markup = str(document.soup)
        flags = FLAG_STRIP_UNLIKELYS | FLAG_WEIGHT_CLASSES | FLAG_CLEAN_CONDITIONALLY

        while True:
            # Every attempt works on a fresh tree since scoring mutates it
            soup = BeautifulSoup(markup, "html.parser")
            article = self._grab_article(soup, flags)
            text_length = len(inner_text(article)) if article is not None else 0
            if article is not None and text_length >= self.settings.char_threshold:
                break

            self._log("Attempt with flags %s yielded %d characters", bin(flags), text_length)
            if flags & FLAG_STRIP_UNLIKELYS:
                flags ^= FLAG_STRIP_UNLIKELYS
            elif flags & FLAG_WEIGHT_CLASSES:
                flags ^= FLAG_WEIGHT_CLASSES
            elif flags & FLAG_CLEAN_CONDITIONALLY:
                flags ^= FLAG_CLEAN_CONDITIONALLY
            else:
                logger.info(f"No readable content found in {document.base_url}")
                return None

        page = self._post_process(soup, article, document.base_url)
        text_content = _raw_text(page).strip()
        return ReadableArticle(title=title, content=str(page), text_content=text_content)

    # ----- title -----

    def _metadata_title(self, document: ParsedDocument) -> str:
        """Title declared in <meta> tags; later tags override earlier ones with the same key."""
        values: Dict[str, str] = {}
        for meta in document.soup.find_all("meta"):
            content = meta.get("content")
            if not isinstance(content, str) or not content.strip():
                continue
            content = content.strip()
            matched = False
            prop = meta.get("property")
            if isinstance(prop, str):
                for match in _META_PROPERTY.finditer(prop):
                    values[_WHITESPACE.sub("", match.group(0)).lower()] = content
                    matched = True
            name = meta.get("name")
            if not matched and isinstance(name, str) and _META_NAME.match(name):
                values[_WHITESPACE.sub("", name).lower().replace(".", ":")] = content
        for key in _TITLE_KEYS:
            if values.get(key):
                return values[key]
        return ""

    def _article_title(self, document: ParsedDocument) -> str:
        original = document.title
        current = original
        had_separator = False

        if re.search(rf" [{_SEPARATOR_CHARS}] ", original):
            had_separator = True
            current = re.sub(rf"(.*)[{_SEPARATOR_CHARS}] .*", r"\1", original)
            if _word_count(current) < 3:
                current = re.sub(rf"^[^{_SEPARATOR_CHARS}]*[{_SEPARATOR_CHARS}]", "", original)
        elif ": " in current:
            headings = [inner_text(h) for h in document.soup.find_all(["h1", "h2"])]
            if current.strip() not in headings:
                current = original[original.rfind(":") + 1:]
                if _word_count(current) < 3:
                    current = original[original.find(":") + 1:]
                elif _word_count(original[:original.find(":")]) > 5:
                    current = original
        elif len(current) > 150 or len(current) < 15:
            h1s = document.soup.find_all("h1")
            if len(h1s) == 1:
                current = inner_text(h1s[0])

        current = _WHITESPACE.sub(" ", current).strip()
        words = _word_count(current)
        if words <= 4 and (
            not had_separator
            or words != _word_count(re.sub(rf"[{_SEPARATOR_CHARS}]+", "", original)) - 1
        ):
            current = original
        return current

    # ----- scoring -----

    def _class_weight(self, tag: Tag, flags: int) -> int:
        if not flags & FLAG_WEIGHT_CLASSES:
            return 0
        weight = 0
        for value in (" ".join(tag.get("class") or []), tag.get("id") or ""):
            if not value:
                continue
            if self.rules.negative.search(value):
                weight -= self.rules.class_weight
            if self.rules.positive.search(value):
                weight += self.rules.class_weight
        return weight

    def _link_density(self, tag: Tag) -> float:
        text_length = len(inner_text(tag))
        if not text_length:
            return 0.0
        link_length = 0.0
        for link in tag.find_all("a"):
            href = link.get("href") or ""
            coefficient = self.rules.hash_link_weight if href.startswith("#") and len(href) > 1 else 1.0
            link_length += len(inner_text(link)) * coefficient
        return link_length / text_length

    def _is_preserved(self, tag: Tag) -> bool:
        classes = tag.get("class") or []
        return any(name in self._preserved for name in classes)

    def _is_probably_visible(self, tag: Tag) -> bool:
        if _HIDDEN_STYLE.search(tag.get("style") or ""):
            return False
        if tag.has_attr("hidden"):
            return False
        if tag.get("aria-hidden") == "true" and "fallback-image" not in (tag.get("class") or []):
            return False
        return True

    def _ancestors(self, tag: Tag) -> List[Tag]:
        result = []
        parent = tag.parent
        while isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
            result.append(parent)
            if len(result) >= self.rules.ancestor_depth:
                break
            parent = parent.parent
        return result

    def _has_block_child(self, tag: Tag) -> bool:
        return any(isinstance(child, Tag) and (child.name in _BLOCK_TAGS or self._has_block_child(child))
                   for child in tag.children)

    def _collect_candidates(self, soup: BeautifulSoup, body: Tag, flags: int) -> List[Tag]:
        """Drop hidden/unlikely nodes and return the elements worth scoring."""
        to_score: List[Tag] = []
        for node in list(body.find_all(True)):
            if not _in_tree(node, soup):
                continue
            match = _match_string(node)

            if not self._is_probably_visible(node):
                self._log("Removing hidden node %s", match)
                node.extract()
                continue

            preserved = self._is_preserved(node)
            if flags & FLAG_STRIP_UNLIKELYS and not preserved:
                unlikely = (
                    self.rules.unlikely_candidates.search(match)
                    and not self.rules.maybe_candidate.search(match)
                    and not _has_ancestor(node, ("table", "code"))
                    and node.name not in ("body", "a")
                )
                if unlikely or node.get("role") in self.rules.unlikely_roles:
                    self._log("Removing unlikely candidate %s %s", node.name, match)
                    node.extract()
                    continue

            if node.name in ("div", "section", "header", "h1", "h2", "h3", "h4", "h5", "h6") \
                    and not inner_text(node) and not node.find(_MEDIA_TAGS):
                node.extract()
                continue

            if node.name in _TAGS_TO_SCORE:
                to_score.append(node)

            if node.name == "div":
                if not self._has_block_child(node):
                    node.name = "p"
                    to_score.append(node)
                else:
                    for child in list(node.children):
                        if isinstance(child, NavigableString) and not isinstance(child, Comment) \
                                and child.strip():
                            paragraph = soup.new_tag("p")
                            child.wrap(paragraph)
                            to_score.append(paragraph)
        return to_score

    def _grab_article(self, soup: BeautifulSoup, flags: int) -> Optional[Tag]:
        body = soup.body or soup
        to_score = self._collect_candidates(soup, body, flags)

        scores: Dict[int, float] = {}
        nodes: Dict[int, Tag] = {}

        def initialize(tag: Tag) -> None:
            scores[id(tag)] = self.rules.tag_scores.get(tag.name, 0) + self._class_weight(tag, flags)
            nodes[id(tag)] = tag

        for element in to_score:
            if not _in_tree(element, soup) or not isinstance(element.parent, Tag):
                continue
            text = inner_text(element)
            if len(text) < self.rules.min_paragraph_length:
                continue
            ancestors = self._ancestors(element)
            if not ancestors:
                continue

            content_score = 1 + text.count(",") + text.count("，") + min(len(text) // 100, 3)
            for level, ancestor in enumerate(ancestors):
                if id(ancestor) not in scores:
                    initialize(ancestor)
                divider = 1 if level == 0 else 2 if level == 1 else level * 3
                scores[id(ancestor)] += content_score / divider

        ranked: List[Tag] = []
        for key, tag in nodes.items():
            scores[key] *= 1 - self._link_density(tag)
            ranked.append(tag)
        ranked.sort(key=lambda tag: scores[id(tag)], reverse=True)
        top_candidates = ranked[:self.settings.nb_top_candidates]
        for tag in top_candidates:
            self._log("Candidate %s %s scored %.2f", tag.name, _match_string(tag), scores[id(tag)])

        top = top_candidates[0] if top_candidates else None
        if top is None or top is body or top.name in ("body", "html"):
            # Nothing usable: treat the whole body as one candidate
            top = soup.new_tag("div")
            for child in list(body.contents):
                top.append(child.extract())
            body.append(top)
            initialize(top)
        else:
            top = self._shared_ancestor(top, top_candidates, scores, body)
            if id(top) not in scores:
                initialize(top)
            top = self._climb_while_improving(top, scores, body)
            while not self._is_root(top.parent, body) \
                    and len([c for c in top.parent.children if isinstance(c, Tag)]) == 1:
                top = top.parent
            if id(top) not in scores:
                initialize(top)

        article = self._merge_siblings(soup, top, scores)
        self._prepare_article(article, flags)
        return article

    def _is_root(self, node, body: Tag) -> bool:
        return node is None or node is body or isinstance(node, BeautifulSoup) or node.name in ("body", "html")

    def _shared_ancestor(self, top: Tag, candidates: List[Tag], scores: Dict[int, float], body: Tag) -> Tag:
        """Climb to an ancestor shared by several strong alternative candidates."""
        top_score = scores[id(top)]
        if top_score <= 0:
            return top
        alternatives = []
        for candidate in candidates[1:]:
            if scores[id(candidate)] / top_score >= self.rules.alternative_ratio:
                alternatives.append({id(a) for a in self._all_ancestors(candidate)})
        if len(alternatives) < self.rules.top_candidate_agreement:
            return top

        parent = top.parent
        while not self._is_root(parent, body):
            agreeing = sum(1 for ancestors in alternatives if id(parent) in ancestors)
            if agreeing >= self.rules.top_candidate_agreement:
                self._log("Promoting shared ancestor %s", parent.name)
                return parent
            parent = parent.parent
        return top

    def _all_ancestors(self, tag: Tag) -> List[Tag]:
        result = []
        parent = tag.parent
        while isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
            result.append(parent)
            parent = parent.parent
        return result

    def _climb_while_improving(self, top: Tag, scores: Dict[int, float], body: Tag) -> Tag:
        last_score = scores[id(top)]
        threshold = last_score / 3
        parent = top.parent
        while not self._is_root(parent, body):
            if id(parent) not in scores:
                parent = parent.parent
                continue
            parent_score = scores[id(parent)]
            if parent_score < threshold:
                break
            if parent_score > last_score:
                return parent
            last_score = parent_score
            parent = parent.parent
        return top

    def _merge_siblings(self, soup: BeautifulSoup, top: Tag, scores: Dict[int, float]) -> Tag:
        article = soup.new_tag("div")
        top_score = scores.get(id(top), 0.0)
        threshold = max(self.rules.sibling_min_score, top_score * self.rules.sibling_ratio)
        top_classes = top.get("class") or []
        parent = top.parent

        siblings = [child for child in parent.children if isinstance(child, Tag)] if parent is not None else [top]
        for sibling in siblings:
            append = sibling is top
            if not append:
                bonus = 0.0
                if top_classes and (sibling.get("class") or []) == top_classes:
                    bonus += top_score * self.rules.sibling_ratio
                if id(sibling) in scores and scores[id(sibling)] + bonus >= threshold:
                    append = True
                elif sibling.name == "p":
                    density = self._link_density(sibling)
                    text = inner_text(sibling)
                    if len(text) > 80 and density < 0.25:
                        append = True
                    elif 0 < len(text) < 80 and density == 0 and re.search(r"\.( |$)", text):
                        append = True
            if append:
                if sibling.name not in _KEEP_TAG_NAMES:
                    sibling.name = "div"
                article.append(sibling.extract())
        return article

    # ----- cleaning -----

    def _prepare_article(self, article: Tag, flags: int) -> None:
        for tag in article.find_all(True):
            for attr in _PRESENTATIONAL_ATTRIBUTES:
                if attr in tag.attrs:
                    del tag[attr]

        if flags & FLAG_CLEAN_CONDITIONALLY:
            self._clean_conditionally(article, "form", flags)
            self._clean_conditionally(article, "fieldset", flags)
        for name in ("object", "embed", "footer", "link", "aside"):
            self._clean(article, name)

        for tag in list(article.find_all(True)):
            if _in_tree(tag, article) and not self._is_preserved(tag) \
                    and self.rules.share_elements.search(_match_string(tag)) \
                    and len(inner_text(tag)) < self.rules.share_text_limit:
                tag.extract()

        for name in ("iframe", "input", "textarea", "select", "button"):
            self._clean(article, name)
        for heading in article.find_all(["h1", "h2"]):
            if self._class_weight(heading, flags) < 0:
                heading.extract()

        if flags & FLAG_CLEAN_CONDITIONALLY:
            for name in ("table", "ul", "div"):
                self._clean_conditionally(article, name, flags)

        for heading in article.find_all("h1"):
            heading.name = "h2"

        for paragraph in article.find_all("p"):
            if not paragraph.find(("img", "embed", "object", "iframe")) and not inner_text(paragraph):
                paragraph.extract()

    def _is_video_embed(self, tag: Tag) -> bool:
        values = " ".join(str(v) for v in tag.attrs.values())
        return bool(self.rules.videos.search(values))

    def _clean(self, article: Tag, name: str) -> None:
        embeds = name in ("object", "embed", "iframe")
        for tag in article.find_all(name):
            if self._is_preserved(tag) or (embeds and self._is_video_embed(tag)):
                continue
            tag.extract()

    def _is_data_table(self, table: Tag) -> bool:
        if table.get("role") == "presentation" or table.get("datatable") == "0":
            return False
        if table.get("summary"):
            return True
        caption = table.find("caption")
        if caption is not None and inner_text(caption):
            return True
        if table.find(("col", "colgroup", "tfoot", "thead", "th")):
            return True
        if table.find("table"):
            return False
        rows = table.find_all("tr")
        columns = max((len(row.find_all(("td", "th"))) for row in rows), default=0)
        return len(rows) >= 10 or columns > 4 or len(rows) * columns > 10

    def _clean_conditionally(self, article: Tag, name: str, flags: int) -> None:
        """Remove containers that look like boilerplate judging by their content mix."""
        for tag in reversed(article.find_all(name)):
            if not _in_tree(tag, article) or self._is_preserved(tag):
                continue
            if name == "table" and self._is_data_table(tag):
                continue
            if _has_ancestor(tag, ("code",)):
                continue
            table = tag.find_parent("table")
            if table is not None and _in_tree(table, article) and self._is_data_table(table):
                continue

            weight = self._class_weight(tag, flags)
            if weight < 0:
                self._log("Cleaning %s with negative class weight", name)
                tag.extract()
                continue

            text = inner_text(tag)
            if text.count(",") >= 10:
                continue

            is_list = name in ("ul", "ol")
            paragraphs = len(tag.find_all("p"))
            images = len(tag.find_all("img"))
            items = len(tag.find_all("li")) - 100
            inputs = len(tag.find_all("input"))
            embeds = sum(1 for e in tag.find_all(("object", "embed", "iframe")) if not self._is_video_embed(e))
            density = self._link_density(tag)
            in_figure = _has_ancestor(tag, ("figure",))

            remove = (
                (images > 1 and paragraphs / images < 0.5 and not in_figure)
                or (not is_list and items > paragraphs)
                or (inputs > paragraphs // 3)
                or (not is_list and len(text) < self.rules.min_paragraph_length
                    and (images == 0 or images > 2) and not in_figure)
                or (not is_list and weight < self.rules.class_weight and density > 0.2)
                or (weight >= self.rules.class_weight and density > 0.5)
                or ((embeds == 1 and len(text) < 75) or embeds > 1)
            )
            if remove:
                self._log("Cleaning conditionally %s (density %.2f)", name, density)
                tag.extract()

    # ----- output -----

    def _post_process(self, soup: BeautifulSoup, article: Tag, base_url: str) -> Tag:
        """Absolutize links, strip classes and wrap the content in a page container."""
        for link in article.find_all("a", href=True):
            href = link["href"].strip()
            if href.lower().startswith("javascript:"):
                children = list(link.children)
                if len(children) == 1 and isinstance(children[0], NavigableString):
                    link.replace_with(NavigableString(str(children[0])))
                else:
                    link.name = "span"
                    del link["href"]
            else:
                link["href"] = urljoin(base_url, href)

        for media in article.find_all(True):
            for attr in _URL_ATTRIBUTES:
                value = media.get(attr)
                if isinstance(value, str) and value.strip():
                    media[attr] = urljoin(base_url, value.strip())
            srcset = media.get("srcset")
            if isinstance(srcset, str) and srcset.strip():
                candidates = []
                for candidate in srcset.split(","):
                    pieces = candidate.strip().split(None, 1)
                    if not pieces:
                        continue
                    pieces[0] = urljoin(base_url, pieces[0])
                    candidates.append(" ".join(pieces))
                media["srcset"] = ", ".join(candidates)

        for tag in article.find_all(True):
            classes = [name for name in (tag.get("class") or []) if name in self._preserved]
            if classes:
                tag["class"] = classes
            elif "class" in tag.attrs:
                del tag["class"]

        page = soup.new_tag("div")
        page["id"] = "readability-page-1"
        page["class"] = "page"
        for child in list(article.contents):
            page.append(child.extract())
        return page
