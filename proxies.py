#!/usr/bin/env python3
"""
Proxy fallback chain for the feed path.

Feeds and homepages are fetched through an ordered list of strategies: public
CORS-bypass proxies addressed by a URL template, forwarding HTTP proxies, or a
direct request. The first strategy that returns a 2xx body wins.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple
from urllib.parse import quote

from config import config, get_logger
from errors import FetchError, ReaderError
from http_client import FetchClient
from telemetry import trace_span
from utils import summarize_proxy, validate_url

logger = get_logger("proxies")

TEMPLATE = "template"
HTTP_PROXY = "http"
DIRECT = "direct"


@dataclass(frozen=True)
class ProxyStrategy:
    """One way of reaching a target URL.

    Attributes:
        kind: "template", "http" or "direct"
        target: URL template containing ``{url}`` (template) or proxy URL (http)
    """

    kind: str
    target: Optional[str] = None

    @property
    def label(self) -> str:
        if self.kind == DIRECT:
            return DIRECT
        return summarize_proxy(self.target) or self.kind

    def request_url(self, url: str) -> str:
        if self.kind == TEMPLATE:
            return self.target.replace("{url}", quote(url, safe=""))
        return url

    def forward_proxy(self) -> Optional[str]:
        return self.target if self.kind == HTTP_PROXY else None


def build_strategies(entries: Iterable[Any]) -> List[ProxyStrategy]:
    """Turn configuration entries into strategies, skipping invalid ones.

    Accepted entries: a string template containing ``{url}``, the literal
    ``"direct"``, or a mapping ``{"type": "http", "url": "http://host:port"}``.
    """
    strategies: List[ProxyStrategy] = []
    for entry in entries or []:
        if isinstance(entry, str):
            value = entry.strip()
            if value.lower() == DIRECT:
                strategies.append(ProxyStrategy(DIRECT))
            elif "{url}" in value:
                strategies.append(ProxyStrategy(TEMPLATE, value))
            else:
                logger.warning(f"Skipping proxy template without a {{url}} placeholder: {value}")
        elif isinstance(entry, dict):
            kind = str(entry.get("type", TEMPLATE)).lower()
            target = entry.get("url")
            if kind == DIRECT:
                strategies.append(ProxyStrategy(DIRECT))
            elif kind == HTTP_PROXY and isinstance(target, str) and validate_url(target):
                strategies.append(ProxyStrategy(HTTP_PROXY, target.strip()))
            elif kind == TEMPLATE and isinstance(target, str) and "{url}" in target:
                strategies.append(ProxyStrategy(TEMPLATE, target.strip()))
            else:
                logger.warning(f"Skipping invalid proxy configuration: {entry}")
        else:
            logger.warning(f"Skipping proxy entry of unsupported type {type(entry).__name__}")
    return strategies


class ProxyResolver:
    """Try each strategy in order and return the first successful body."""

    def __init__(self, client: Optional[FetchClient] = None,
                 strategies: Optional[List[ProxyStrategy]] = None,
                 user_agent: Optional[str] = None) -> None:
        self.client = client or FetchClient()
        self.strategies = strategies if strategies is not None else build_strategies(config.PROXIES)
        self.user_agent = user_agent or config.USER_AGENT
        if not self.strategies:
            logger.warning("No usable proxy strategies configured; feed fetches will fail")

    @trace_span(
        "fetch_via_proxy",
        tracer_name="proxies",
        attr_from_args=lambda self, url, expected_content_type="text/xml": {"http.url": url},
    )
    async def fetch_via_proxy(self, url: str, expected_content_type: str = "text/xml") -> str:
        """Fetch ``url`` through the first strategy that answers with 2xx.

        Raises:
            FetchError: every strategy failed; ``failures`` holds one reason per strategy
        """
        headers = {
            "User-Agent": self.user_agent,
            "Accept": expected_content_type,
        }
        failures: List[Tuple[str, str]] = []
        for strategy in self.strategies:
            try:
                response = await self.client.fetch_with_retry(
                    strategy.request_url(url),
                    headers=headers,
                    max_attempts=1,
                    proxy=strategy.forward_proxy(),
                )
            except ReaderError as e:
                failures.append((strategy.label, e.message))
                logger.warning(f"Proxy {strategy.label} failed for {url}: {e.message}")
                continue
            if len(failures):
                logger.info(f"Fetched {url} via {strategy.label} after {len(failures)} failed proxies")
            return response.text()

        raise FetchError("All proxy fetches failed", failures=failures)
