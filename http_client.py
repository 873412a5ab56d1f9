#!/usr/bin/env python3
"""
Outbound HTTP client with retry, linear backoff and browser-like identity.

FetchClient wraps an aiohttp ClientSession. Each attempt draws a User-Agent
from a fixed pool and sends the headers a navigating browser would, which
keeps simple anti-bot filters from rejecting the request.
"""

from asyncio import TimeoutError, sleep
from dataclasses import dataclass, field
from socket import gaierror
from typing import Awaitable, Callable, Dict, Optional, Sequence
import random

from aiohttp import ClientError, ClientSession, ClientTimeout

from config import config, get_logger
from errors import DnsError, HttpError, NetworkError
from utils import RetryHelper, format_client_error, summarize_proxy

logger = get_logger("http_client")

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
)

DEFAULT_REFERER = "https://www.google.com/"


def browser_headers(user_agent: str, referer: str = DEFAULT_REFERER) -> Dict[str, str]:
    """Headers of a top-level cross-site navigation from a search engine."""
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Referer": referer,
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "cross-site",
        "Sec-Fetch-User": "?1",
        "Cache-Control": "max-age=0",
    }


def is_dns_failure(error: BaseException) -> bool:
    """True when an aiohttp connection error was caused by name resolution."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, gaierror):
            return True
        os_error = getattr(current, 'os_error', None)
        if isinstance(os_error, gaierror):
            return True
        current = current.__cause__ or current.__context__
    return False


@dataclass
class FetchResponse:
    """A fully read 2xx response."""

    url: str
    status: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    charset: Optional[str] = None

    def text(self) -> str:
        """Decode the body using the declared charset, falling back to UTF-8."""
        encoding = self.charset or "utf-8"
        try:
            return self.body.decode(encoding, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class FetchClient:
    """Issue GET requests with retry on network failures and non-2xx responses."""

    def __init__(
        self,
        session: Optional[ClientSession] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        user_agents: Sequence[str] = USER_AGENTS,
        sleeper: Callable[[float], Awaitable[None]] = sleep,
    ) -> None:
        """
        Args:
            session: Shared aiohttp session; one is opened per call when omitted
            timeout: Total per-attempt timeout in seconds (default: config.HTTP_TIMEOUT)
            max_attempts: Default attempt budget (default: config.MAX_ATTEMPTS)
            base_delay: Default backoff unit in seconds (default: config.RETRY_DELAY_BASE)
            user_agents: Pool the User-Agent header is drawn from
            sleeper: Coroutine used for backoff waits
        """
        self.session = session
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT
        self.max_attempts = max_attempts if max_attempts is not None else config.MAX_ATTEMPTS
        self.base_delay = base_delay if base_delay is not None else config.RETRY_DELAY_BASE
        self.user_agents = tuple(user_agents) or USER_AGENTS
        self.sleeper = sleeper

    def pick_user_agent(self) -> str:
        return random.choice(self.user_agents)

    async def fetch_with_retry(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        proxy: Optional[str] = None,
    ) -> FetchResponse:
        """Fetch ``url``, retrying up to ``max_attempts`` total attempts.

        The delay before attempt n+1 is ``base_delay * n``. When ``headers`` is
        omitted each attempt sends fresh browser headers with a random
        User-Agent.

        Raises:
            HttpError: the final attempt returned a non-2xx status
            DnsError: the final attempt failed to resolve the host
            NetworkError: the final attempt failed to connect or timed out
        """
        retry = RetryHelper(
            max_attempts=max_attempts if max_attempts is not None else self.max_attempts,
            base_delay=base_delay if base_delay is not None else self.base_delay,
            sleeper=self.sleeper,
        )
        if self.session is not None:
            return await self._fetch_loop(self.session, url, headers, retry, proxy)
        async with ClientSession() as session:
            return await self._fetch_loop(session, url, headers, retry, proxy)

    async def _fetch_loop(
        self,
        session: ClientSession,
        url: str,
        headers: Optional[Dict[str, str]],
        retry: RetryHelper,
        proxy: Optional[str],
    ) -> FetchResponse:
        last_error: Exception = NetworkError(f"Failed to fetch {url}")
        proxy_label = summarize_proxy(proxy)
        for attempt in range(1, retry.max_attempts + 1):
            request_headers = dict(headers) if headers else browser_headers(self.pick_user_agent())
            try:
                return await self._attempt(session, url, request_headers, proxy)
            except HttpError as e:
                last_error = e
                logger.warning(f"Fetch attempt {attempt}/{retry.max_attempts} failed for {url}: {e}")
            except TimeoutError:
                last_error = NetworkError(f"Request timed out after {self.timeout}s")
                logger.warning(
                    "Timeout fetching %s (attempt %d/%d, timeout=%ss%s)",
                    url,
                    attempt,
                    retry.max_attempts,
                    self.timeout,
                    f", via {proxy_label}" if proxy_label else "",
                )
            except (ClientError, OSError) as e:
                detail = format_client_error(e)
                if is_dns_failure(e):
                    last_error = DnsError(f"DNS resolution failed for {url}: {detail}")
                    logger.warning(f"DNS error for {url}, retrying ({attempt}/{retry.max_attempts}): {detail}")
                else:
                    last_error = NetworkError(f"Network error: {detail}")
                    logger.warning(f"Fetch attempt {attempt}/{retry.max_attempts} failed for {url}: {detail}")

            if attempt < retry.max_attempts:
                await retry.sleep_for_attempt(attempt)

        logger.error(f"Giving up on {url} after {retry.max_attempts} attempts: {last_error}")
        raise last_error

    async def _attempt(
        self,
        session: ClientSession,
        url: str,
        headers: Dict[str, str],
        proxy: Optional[str],
    ) -> FetchResponse:
        """Perform a single GET and read the whole body within the timeout."""
        request_kwargs = {
            'headers': headers,
            'timeout': ClientTimeout(total=self.timeout),
        }
        if proxy:
            request_kwargs['proxy'] = proxy
        async with session.get(url, **request_kwargs) as response:
            if not 200 <= response.status < 300:
                raise HttpError(response.status, response.reason)
            body = await response.read()
            return FetchResponse(
                url=str(response.url),
                status=response.status,
                body=body,
                headers={k: v for k, v in response.headers.items()},
                charset=response.charset,
            )
