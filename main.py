#!/usr/bin/env python3
"""
Boring Reader command line.

Modes:
  article URL [--feed-name NAME]   extract one article and print the response JSON
  feed URL                         fetch a feed (or discover it from a homepage)
  serve [--host H] [--port P]      run the HTTP API

The article and feed modes print exactly what the HTTP API would return and
exit non-zero when the response reports a failure.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, Optional

from api import ReaderService
from config import config, get_logger
from server import run_server
from telemetry import init_telemetry

# Module-specific logger
logger = get_logger("main")


async def run_article(url: str, feed_name: Optional[str] = None) -> Dict[str, Any]:
    async with ReaderService() as service:
        payload = {"url": url}
        if feed_name:
            payload["feedName"] = feed_name
        return await service.extract_article(payload)


async def run_feed(url: str) -> Dict[str, Any]:
    async with ReaderService() as service:
        return await service.fetch_feed({"url": url})


def _print_result(result: Dict[str, Any]) -> None:
    print(json.dumps(result, indent=2, ensure_ascii=False))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Boring Reader: article and feed extraction')
    parser.add_argument('mode', choices=['article', 'feed', 'serve'], help='Operation mode')
    parser.add_argument('url', nargs='?', help='Article or feed URL (article/feed modes)')
    parser.add_argument('--feed-name', type=str, help='Origin feed label stored on the article')
    parser.add_argument('--host', type=str, help=f'Bind address for serve mode (default: {config.SERVER_HOST})')
    parser.add_argument('--port', type=int, help=f'Port for serve mode (default: {config.SERVER_PORT})')

    args = parser.parse_args()
    if args.mode in ('article', 'feed') and not args.url:
        parser.error(f"{args.mode} mode requires a URL")

    init_telemetry("boring-reader")
    logger.debug(f"Configuration: {config.get_config_summary()}")

    try:
        if args.mode == 'article':
            result = asyncio.run(run_article(args.url, args.feed_name))
            _print_result(result)
            sys.exit(0 if result.get("success") else 1)

        elif args.mode == 'feed':
            result = asyncio.run(run_feed(args.url))
            _print_result(result)
            sys.exit(0 if result.get("success") else 1)

        elif args.mode == 'serve':
            run_server(args.host, args.port)

    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
