#!/usr/bin/env python3
"""
HTTP surface for the reader service.

POST /api/article  {"url": ..., "feedName": ...}
POST /api/rss      {"url": ...}

Pipeline failures answer 400 with the structured error body, a body that is
not JSON answers 500, and GET on either path answers 405.
"""

from json import JSONDecodeError
from typing import Any, Dict, Optional, Tuple

from aiohttp import web

from api import INTERNAL_MESSAGE, ReaderService, failure
from config import config, get_logger
from errors import ErrorCode

logger = get_logger("server")

SERVICE_KEY = web.AppKey("reader_service", ReaderService)


def _respond(result: Dict[str, Any]) -> web.Response:
    return web.json_response(result, status=200 if result.get("success") else 400)


async def _read_payload(request: web.Request) -> Tuple[Any, Optional[web.Response]]:
    try:
        return await request.json(), None
    except (JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Invalid JSON body on {request.path}: {e}")
        return None, web.json_response(failure(INTERNAL_MESSAGE, ErrorCode.INTERNAL_ERROR), status=500)


async def handle_article(request: web.Request) -> web.Response:
    payload, error = await _read_payload(request)
    if error is not None:
        return error
    return _respond(await request.app[SERVICE_KEY].extract_article(payload))


async def handle_feed(request: web.Request) -> web.Response:
    payload, error = await _read_payload(request)
    if error is not None:
        return error
    return _respond(await request.app[SERVICE_KEY].fetch_feed(payload))


async def method_not_allowed(request: web.Request) -> web.Response:
    return web.json_response(
        failure("Method not allowed", ErrorCode.METHOD_NOT_ALLOWED),
        status=405,
        headers={"Allow": "POST"},
    )


async def _start_service(app: web.Application) -> None:
    await app[SERVICE_KEY].start()


async def _close_service(app: web.Application) -> None:
    await app[SERVICE_KEY].close()


def create_app(service: ReaderService | None = None) -> web.Application:
    """Build the aiohttp application; the service is started and closed with it."""
    app = web.Application()
    app[SERVICE_KEY] = service or ReaderService()
    app.router.add_post("/api/article", handle_article)
    app.router.add_get("/api/article", method_not_allowed, allow_head=False)
    app.router.add_post("/api/rss", handle_feed)
    app.router.add_get("/api/rss", method_not_allowed, allow_head=False)
    app.on_startup.append(_start_service)
    app.on_cleanup.append(_close_service)
    return app


def run_server(host: str | None = None, port: int | None = None) -> None:
    host = host or config.SERVER_HOST
    port = port or config.SERVER_PORT
    logger.info(f"Serving on http://{host}:{port}")
    web.run_app(create_app(), host=host, port=port, print=None)
