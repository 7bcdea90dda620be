"""
Outbound HTTP for provider adapters.

One `aiohttp.ClientSession` is opened in the FastAPI lifespan and shared by
every analysis. Each request fans out to one host per provider, so the pool is
bounded per host as well as in total: a slow provider saturating its own slots
cannot starve calls to the others.

Adapters go through `request_session()`, which is also the seam tests patch:

    async with http_client.request_session() as sess:
        async with sess.post(endpoint, json=payload, headers=headers) as response:
            ...
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import aiohttp

from consensus_engine.config import settings

logger = logging.getLogger(__name__)

session: Optional[aiohttp.ClientSession] = None


def _new_session() -> aiohttp.ClientSession:
    connector = aiohttp.TCPConnector(
        limit=settings.http_max_connections,
        limit_per_host=settings.http_max_connections_per_provider,
    )
    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=settings.http_timeout_sec),
        raise_for_status=False,
    )


async def initialize() -> None:
    global session
    session = _new_session()
    logger.info(
        f"[STARTUP] Provider HTTP pool ready "
        f"(total={settings.http_max_connections}, per provider={settings.http_max_connections_per_provider})"
    )


async def close() -> None:
    global session
    if session is None:
        return
    if not session.closed:
        await session.close()
        logger.info("[SHUTDOWN] Provider HTTP pool closed")
    session = None


@asynccontextmanager
async def request_session():
    """
    Yield the pooled session, or a one-off session when called outside the
    application lifespan (scripts, direct adapter use). Only the one-off
    session is closed here.
    """
    if session is not None and not session.closed:
        yield session
        return

    logger.debug("[HTTP] No pooled session; opening a one-off session")
    one_off = _new_session()
    try:
        yield one_off
    finally:
        await one_off.close()
