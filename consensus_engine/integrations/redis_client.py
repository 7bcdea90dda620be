"""
Upstash Redis integration, used only for per-caller analysis rate limits.

`client` starts as None and stays None when `UPSTASH_REDIS_HOST` /
`UPSTASH_REDIS_PASSWORD` are unset; the rate limiter then counts in memory.
Consuming modules reference `redis_client.client` at call time.
"""

import logging
from typing import Optional

from upstash_redis import Redis

from consensus_engine.config import settings

logger = logging.getLogger(__name__)

client: Optional[Redis] = None


def initialize() -> None:
    global client

    if not (settings.upstash_redis_host and settings.upstash_redis_password):
        logger.warning("[STARTUP] Upstash credentials not set. Analysis rate limits are per-process.")
        return

    try:
        client = Redis(url=settings.upstash_redis_host, token=settings.upstash_redis_password)
    except Exception as e:
        logger.error(f"[STARTUP] Upstash Redis unavailable, rate limits are per-process: {e}")
        client = None
        return
    logger.info(f"[STARTUP] Upstash Redis client bound to {settings.upstash_redis_host}")
