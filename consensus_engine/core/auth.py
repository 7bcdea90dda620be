"""
Caller identification: service API keys and client IP extraction.

Keys are configured through `SERVICE_API_KEYS`. When none are configured the
check is skipped (DEV MODE) and callers are identified by IP only.
"""

import hashlib
import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException, Request

from consensus_engine.config import settings

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """Extracts the real client IP from headers, falling back to host."""
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip

    x_forwarded = request.headers.get("x-forwarded-for")
    if x_forwarded:
        return x_forwarded.split(",")[0].strip()

    return request.client.host if request.client else "127.0.0.1"


def key_fingerprint(api_key: str) -> str:
    """Short stable identifier for a key, safe to log and to use as a rate-limit bucket."""
    return hashlib.sha256(api_key.encode()).hexdigest()[:16]


def is_valid_service_key(api_key: Optional[str], configured_keys: list[str]) -> bool:
    if not api_key:
        return False
    return any(hmac.compare_digest(api_key, k) for k in configured_keys)


async def require_service_key(
    request: Request,
    api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> str:
    """
    FastAPI dependency. Returns the caller identifier used for rate limiting:
    `key:<fingerprint>` for keyed callers, `ip:<address>` otherwise.
    """
    configured = settings.service_api_key_list
    if not configured:
        return f"ip:{get_client_ip(request)}"

    if not is_valid_service_key(api_key, configured):
        logger.warning(f"[AUTH] Rejected request from {get_client_ip(request)}: invalid or missing X-API-Key")
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return f"key:{key_fingerprint(api_key)}"
