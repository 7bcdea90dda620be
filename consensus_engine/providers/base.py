"""
Shared adapter contract for third-party detection providers.

An adapter turns one provider's HTTP API into a canonical `ProviderResult`.
Provider-level failures (missing credential, non-2xx, unparseable body,
network error, timeout) are absorbed here and reported as an absent
`ProviderOutcome`; they are never raised past `analyze()`.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Optional

import aiohttp
from pydantic import BaseModel, ValidationError

from consensus_engine.integrations import http_client as http_module
from consensus_engine.schemas.analysis import MediaType, ProviderResult

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not_configured"
UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
TIMEOUT = "timeout"
NETWORK_ERROR = "network_error"
INVALID_RESPONSE = "invalid_response"


def clamp_score(value: float) -> float:
    """Clamp a 0–100 score; providers occasionally report probabilities above 1."""
    return max(0.0, min(100.0, value))


@dataclass(frozen=True)
class ProviderOutcome:
    """Result of one adapter call: either a `ProviderResult` or an absence reason."""
    provider: str
    result: Optional[ProviderResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def success(cls, result: ProviderResult) -> "ProviderOutcome":
        return cls(provider=result.provider, result=result)

    @classmethod
    def absent(cls, provider: str, reason: str) -> "ProviderOutcome":
        return cls(provider=provider, error=reason)


class ProviderAdapter(ABC):
    name: ClassVar[str]
    response_model: ClassVar[type[BaseModel]]

    # Capability metadata used by the orchestrator
    priority: ClassVar[int] = 0
    supports_video: ClassVar[bool] = True
    supports_photo: ClassVar[bool] = True

    def __init__(self, api_key: Optional[str], endpoint: str, timeout_sec: float):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout_sec = timeout_sec

    @classmethod
    @abstractmethod
    def from_settings(cls, settings) -> "ProviderAdapter":
        ...

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def supports(self, media_type: MediaType) -> bool:
        if media_type == MediaType.VIDEO:
            return self.supports_video
        return self.supports_photo

    @abstractmethod
    def build_request(self, locator: str, media_type: MediaType) -> tuple[dict, dict]:
        """Return (headers, json_payload) for the provider call."""

    @abstractmethod
    def to_result(self, parsed: Any, raw: dict, duration_ms: int) -> ProviderResult:
        """Map the parsed provider response onto the canonical score model."""

    async def analyze(self, locator: str, media_type: MediaType) -> ProviderOutcome:
        if not self.configured:
            logger.warning(f"[PROVIDER] {self.name}: API key not configured, skipping")
            return ProviderOutcome.absent(self.name, NOT_CONFIGURED)

        if not self.supports(media_type):
            logger.info(f"[PROVIDER] {self.name}: {media_type.value} not supported, skipping")
            return ProviderOutcome.absent(self.name, UNSUPPORTED_MEDIA_TYPE)

        headers, payload = self.build_request(locator, media_type)
        start = time.monotonic()

        try:
            async with http_module.request_session() as sess:
                async with sess.post(
                    self.endpoint,
                    json=payload,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_sec),
                ) as response:
                    if not 200 <= response.status < 300:
                        logger.error(f"[PROVIDER] {self.name} request failed: {response.status}")
                        return ProviderOutcome.absent(self.name, f"http_{response.status}")
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            logger.error(f"[PROVIDER] {self.name} timed out after {self.timeout_sec}s")
            return ProviderOutcome.absent(self.name, TIMEOUT)
        except aiohttp.ClientError as e:
            logger.error(f"[PROVIDER] {self.name} network error: {e}")
            return ProviderOutcome.absent(self.name, NETWORK_ERROR)
        except ValueError as e:
            logger.error(f"[PROVIDER] {self.name} returned malformed JSON: {e}")
            return ProviderOutcome.absent(self.name, INVALID_RESPONSE)

        duration_ms = int((time.monotonic() - start) * 1000)

        if not isinstance(data, dict):
            logger.error(f"[PROVIDER] {self.name} returned a non-object body")
            return ProviderOutcome.absent(self.name, INVALID_RESPONSE)

        try:
            parsed = self.response_model.model_validate(data)
            result = self.to_result(parsed, data, duration_ms)
        except ValidationError as e:
            logger.error(f"[PROVIDER] {self.name} response did not match the expected shape: {e}")
            return ProviderOutcome.absent(self.name, INVALID_RESPONSE)

        logger.info(
            f"[PROVIDER] {self.name}: verdict={result.verdict.value} "
            f"confidence={result.confidence:.1f} in {duration_ms}ms"
        )
        return ProviderOutcome.success(result)
