"""
Provider fan-out / fan-in.

Every selected adapter is called concurrently and independently. The join is
"wait for all to settle": a failing, slow or unconfigured provider only
removes its own result from the batch. No retries happen at this layer.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from consensus_engine.providers import ProviderAdapter, ProviderOutcome, build_adapters
from consensus_engine.providers.base import TIMEOUT
from consensus_engine.schemas.analysis import MediaRef, ProviderResult

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "unexpected_error"
CANCELLED = "cancelled"


@dataclass
class OrchestrationReport:
    outcomes: list[ProviderOutcome] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def results(self) -> list[ProviderResult]:
        """Successful results in call-issue order."""
        return [o.result for o in self.outcomes if o.ok]

    @property
    def failures(self) -> dict[str, str]:
        return {o.provider: o.error for o in self.outcomes if not o.ok}


class Orchestrator:
    def __init__(
        self,
        adapters: dict[str, ProviderAdapter],
        timeout_sec: float,
        default_providers: Optional[Iterable[str]] = None,
    ):
        self.adapters = adapters
        self.timeout_sec = timeout_sec
        self.default_providers = list(default_providers) if default_providers is not None else list(adapters)

    @classmethod
    def from_settings(cls, settings) -> "Orchestrator":
        return cls(
            build_adapters(settings),
            timeout_sec=settings.provider_timeout_sec,
            default_providers=settings.default_providers,
        )

    def select(self, providers: Optional[Iterable[str]] = None) -> list[ProviderAdapter]:
        """Resolve requested identifiers to adapters, in registry priority order."""
        requested = set(self.default_providers if providers is None else providers)

        unknown = requested - set(self.adapters)
        if unknown:
            logger.warning(f"[ORCHESTRATOR] Ignoring unknown providers: {sorted(unknown)}")

        return [adapter for name, adapter in self.adapters.items() if name in requested]

    async def _call(self, adapter: ProviderAdapter, media: MediaRef) -> ProviderOutcome:
        try:
            return await asyncio.wait_for(
                adapter.analyze(media.locator_url, media.media_type),
                timeout=self.timeout_sec,
            )
        except asyncio.TimeoutError:
            logger.error(f"[ORCHESTRATOR] {adapter.name} abandoned after {self.timeout_sec}s")
            return ProviderOutcome.absent(adapter.name, TIMEOUT)

    async def run(self, media: MediaRef, providers: Optional[Iterable[str]] = None) -> OrchestrationReport:
        adapters = self.select(providers)
        start = time.monotonic()

        settled = await asyncio.gather(
            *(self._call(adapter, media) for adapter in adapters),
            return_exceptions=True,
        )

        outcomes = []
        for adapter, outcome in zip(adapters, settled):
            if isinstance(outcome, asyncio.CancelledError):
                # A cancelled child only loses its own slot; cancelling run() itself raises at the gather.
                logger.warning(f"[ORCHESTRATOR] {adapter.name} call was cancelled")
                outcome = ProviderOutcome.absent(adapter.name, CANCELLED)
            elif isinstance(outcome, Exception):
                logger.exception(
                    f"[ORCHESTRATOR] {adapter.name} raised unexpectedly", exc_info=outcome
                )
                outcome = ProviderOutcome.absent(adapter.name, UNEXPECTED_ERROR)
            elif isinstance(outcome, BaseException):
                raise outcome
            outcomes.append(outcome)

        report = OrchestrationReport(
            outcomes=outcomes,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        logger.info(
            f"[ORCHESTRATOR] media={media.media_id or media.locator_url[:64]} "
            f"succeeded={[r.provider for r in report.results]} failed={report.failures} "
            f"in {report.duration_ms}ms"
        )
        return report
