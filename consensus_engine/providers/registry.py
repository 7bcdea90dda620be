"""
Provider registry: identifier → adapter class.

Adding a provider means writing one `ProviderAdapter` subclass and decorating
it with `@register`; the orchestrator discovers it from here.
"""

import logging

from consensus_engine.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

PROVIDER_REGISTRY: dict[str, type[ProviderAdapter]] = {}


def register(cls: type[ProviderAdapter]) -> type[ProviderAdapter]:
    if cls.name in PROVIDER_REGISTRY:
        raise ValueError(f"Provider '{cls.name}' is already registered")
    PROVIDER_REGISTRY[cls.name] = cls
    return cls


def build_adapters(settings) -> dict[str, ProviderAdapter]:
    """Instantiate every registered adapter, highest priority first."""
    ordered = sorted(PROVIDER_REGISTRY.values(), key=lambda c: c.priority, reverse=True)
    adapters = {cls.name: cls.from_settings(settings) for cls in ordered}
    enabled = [name for name, adapter in adapters.items() if adapter.configured]
    logger.info(f"[STARTUP] Providers registered: {list(adapters)} (configured: {enabled})")
    return adapters
