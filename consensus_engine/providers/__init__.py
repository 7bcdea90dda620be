from consensus_engine.providers.base import ProviderAdapter, ProviderOutcome
from consensus_engine.providers.registry import PROVIDER_REGISTRY, build_adapters, register

# Importing the adapter modules registers them.
from consensus_engine.providers.hive import HiveAdapter
from consensus_engine.providers.sensity import SensityAdapter
from consensus_engine.providers.reality_defender import RealityDefenderAdapter

__all__ = [
    "ProviderAdapter",
    "ProviderOutcome",
    "PROVIDER_REGISTRY",
    "build_adapters",
    "register",
    "HiveAdapter",
    "SensityAdapter",
    "RealityDefenderAdapter",
]
