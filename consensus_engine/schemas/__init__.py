from consensus_engine.schemas.analysis import (
    AnalyzeRequest,
    AnalyzeResponse,
    ConsensusRecord,
    MediaRef,
    MediaType,
    ModerationDigest,
    ProviderResult,
    Recommendation,
    Verdict,
)
from consensus_engine.schemas.providers import (
    HiveResponse,
    RealityDefenderResponse,
    SensityResponse,
)

__all__ = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "ConsensusRecord",
    "MediaRef",
    "MediaType",
    "ModerationDigest",
    "ProviderResult",
    "Recommendation",
    "Verdict",
    "HiveResponse",
    "RealityDefenderResponse",
    "SensityResponse",
]
