from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaType(str, Enum):
    VIDEO = "video"
    PHOTO = "photo"


class Verdict(str, Enum):
    # Declaration order is the majority-vote tie-break order.
    AUTHENTIC = "authentic"
    LIKELY_AUTHENTIC = "likely_authentic"
    UNCERTAIN = "uncertain"
    LIKELY_SYNTHETIC = "likely_synthetic"
    SYNTHETIC = "synthetic"
    DEEPFAKE = "deepfake"
    FACE_SWAP = "face_swap"
    VOICE_CLONE = "voice_clone"


class Recommendation(str, Enum):
    APPROVE = "approve"
    FLAG = "flag"
    REJECT = "reject"


class MediaRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    media_id: Optional[str] = None   # None when the caller only supplied a URL
    media_type: MediaType
    locator_url: str


class ProviderResult(BaseModel):
    """Canonical output of one provider for one media item. Scores are 0–100."""
    model_config = ConfigDict(frozen=True)

    provider: str
    ai_generated_score: float = Field(ge=0, le=100)
    deepfake_score: float = Field(ge=0, le=100)
    face_swap_score: float = Field(0.0, ge=0, le=100)
    voice_clone_score: float = Field(0.0, ge=0, le=100)
    manipulation_score: float = Field(ge=0, le=100)
    confidence: float = Field(ge=0, le=100)
    verdict: Verdict
    gan_detected: bool = False
    gan_model: Optional[str] = None
    diffusion_detected: bool = False
    diffusion_model: Optional[str] = None
    raw_response: dict[str, Any] = Field(default_factory=dict)
    request_duration_ms: int = 0


class ConsensusRecord(BaseModel):
    overall_authenticity_score: float = Field(ge=0, le=100)
    ai_generated_probability: float = Field(ge=0, le=1)
    deepfake_probability: float = Field(ge=0, le=1)
    manipulation_probability: float = Field(ge=0, le=1)
    verdict: Verdict
    verdict_confidence: float
    providers_analyzed: int
    providers_agreed: int
    recommendation: Recommendation
    requires_human_review: bool
    analyzed_at: datetime
    total_analysis_time_ms: int = 0


class ModerationDigest(BaseModel):
    ai_detection_score: float
    ai_detection_confidence: float
    deepfake_detected: bool
    manipulation_detected: bool


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    media_id: Optional[str] = Field(None, alias="mediaId")
    media_url: Optional[str] = Field(None, alias="mediaUrl")
    media_type: MediaType = Field(MediaType.VIDEO, alias="mediaType")
    providers: Optional[List[str]] = None


class AnalyzeResponse(ConsensusRecord):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    media_id: Optional[str] = Field(None, alias="mediaId")
    media_type: MediaType = Field(alias="mediaType")
    results: List[ProviderResult]
