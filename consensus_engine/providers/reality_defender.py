"""Reality Defender adapter: deepfake, GAN, diffusion and manipulation detector."""

from consensus_engine.providers.base import ProviderAdapter, clamp_score
from consensus_engine.providers.registry import register
from consensus_engine.schemas.analysis import MediaType, ProviderResult, Verdict
from consensus_engine.schemas.providers import RealityDefenderResponse

ANALYSIS_TYPES = ["deepfake", "gan", "diffusion", "manipulation"]
DEFAULT_CONFIDENCE = 0.8


def reality_defender_verdict(
    deepfake_score: float, ai_generated_score: float, manipulation_score: float
) -> Verdict:
    if deepfake_score >= 75:
        return Verdict.DEEPFAKE
    if ai_generated_score >= 75:
        return Verdict.SYNTHETIC

    max_score = max(deepfake_score, ai_generated_score, manipulation_score)
    if max_score >= 55:
        return Verdict.LIKELY_SYNTHETIC
    if max_score >= 35:
        return Verdict.UNCERTAIN
    if max_score >= 15:
        return Verdict.LIKELY_AUTHENTIC
    return Verdict.AUTHENTIC


@register
class RealityDefenderAdapter(ProviderAdapter):
    name = "reality_defender"
    response_model = RealityDefenderResponse
    priority = 80

    @classmethod
    def from_settings(cls, settings) -> "RealityDefenderAdapter":
        return cls(
            settings.reality_defender_api_key,
            settings.reality_defender_endpoint,
            settings.provider_timeout_sec,
        )

    def build_request(self, locator: str, media_type: MediaType) -> tuple[dict, dict]:
        headers = {
            "X-API-Key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "media_url": locator,
            "media_type": media_type.value,
            "analysis_types": list(ANALYSIS_TYPES),
        }
        return headers, payload

    def to_result(self, parsed: RealityDefenderResponse, raw: dict, duration_ms: int) -> ProviderResult:
        deepfake_score = clamp_score(parsed.probability("deepfake") * 100)
        gan_score = clamp_score(parsed.probability("gan") * 100)
        diffusion_score = clamp_score(parsed.probability("diffusion") * 100)
        manipulation_score = clamp_score(parsed.probability("manipulation") * 100)
        ai_generated_score = max(gan_score, diffusion_score)

        models = parsed.detected_models
        confidence = parsed.confidence if parsed.confidence else DEFAULT_CONFIDENCE

        return ProviderResult(
            provider=self.name,
            ai_generated_score=ai_generated_score,
            deepfake_score=deepfake_score,
            face_swap_score=clamp_score(parsed.probability("face_swap") * 100),
            voice_clone_score=clamp_score(parsed.probability("voice_clone") * 100),
            manipulation_score=manipulation_score,
            confidence=clamp_score(confidence * 100),
            verdict=reality_defender_verdict(deepfake_score, ai_generated_score, manipulation_score),
            gan_detected=gan_score > 50,
            gan_model=models.gan if models else None,
            diffusion_detected=diffusion_score > 50,
            diffusion_model=models.diffusion if models else None,
            raw_response=raw,
            request_duration_ms=duration_ms,
        )
