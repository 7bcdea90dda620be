"""
Hive AI adapter. Dual-model: a generic AI-generation classifier plus a
deepfake classifier selected by media type.
"""

from consensus_engine.providers.base import ProviderAdapter, clamp_score
from consensus_engine.providers.registry import register
from consensus_engine.schemas.analysis import MediaType, ProviderResult, Verdict
from consensus_engine.schemas.providers import HiveResponse

AI_GENERATED_MODEL = 0
DEEPFAKE_MODEL = 1


def hive_verdict(ai_generated_score: float, deepfake_score: float) -> Verdict:
    max_score = max(ai_generated_score, deepfake_score)
    if max_score >= 80:
        return Verdict.DEEPFAKE if deepfake_score > ai_generated_score else Verdict.SYNTHETIC
    if max_score >= 60:
        return Verdict.LIKELY_SYNTHETIC
    if max_score >= 40:
        return Verdict.UNCERTAIN
    if max_score >= 20:
        return Verdict.LIKELY_AUTHENTIC
    return Verdict.AUTHENTIC


@register
class HiveAdapter(ProviderAdapter):
    name = "hive_ai"
    response_model = HiveResponse
    priority = 100

    @classmethod
    def from_settings(cls, settings) -> "HiveAdapter":
        return cls(settings.hive_api_key, settings.hive_endpoint, settings.provider_timeout_sec)

    def build_request(self, locator: str, media_type: MediaType) -> tuple[dict, dict]:
        deepfake_model = "deepfake_video" if media_type == MediaType.VIDEO else "deepfake_image"
        headers = {
            "Authorization": f"Token {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "url": locator,
            "models": {
                "ai_generated_media_detection": {},
                deepfake_model: {},
            },
        }
        return headers, payload

    def to_result(self, parsed: HiveResponse, raw: dict, duration_ms: int) -> ProviderResult:
        ai_probability = parsed.class_probability(AI_GENERATED_MODEL, "ai_generated") or 0.0
        deepfake_probability = parsed.class_probability(DEEPFAKE_MODEL, "deepfake", "yes") or 0.0

        ai_generated_score = clamp_score(ai_probability * 100)
        deepfake_score = clamp_score(deepfake_probability * 100)
        diffusion_detected = ai_generated_score > 60

        return ProviderResult(
            provider=self.name,
            ai_generated_score=ai_generated_score,
            deepfake_score=deepfake_score,
            face_swap_score=0.0,
            voice_clone_score=0.0,
            manipulation_score=max(ai_generated_score, deepfake_score),
            confidence=max(ai_generated_score, deepfake_score),
            verdict=hive_verdict(ai_generated_score, deepfake_score),
            gan_detected=False,
            gan_model=None,
            diffusion_detected=diffusion_detected,
            diffusion_model="detected" if diffusion_detected else None,
            raw_response=raw,
            request_duration_ms=duration_ms,
        )
