"""Sensity AI adapter: face-swap, deepfake and synthetic-media detector."""

from consensus_engine.providers.base import ProviderAdapter, clamp_score
from consensus_engine.providers.registry import register
from consensus_engine.schemas.analysis import MediaType, ProviderResult, Verdict
from consensus_engine.schemas.providers import SensityResponse

DETECTION_TYPES = ["face_swap", "deepfake", "synthetic_media"]


def sensity_verdict(face_swap_score: float, deepfake_score: float, synthetic_score: float) -> Verdict:
    # Specific classes win over the generic max-score bands.
    if face_swap_score >= 70:
        return Verdict.FACE_SWAP
    if deepfake_score >= 70:
        return Verdict.DEEPFAKE
    if synthetic_score >= 70:
        return Verdict.SYNTHETIC

    max_score = max(face_swap_score, deepfake_score, synthetic_score)
    if max_score >= 50:
        return Verdict.LIKELY_SYNTHETIC
    if max_score >= 30:
        return Verdict.UNCERTAIN
    if max_score >= 15:
        return Verdict.LIKELY_AUTHENTIC
    return Verdict.AUTHENTIC


@register
class SensityAdapter(ProviderAdapter):
    name = "sensity_ai"
    response_model = SensityResponse
    priority = 90

    @classmethod
    def from_settings(cls, settings) -> "SensityAdapter":
        return cls(settings.sensity_api_key, settings.sensity_endpoint, settings.provider_timeout_sec)

    def build_request(self, locator: str, media_type: MediaType) -> tuple[dict, dict]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"url": locator, "detection_types": list(DETECTION_TYPES)}
        return headers, payload

    def to_result(self, parsed: SensityResponse, raw: dict, duration_ms: int) -> ProviderResult:
        face_swap_score = clamp_score(parsed.probability("face_swap") * 100)
        deepfake_score = clamp_score(parsed.probability("deepfake") * 100)
        synthetic_score = clamp_score(parsed.probability("synthetic_media") * 100)
        voice_clone_score = clamp_score(parsed.probability("voice_clone") * 100)

        manipulation_score = max(face_swap_score, deepfake_score, synthetic_score)
        # A reported confidence of 0 is treated as "not reported".
        if parsed.confidence:
            confidence = clamp_score(parsed.confidence * 100)
        else:
            confidence = manipulation_score

        return ProviderResult(
            provider=self.name,
            ai_generated_score=synthetic_score,
            deepfake_score=deepfake_score,
            face_swap_score=face_swap_score,
            voice_clone_score=voice_clone_score,
            manipulation_score=manipulation_score,
            confidence=confidence,
            verdict=sensity_verdict(face_swap_score, deepfake_score, synthetic_score),
            gan_detected=bool(parsed.gan_detected),
            gan_model=parsed.gan_model,
            diffusion_detected=bool(parsed.diffusion_detected),
            diffusion_model=parsed.diffusion_model,
            raw_response=raw,
            request_duration_ms=duration_ms,
        )
