"""
Wire shapes of the third-party detection APIs.

Each provider gets its own model tree with every field optional. The
"missing means zero" defaulting lives in the helper methods here and in the
owning adapter, never in the shared aggregation path.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _probability(value: Optional[float]) -> float:
    return value or 0.0


# --------------------------------------------------------------------------- #
# Hive AI                                                                     #
# --------------------------------------------------------------------------- #


class HiveClass(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = Field(None, alias="class")
    score: Optional[float] = None


class HiveOutput(BaseModel):
    model_config = ConfigDict(extra="allow")

    classes: Optional[list[HiveClass]] = None


class HiveTaskResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    output: Optional[list[HiveOutput]] = None


class HiveStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    response: Optional[HiveTaskResponse] = None


class HiveResponse(BaseModel):
    """status[0] carries the AI-generated model, status[1] the deepfake model."""
    model_config = ConfigDict(extra="allow")

    status: Optional[list[HiveStatus]] = None

    def first_output(self, index: int) -> Optional[HiveOutput]:
        if not self.status or len(self.status) <= index:
            return None
        response = self.status[index].response
        if response is None or not response.output:
            return None
        return response.output[0]

    def class_probability(self, index: int, *class_names: str) -> Optional[float]:
        """
        Probability of the first class matching any of `class_names`.
        Returns None when the model produced no class list at all.
        """
        output = self.first_output(index)
        if output is None or output.classes is None:
            return None
        for cls in output.classes:
            if cls.name in class_names:
                return _probability(cls.score)
        return 0.0


# --------------------------------------------------------------------------- #
# Sensity AI                                                                  #
# --------------------------------------------------------------------------- #


class SensityDetection(BaseModel):
    model_config = ConfigDict(extra="allow")

    probability: Optional[float] = None


class SensityDetections(BaseModel):
    model_config = ConfigDict(extra="allow")

    face_swap: Optional[SensityDetection] = None
    deepfake: Optional[SensityDetection] = None
    synthetic_media: Optional[SensityDetection] = None
    voice_clone: Optional[SensityDetection] = None

    def probability(self, kind: str) -> float:
        detection = getattr(self, kind)
        return _probability(detection.probability) if detection else 0.0


class SensityResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    detections: Optional[SensityDetections] = None
    confidence: Optional[float] = None
    gan_detected: Optional[bool] = None
    gan_model: Optional[str] = None
    diffusion_detected: Optional[bool] = None
    diffusion_model: Optional[str] = None

    def probability(self, kind: str) -> float:
        return self.detections.probability(kind) if self.detections else 0.0


# --------------------------------------------------------------------------- #
# Reality Defender                                                            #
# --------------------------------------------------------------------------- #


class RealityDefenderScores(BaseModel):
    model_config = ConfigDict(extra="allow")

    deepfake: Optional[float] = None
    gan: Optional[float] = None
    diffusion: Optional[float] = None
    manipulation: Optional[float] = None
    face_swap: Optional[float] = None
    voice_clone: Optional[float] = None


class RealityDefenderModels(BaseModel):
    model_config = ConfigDict(extra="allow")

    gan: Optional[str] = None
    diffusion: Optional[str] = None


class RealityDefenderResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    scores: Optional[RealityDefenderScores] = None
    confidence: Optional[float] = None
    detected_models: Optional[RealityDefenderModels] = None

    def probability(self, kind: str) -> float:
        return _probability(getattr(self.scores, kind)) if self.scores else 0.0
