"""
Consensus aggregation across provider results.

`aggregate` is a pure function: no I/O and no dependence on input order.
Sums use math.fsum so the averaged scores are bit-identical under any
permutation of the results.
"""

import math
from collections import Counter
from datetime import datetime, timezone
from typing import Optional, Sequence

from consensus_engine.config import settings
from consensus_engine.schemas.analysis import (
    ConsensusRecord,
    ModerationDigest,
    ProviderResult,
    Recommendation,
    Verdict,
)

REJECT_BELOW = 30
FLAG_BELOW = 60


def _mean(values: Sequence[float]) -> float:
    return math.fsum(values) / len(values)


def majority_verdict(results: Sequence[ProviderResult]) -> tuple[Verdict, int]:
    """
    Most common verdict and its count. Ties go to the verdict declared first
    in `Verdict`.
    """
    counts = Counter(r.verdict for r in results)
    best = max(counts.values())
    for verdict in Verdict:
        if counts.get(verdict) == best:
            return verdict, best
    raise ValueError("majority_verdict() requires at least one result")


def recommend(overall_authenticity_score: float, providers_agreed: int, providers_analyzed: int) -> tuple[Recommendation, bool]:
    """Returns (recommendation, requires_human_review)."""
    if overall_authenticity_score < REJECT_BELOW:
        return Recommendation.REJECT, True
    if overall_authenticity_score < FLAG_BELOW:
        return Recommendation.FLAG, True
    if providers_agreed < providers_analyzed:
        return Recommendation.FLAG, True
    return Recommendation.APPROVE, False


def aggregate(results: Sequence[ProviderResult], analyzed_at: Optional[datetime] = None) -> ConsensusRecord:
    if analyzed_at is None:
        analyzed_at = datetime.now(timezone.utc)

    if not results:
        return ConsensusRecord(
            overall_authenticity_score=50,
            ai_generated_probability=0.5,
            deepfake_probability=0.5,
            manipulation_probability=0.5,
            verdict=Verdict.UNCERTAIN,
            verdict_confidence=0,
            providers_analyzed=0,
            providers_agreed=0,
            recommendation=Recommendation.FLAG,
            requires_human_review=True,
            analyzed_at=analyzed_at,
        )

    avg_ai_generated = _mean([r.ai_generated_score for r in results])
    avg_deepfake = _mean([r.deepfake_score for r in results])
    avg_manipulation = _mean([r.manipulation_score for r in results])
    avg_confidence = _mean([r.confidence for r in results])

    verdict, agreed = majority_verdict(results)
    overall = 100 - max(avg_ai_generated, avg_deepfake, avg_manipulation)
    recommendation, requires_review = recommend(overall, agreed, len(results))

    return ConsensusRecord(
        overall_authenticity_score=overall,
        ai_generated_probability=avg_ai_generated / 100,
        deepfake_probability=avg_deepfake / 100,
        manipulation_probability=avg_manipulation / 100,
        verdict=verdict,
        verdict_confidence=avg_confidence,
        providers_analyzed=len(results),
        providers_agreed=agreed,
        recommendation=recommendation,
        requires_human_review=requires_review,
        analyzed_at=analyzed_at,
    )


def moderation_digest(consensus: ConsensusRecord, config=settings) -> ModerationDigest:
    """Project the slice of a consensus record the moderation queue consumes."""
    return ModerationDigest(
        ai_detection_score=100 - consensus.overall_authenticity_score,
        ai_detection_confidence=consensus.verdict_confidence,
        deepfake_detected=(
            consensus.verdict == Verdict.DEEPFAKE
            or consensus.deepfake_probability > config.deepfake_probability_threshold
        ),
        manipulation_detected=consensus.manipulation_probability > config.manipulation_probability_threshold,
    )
