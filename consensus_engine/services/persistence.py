"""
Persistence & propagation of analysis runs to Firestore.

Three independent writes per run:
  - ai_detection_results   one append-only document per provider result
  - ai_detection_consensus one document per (media_type, media_id), overwritten
  - content_moderation     digest merged into the media's moderation document

Only the consensus write is load-bearing: its failure is raised to the caller.
Result rows and the moderation digest are best-effort and only logged.

The Firebase `db` client is accessed at call-time via the integration module
so it picks up the instance initialized during the FastAPI lifespan.
"""

import logging
from typing import Sequence

from fastapi import HTTPException
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from consensus_engine.integrations import firebase as firebase_module
from consensus_engine.schemas.analysis import ConsensusRecord, MediaRef, MediaType, ProviderResult
from consensus_engine.services.aggregator import moderation_digest

logger = logging.getLogger(__name__)

RESULTS_COLLECTION = "ai_detection_results"
CONSENSUS_COLLECTION = "ai_detection_consensus"
MODERATION_COLLECTION = "content_moderation"


def _get_db():
    db = firebase_module.db
    if not db:
        raise HTTPException(status_code=503, detail="Database service unavailable.")
    return db


def consensus_doc_id(media_id: str, media_type: MediaType) -> str:
    return f"{media_type.value}_{media_id}"


def _result_row(media: MediaRef, result: ProviderResult, consensus: ConsensusRecord) -> dict:
    row = result.model_dump(mode="json", exclude={"provider"})
    row.update({
        "media_id": media.media_id,
        "media_type": media.media_type.value,
        "provider_name": result.provider,
        "analyzed_at": consensus.analyzed_at,
    })
    return row


def store_provider_results(db, media: MediaRef, results: Sequence[ProviderResult], consensus: ConsensusRecord) -> int:
    """Append one row per result. Returns the number of rows written."""
    written = 0
    for result in results:
        try:
            db.collection(RESULTS_COLLECTION).add(_result_row(media, result, consensus))
            written += 1
        except Exception as e:
            logger.error(f"[PERSIST] Failed to store {result.provider} result for {media.media_id}: {e}")
    return written


def store_consensus(db, media: MediaRef, consensus: ConsensusRecord) -> None:
    doc = consensus.model_dump(mode="json", exclude={"analyzed_at"})
    doc.update({
        "media_id": media.media_id,
        "media_type": media.media_type.value,
        "analyzed_at": consensus.analyzed_at,
        "last_analyzed_at": consensus.analyzed_at,
        "updated_at": firestore.SERVER_TIMESTAMP,
    })
    try:
        db.collection(CONSENSUS_COLLECTION).document(
            consensus_doc_id(media.media_id, media.media_type)
        ).set(doc)
    except Exception as e:
        logger.error(f"[PERSIST] Consensus write failed for {media.media_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to store analysis result")


def propagate_moderation_digest(db, media: MediaRef, consensus: ConsensusRecord) -> bool:
    digest = moderation_digest(consensus)
    try:
        db.collection(MODERATION_COLLECTION).document(media.media_id).set(
            {**digest.model_dump(), "ai_detection_updated_at": firestore.SERVER_TIMESTAMP},
            merge=True,
        )
        return True
    except Exception as e:
        logger.warning(f"[PERSIST] Moderation digest not propagated for {media.media_id}: {e}")
        return False


def store_analysis(media: MediaRef, consensus: ConsensusRecord, results: Sequence[ProviderResult]) -> None:
    """
    Persist one analysis run. No-op when the caller analysed a bare URL
    without a mediaId, since there is no record to key the rows on.
    """
    if not media.media_id:
        logger.info("[PERSIST] No mediaId supplied; skipping persistence")
        return

    db = _get_db()
    written = store_provider_results(db, media, results, consensus)
    store_consensus(db, media, consensus)
    propagated = propagate_moderation_digest(db, media, consensus)

    logger.info(
        f"[PERSIST] {media.media_type.value}/{media.media_id}: "
        f"{written}/{len(results)} result rows, consensus stored, digest={'ok' if propagated else 'skipped'}"
    )


def get_analysis(media_id: str, media_type: MediaType) -> dict:
    """
    Fetch the stored consensus and the per-provider rows (newest first).
    Raises 404 when nothing has been stored for this media item.
    """
    db = _get_db()

    snapshot = db.collection(CONSENSUS_COLLECTION).document(consensus_doc_id(media_id, media_type)).get()
    consensus = snapshot.to_dict() if snapshot.exists else None

    query = (
        db.collection(RESULTS_COLLECTION)
        .where(filter=FieldFilter("media_id", "==", media_id))
        .where(filter=FieldFilter("media_type", "==", media_type.value))
    )
    results = [doc.to_dict() for doc in query.stream()]
    # Sorted client-side so the query needs no composite index.
    results.sort(key=lambda r: r["analyzed_at"].timestamp() if r.get("analyzed_at") else 0.0, reverse=True)

    if not consensus and not results:
        raise HTTPException(status_code=404, detail="No analysis found")

    return {"consensus": consensus, "results": results}
