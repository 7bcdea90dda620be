"""
Unit tests for consensus_engine/services/persistence.py.

Firestore is replaced with MockFirestore via the mock_firebase fixture.
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from consensus_engine.schemas.analysis import MediaRef, MediaType, Verdict
from consensus_engine.services.aggregator import aggregate
from consensus_engine.services.persistence import (
    CONSENSUS_COLLECTION,
    MODERATION_COLLECTION,
    RESULTS_COLLECTION,
    consensus_doc_id,
    get_analysis,
    store_analysis,
)
from tests.conftest import FIXED_NOW, make_result

MEDIA = MediaRef(media_id="vid-1", media_type=MediaType.VIDEO, locator_url="https://cdn.example.com/v.mp4")

RESULTS = [
    make_result("hive_ai", Verdict.DEEPFAKE, ai=10, deepfake=90),
    make_result("sensity_ai", Verdict.DEEPFAKE, ai=20, deepfake=80),
]


def _consensus(results=RESULTS, analyzed_at=FIXED_NOW):
    return aggregate(results, analyzed_at=analyzed_at)


def test_consensus_doc_id():
    assert consensus_doc_id("abc", MediaType.PHOTO) == "photo_abc"


# ---------------------------------------------------------------------------
# store_analysis
# ---------------------------------------------------------------------------


def test_store_writes_rows_consensus_and_digest(mock_firebase):
    store_analysis(MEDIA, _consensus(), RESULTS)

    rows = mock_firebase.collection(RESULTS_COLLECTION).all()
    assert sorted(r["provider_name"] for r in rows) == ["hive_ai", "sensity_ai"]
    assert all(r["media_id"] == "vid-1" and r["media_type"] == "video" for r in rows)
    assert all(r["analyzed_at"] == FIXED_NOW for r in rows)

    consensus = mock_firebase.collection(CONSENSUS_COLLECTION).document("video_vid-1").get().to_dict()
    assert consensus["verdict"] == "deepfake"
    assert consensus["providers_analyzed"] == 2
    assert consensus["media_id"] == "vid-1"
    assert consensus["analyzed_at"] == FIXED_NOW
    assert consensus["last_analyzed_at"] == FIXED_NOW

    digest = mock_firebase.collection(MODERATION_COLLECTION).document("vid-1").get().to_dict()
    assert digest["deepfake_detected"] is True
    assert digest["ai_detection_score"] == pytest.approx(100 - consensus["overall_authenticity_score"])


def test_consensus_is_overwritten_and_rows_accumulate(mock_firebase):
    store_analysis(MEDIA, _consensus(), RESULTS)

    clean = [make_result("hive_ai", Verdict.AUTHENTIC, ai=1, deepfake=1)]
    store_analysis(MEDIA, _consensus(clean, FIXED_NOW + timedelta(minutes=5)), clean)

    consensus_docs = mock_firebase.collection(CONSENSUS_COLLECTION).all()
    assert len(consensus_docs) == 1
    assert consensus_docs[0]["verdict"] == "authentic"
    assert consensus_docs[0]["last_analyzed_at"] == FIXED_NOW + timedelta(minutes=5)
    assert len(mock_firebase.collection(RESULTS_COLLECTION).all()) == 3


def test_digest_merges_into_existing_moderation_doc(mock_firebase):
    mock_firebase.seed(MODERATION_COLLECTION, "vid-1", {"status": "pending", "reports": 2})

    store_analysis(MEDIA, _consensus(), RESULTS)

    doc = mock_firebase.collection(MODERATION_COLLECTION).document("vid-1").get().to_dict()
    assert doc["status"] == "pending"
    assert doc["reports"] == 2
    assert "ai_detection_score" in doc


def test_digest_failure_does_not_block_consensus(mock_firebase):
    mock_firebase.fail_writes(MODERATION_COLLECTION)

    store_analysis(MEDIA, _consensus(), RESULTS)

    assert mock_firebase.collection(CONSENSUS_COLLECTION).document("video_vid-1").get().exists


def test_row_failure_is_logged_not_raised(mock_firebase):
    mock_firebase.fail_writes(RESULTS_COLLECTION)

    store_analysis(MEDIA, _consensus(), RESULTS)

    assert mock_firebase.collection(RESULTS_COLLECTION).all() == []
    assert mock_firebase.collection(CONSENSUS_COLLECTION).document("video_vid-1").get().exists


def test_consensus_failure_raises_500(mock_firebase):
    mock_firebase.fail_writes(CONSENSUS_COLLECTION)

    with pytest.raises(HTTPException) as exc:
        store_analysis(MEDIA, _consensus(), RESULTS)
    assert exc.value.status_code == 500


def test_empty_batch_still_stores_default_consensus(mock_firebase):
    store_analysis(MEDIA, _consensus([]), [])

    consensus = mock_firebase.collection(CONSENSUS_COLLECTION).document("video_vid-1").get().to_dict()
    assert consensus["verdict"] == "uncertain"
    assert consensus["providers_analyzed"] == 0
    assert mock_firebase.collection(RESULTS_COLLECTION).all() == []


def test_bare_url_is_not_persisted(mock_firebase):
    media = MediaRef(media_type=MediaType.VIDEO, locator_url="https://cdn.example.com/v.mp4")

    store_analysis(media, _consensus(), RESULTS)

    assert mock_firebase.collection(RESULTS_COLLECTION).all() == []
    assert mock_firebase.collection(CONSENSUS_COLLECTION).all() == []


def test_store_without_database_raises_503(monkeypatch):
    from consensus_engine.integrations import firebase as fb
    monkeypatch.setattr(fb, "db", None)

    with pytest.raises(HTTPException) as exc:
        store_analysis(MEDIA, _consensus(), RESULTS)
    assert exc.value.status_code == 503


# ---------------------------------------------------------------------------
# get_analysis
# ---------------------------------------------------------------------------


def test_get_analysis_returns_consensus_and_newest_rows_first(mock_firebase):
    store_analysis(MEDIA, _consensus(), RESULTS)
    later = [make_result("reality_defender", Verdict.AUTHENTIC, ai=3, deepfake=3)]
    store_analysis(MEDIA, _consensus(later, FIXED_NOW + timedelta(hours=1)), later)

    stored = get_analysis("vid-1", MediaType.VIDEO)

    assert stored["consensus"]["verdict"] == "authentic"
    assert len(stored["results"]) == 3
    assert stored["results"][0]["provider_name"] == "reality_defender"


def test_get_analysis_is_scoped_by_media_type(mock_firebase):
    store_analysis(MEDIA, _consensus(), RESULTS)

    with pytest.raises(HTTPException) as exc:
        get_analysis("vid-1", MediaType.PHOTO)
    assert exc.value.status_code == 404


def test_get_analysis_missing_raises_404(mock_firebase):
    with pytest.raises(HTTPException) as exc:
        get_analysis("nope", MediaType.VIDEO)
    assert exc.value.status_code == 404
    assert exc.value.detail == "No analysis found"
