"""
Media locator resolution: turns a mediaId into a short-lived signed URL the
detection providers can fetch.

The Firebase `db` and `bucket` are accessed at call-time via the integration
module so they pick up the instances initialized during the FastAPI lifespan.
"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import HTTPException

from consensus_engine.config import settings
from consensus_engine.integrations import firebase as firebase_module
from consensus_engine.schemas.analysis import MediaType

logger = logging.getLogger(__name__)

MEDIA_COLLECTIONS = {
    MediaType.VIDEO: "videos",
    MediaType.PHOTO: "photos",
}


def _get_db():
    db = firebase_module.db
    if not db:
        raise HTTPException(status_code=503, detail="Database service unavailable.")
    return db


def sign_storage_path(file_path: str, ttl_sec: int = settings.signed_url_ttl_sec) -> Optional[str]:
    bucket = firebase_module.bucket
    if bucket is None:
        logger.warning("[MEDIA] No storage bucket configured; cannot sign media path")
        return None
    try:
        return bucket.blob(file_path).generate_signed_url(
            expiration=timedelta(seconds=ttl_sec),
            version="v4",
            method="GET",
        )
    except Exception as e:
        logger.error(f"[MEDIA] Failed to sign {file_path}: {e}")
        return None


def resolve_media_url(media_id: Optional[str], media_url: Optional[str], media_type: MediaType) -> Optional[str]:
    """
    An explicit mediaUrl always wins. Otherwise look up the media record's
    storage path and sign it. Returns None when no URL can be produced.
    """
    if media_url:
        return media_url
    if not media_id:
        return None

    db = _get_db()
    doc = db.collection(MEDIA_COLLECTIONS[media_type]).document(media_id).get()
    if not doc.exists:
        logger.info(f"[MEDIA] {media_type.value} {media_id} not found")
        return None

    file_path = (doc.to_dict() or {}).get("file_path")
    if not file_path:
        logger.info(f"[MEDIA] {media_type.value} {media_id} has no file_path")
        return None

    return sign_storage_path(file_path)
