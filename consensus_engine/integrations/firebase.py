"""
Firebase integration: Firestore holds media records and analysis runs,
Cloud Storage holds the uploaded media that providers are pointed at.

`db` and `bucket` are bound by `initialize()` during the FastAPI lifespan;
consumers read them at call time (`firebase.db`, `firebase.bucket`).
"""

import json
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore, storage

from consensus_engine.config import settings

logger = logging.getLogger(__name__)

db = None  # firestore.Client | None
bucket = None  # storage.Bucket | None


def _credentials() -> Optional[credentials.Base]:
    """Service-account credentials from settings, else None for ADC."""
    if not settings.firebase_service_account:
        return None
    try:
        return credentials.Certificate(json.loads(settings.firebase_service_account))
    except (ValueError, KeyError) as e:
        logger.error(f"[STARTUP] FIREBASE_SERVICE_ACCOUNT is unusable, using default credentials: {e}")
        return None


def initialize() -> None:
    global db, bucket

    if not firebase_admin._apps:
        options = {"storageBucket": settings.firebase_storage_bucket} if settings.firebase_storage_bucket else None
        firebase_admin.initialize_app(_credentials(), options)

    db = firestore.client()
    bucket = storage.bucket() if settings.firebase_storage_bucket else None

    if bucket is None:
        logger.warning("[STARTUP] No FIREBASE_STORAGE_BUCKET set; mediaId lookups cannot be signed")
    logger.info(f"[STARTUP] Firebase initialized (bucket: {settings.firebase_storage_bucket or '-'})")
