"""
Health route: reports which detection providers can be called and whether
the storage backends are bound.
"""

from fastapi import APIRouter, Depends

from consensus_engine.core.dependencies import get_orchestrator
from consensus_engine.integrations import firebase as firebase_module
from consensus_engine.integrations import redis_client as redis_module
from consensus_engine.services.orchestrator import Orchestrator

router = APIRouter(tags=["System"])


@router.get("/health")
async def health(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """
    `degraded` when no provider has a credential (every analysis would return
    the default record) or Firestore is not bound (nothing can be stored).
    """
    providers = {name: adapter.configured for name, adapter in orchestrator.adapters.items()}
    firestore_bound = firebase_module.db is not None

    healthy = firestore_bound and any(providers.values())
    return {
        "status": "healthy" if healthy else "degraded",
        "providers": providers,
        "firestore": firestore_bound,
        "storage_bucket": firebase_module.bucket is not None,
        "rate_limit_backend": "redis" if redis_module.client else "memory",
    }
