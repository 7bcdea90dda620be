"""
Analysis routes: /analyze

POST runs every requested provider against one media item and returns the
consensus verdict plus the individual provider results.
GET returns the last stored analysis for a media item.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from consensus_engine.core.auth import require_service_key
from consensus_engine.core.dependencies import get_orchestrator
from consensus_engine.core.rate_limiter import check_rate_limit
from consensus_engine.schemas.analysis import AnalyzeRequest, AnalyzeResponse, MediaRef, MediaType
from consensus_engine.services.aggregator import aggregate
from consensus_engine.services.media_service import resolve_media_url
from consensus_engine.services.orchestrator import Orchestrator
from consensus_engine.services.persistence import get_analysis, store_analysis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    body: AnalyzeRequest,
    caller: str = Depends(require_service_key),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """
    Analyze a media item with every requested, configured provider.
    Requires `mediaId` or `mediaUrl`; a bare `mediaId` is resolved to a signed URL.
    """
    if not body.media_id and not body.media_url:
        raise HTTPException(status_code=400, detail="mediaId or mediaUrl required")

    check_rate_limit(caller)

    url = await run_in_threadpool(resolve_media_url, body.media_id, body.media_url, body.media_type)
    if not url:
        raise HTTPException(status_code=400, detail="Could not get media URL")

    media = MediaRef(media_id=body.media_id, media_type=body.media_type, locator_url=url)
    report = await orchestrator.run(media, body.providers)

    consensus = aggregate(report.results, analyzed_at=datetime.now(timezone.utc))
    consensus = consensus.model_copy(update={"total_analysis_time_ms": report.duration_ms})

    logger.info(
        f"[CONSENSUS] {media.media_type.value}/{media.media_id or 'url'}: verdict={consensus.verdict.value} "
        f"score={consensus.overall_authenticity_score:.1f} recommendation={consensus.recommendation.value} "
        f"agreed={consensus.providers_agreed}/{consensus.providers_analyzed}"
    )

    await run_in_threadpool(store_analysis, media, consensus, report.results)

    return AnalyzeResponse(
        success=True,
        media_id=media.media_id,
        media_type=media.media_type,
        results=report.results,
        **consensus.model_dump(),
    )


@router.get("/analyze")
async def get_analysis_route(
    media_id: Optional[str] = Query(None, alias="mediaId"),
    media_type: MediaType = Query(MediaType.VIDEO, alias="mediaType"),
    caller: str = Depends(require_service_key),
):
    """Returns the stored consensus and per-provider results for a media item."""
    if not media_id:
        raise HTTPException(status_code=400, detail="mediaId required")

    return await run_in_threadpool(get_analysis, media_id, media_type)
