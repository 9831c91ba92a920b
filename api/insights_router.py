"""
Insight endpoints.

Agent-backed (remote, typed fallbacks for missing fields):
    GET /api/insights/health-score
    GET /api/insights/patterns
    GET /api/insights/timeline

Computed locally from stored messages:
    GET /api/insights/health-score/computed
    GET /api/insights/seasons
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from api.agents_router import get_agent_client
from api.identity import RequestIdentity, require_identity
from api.response_models import Envelope, wrap
from lib import messages
from lib.agents import AgentClient, AgentError
from lib.db import get_connection
from lib.relationship import (
    calculate_health_score,
    derive_metrics,
    detect_emotional_seasons,
    score_breakdown,
)

logger = logging.getLogger(__name__)

insights_router = APIRouter(prefix="/api/insights", tags=["insights"])


def _agent_failure(message: str, error: AgentError) -> HTTPException:
    logger.warning("%s: %s", message, error)
    return HTTPException(status_code=502, detail=message)


# =============================================================================
# AGENT-BACKED
# =============================================================================


@insights_router.get("/health-score", response_model=Envelope)
def health_score(
    identity: RequestIdentity = Depends(require_identity),
    client: AgentClient = Depends(get_agent_client),
):
    try:
        health = client.health_assessment(identity.user_id)
    except AgentError as e:
        raise _agent_failure("Failed to calculate health score", e) from e

    return wrap(
        {
            "currentScore": health.health_score,
            "breakdown": health.breakdown,
            "trend": health.trend,
            "recommendations": health.recommendations,
            "lastCalculated": datetime.now().isoformat(),
        }
    )


@insights_router.get("/patterns", response_model=Envelope)
def patterns(
    timeframe: str = Query("30d", description="e.g. 7d, 30d, 90d"),
    analysis_type: str = Query("communication", alias="type"),
    identity: RequestIdentity = Depends(require_identity),
    client: AgentClient = Depends(get_agent_client),
):
    try:
        analysis = client.analyze_patterns(identity.user_id, timeframe, analysis_type)
    except AgentError as e:
        raise _agent_failure("Failed to analyze patterns", e) from e

    return wrap(
        {
            "patterns": analysis.insights,
            "confidence": analysis.confidence,
            "timeframe": timeframe,
            "analysisType": analysis_type,
            "lastAnalyzed": datetime.now().isoformat(),
        }
    )


@insights_router.get("/timeline", response_model=Envelope)
def timeline(
    start: str | None = Query(None, description="Start date"),
    end: str | None = Query(None, description="End date"),
    identity: RequestIdentity = Depends(require_identity),
    client: AgentClient = Depends(get_agent_client),
):
    try:
        result = client.timeline(identity.user_id, start, end)
    except AgentError as e:
        raise _agent_failure("Failed to retrieve timeline", e) from e

    return wrap(
        {
            "events": result.events,
            "metrics": result.metrics,
            "insights": result.insights,
            "dateRange": {"start": start, "end": end},
            "lastUpdated": datetime.now().isoformat(),
        }
    )


# =============================================================================
# COMPUTED
# =============================================================================


@insights_router.get(
    "/health-score/computed", response_model=Envelope, dependencies=[Depends(require_identity)]
)
def computed_health_score(
    start_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    end_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
):
    """Score the stored history with the local calculator."""
    with get_connection() as conn:
        window = messages.load_messages(conn, start_date, end_date)
        conflicts = messages.count_conflicts(conn, start_date, end_date)

    metrics = derive_metrics(window, conflicts)
    return wrap(
        {
            "score": calculate_health_score(metrics),
            "metrics": metrics.to_dict(),
            "breakdown": score_breakdown(metrics),
            "messageCount": len(window),
            "conflictCount": conflicts,
            "dateRange": {"start": start_date, "end": end_date},
        }
    )


@insights_router.get("/seasons", response_model=Envelope, dependencies=[Depends(require_identity)])
def seasons(
    start_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    end_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
):
    """Monthly sentiment buckets, oldest month first."""
    with get_connection() as conn:
        window = messages.load_messages(conn, start_date, end_date)
    return wrap([bucket.to_dict() for bucket in detect_emotional_seasons(window)])
