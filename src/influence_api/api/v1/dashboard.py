"""Dashboard API endpoints."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from loguru import logger

from influence_api.core.config import Settings, get_settings
from influence_api.core.dependencies import get_token_cache
from influence_api.lib.sway_client import TokenCache
from influence_api.schemas.dashboard import DashboardModel, MetricsErrorResponse, TopicOpportunitiesResponse
from influence_api.services.dashboard_service import load_and_build_dashboard, load_topic_opportunities

dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])

METRICS_ERROR = "Failed to compute metrics"


def _metrics_error(exc: Exception) -> JSONResponse:
    body = MetricsErrorResponse(error=METRICS_ERROR, message=str(exc) or "Unknown error")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


@dashboard_router.get(
    "",
    response_model=DashboardModel,
    responses={500: {"model": MetricsErrorResponse}},
)
async def get_dashboard(
    settings: Settings = Depends(get_settings),
    token_cache: TokenCache = Depends(get_token_cache),
) -> DashboardModel | JSONResponse:
    """Return every metric for the main group.

    Remote enhancements are included when configured and reachable; their
    failure never prevents the core metrics from being returned.
    """
    try:
        return await load_and_build_dashboard(settings, token_cache=token_cache)
    except Exception as e:
        logger.exception("Dashboard API error")
        return _metrics_error(e)


@dashboard_router.get(
    "/topic-opportunities",
    response_model=TopicOpportunitiesResponse,
    responses={500: {"model": MetricsErrorResponse}},
)
async def get_topic_opportunities(
    limit: int = Query(20, ge=1, le=100, description="Maximum number of opportunities"),
    settings: Settings = Depends(get_settings),
) -> TopicOpportunitiesResponse | JSONResponse:
    """Rank upcoming ballot items by relevance to each topic."""
    try:
        return await load_topic_opportunities(settings, limit=limit)
    except Exception as e:
        logger.exception("Topic opportunities API error")
        return _metrics_error(e)
