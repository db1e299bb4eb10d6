"""
Dashboard API routes.
"""

import logging

from entities.dashboard import DashboardAggregator
from fastapi import APIRouter, Depends
from models import DashboardRefresh

from api.dependencies import get_aggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.post("/refresh", response_model=DashboardRefresh)
async def refresh_dashboard(
    aggregator: DashboardAggregator = Depends(get_aggregator),
) -> DashboardRefresh:
    """Rebuild the dashboard, or return the last snapshot while cooling down."""
    return await aggregator.refresh()


@router.get("", response_model=DashboardRefresh | None)
async def latest_dashboard(
    aggregator: DashboardAggregator = Depends(get_aggregator),
) -> DashboardRefresh | None:
    """Return the most recent snapshot without touching the bridge."""
    return aggregator.latest
