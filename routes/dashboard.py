# routes/dashboard.py
from typing import List, Optional

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from core.errors import Internal
from core.tenancy import OrgContext, get_org_context
from schemas.stats_schema import AnalyticsReport, DailyActivity, DashboardStats
from services import stats_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"])
analytics_router = APIRouter(tags=["Analytics"])


# ==================================================================
#  ✅ Headline counters
# ==================================================================
@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(ctx: OrgContext = Depends(get_org_context)):
    try:
        return stats_service.dashboard_stats(ctx)
    except SQLAlchemyError:
        logger.exception("Failed to compute dashboard stats for organization %s", ctx.organization_id)
        raise Internal("Failed to fetch dashboard stats")


# ==================================================================
#  ✅ Day-by-day activity (7d | 30d | 90d)
# ==================================================================
@router.get("/activity-stats", response_model=List[DailyActivity])
def get_activity_stats(
    range_key: Optional[str] = Query(default=stats_service.DEFAULT_ACTIVITY_RANGE, alias="range"),
    ctx: OrgContext = Depends(get_org_context),
):
    try:
        return stats_service.activity_stats(ctx, range_key)
    except SQLAlchemyError:
        logger.exception("Failed to compute activity stats for organization %s", ctx.organization_id)
        raise Internal("Failed to fetch activity data")


# ==================================================================
#  ✅ Analytics report
# ==================================================================
@analytics_router.get("", response_model=AnalyticsReport)
def get_analytics(
    timeframe: Optional[str] = Query(default=stats_service.DEFAULT_TIMEFRAME),
    ctx: OrgContext = Depends(get_org_context),
):
    try:
        return stats_service.analytics_report(ctx, timeframe)
    except SQLAlchemyError:
        logger.exception("Failed to build analytics for organization %s", ctx.organization_id)
        raise Internal("Failed to fetch analytics data")
