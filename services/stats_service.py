# ================================================================
# services/stats_service.py — dashboard counters, activity, analytics
# ================================================================
import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

import logging

from sqlalchemy import func
from sqlmodel import select

from core.tenancy import OrgContext
from models.models import (
    SEATED_STATUSES,
    Event,
    EventStatus,
    Member,
    MemberStatus,
    Payment,
    PaymentStatus,
    Subscription,
    SubscriptionStatus,
    utcnow,
)
from schemas.stats_schema import (
    AnalyticsReport,
    DailyActivity,
    DashboardStats,
    EventAttendance,
    MonthlyMembers,
    MonthlyRevenue,
    StatusSlice,
)
from services.subscription_service import add_months

logger = logging.getLogger(__name__)

# ------------------------
# Lookup tables
# ------------------------
ACTIVITY_RANGES: Dict[str, int] = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_ACTIVITY_RANGE = "30d"

ANALYTICS_TIMEFRAMES: Dict[str, int] = {
    "last30days": 1,
    "last3months": 3,
    "last6months": 6,
    "lastyear": 12,
}
DEFAULT_TIMEFRAME = "last6months"

STATUS_COLORS: Dict[MemberStatus, str] = {
    MemberStatus.ACTIVE: "#4EA8DE",
    MemberStatus.PENDING: "#22C55E",
    MemberStatus.INACTIVE: "#9CA3AF",
    MemberStatus.CANCELLED: "#FFC46B",
}
# Adding a MemberStatus without a colour fails at import
_missing_colors = set(MemberStatus) - set(STATUS_COLORS)
if _missing_colors:
    raise RuntimeError(f"No chart colour for member statuses: {sorted(s.value for s in _missing_colors)}")

ATTENDANCE_EVENT_LIMIT = 5
ATTENDANCE_NAME_LENGTH = 20


def status_color(status: MemberStatus) -> str:
    return STATUS_COLORS[status]


# ========================================
# 📊 Dashboard counters
# ========================================
def end_of_month(now: datetime) -> datetime:
    last_day = calendar.monthrange(now.year, now.month)[1]
    return now.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)


def dashboard_stats(ctx: OrgContext, now: Optional[datetime] = None) -> DashboardStats:
    now = now or utcnow()
    session = ctx.session
    org_id = ctx.organization_id

    total_members = session.exec(
        select(func.count()).select_from(Member).where(Member.organization_id == org_id)
    ).one()
    active_subscriptions = session.exec(
        select(func.count())
        .select_from(Subscription)
        .where(
            Subscription.organization_id == org_id,
            Subscription.status == SubscriptionStatus.ACTIVE.value,
        )
    ).one()
    upcoming_events = session.exec(
        select(func.count())
        .select_from(Event)
        .where(
            Event.organization_id == org_id,
            Event.status == EventStatus.SCHEDULED.value,
            Event.date >= now,
            Event.date <= end_of_month(now),
        )
    ).one()
    total_revenue = session.exec(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.organization_id == org_id,
            Payment.status == PaymentStatus.COMPLETED.value,
        )
    ).one()

    return DashboardStats(
        total_members=total_members,
        active_subscriptions=active_subscriptions,
        upcoming_events=upcoming_events,
        total_revenue=float(total_revenue or 0),
    )


# ========================================
# 📈 Daily activity series
# ========================================
def activity_days(range_key: Optional[str]) -> int:
    return ACTIVITY_RANGES.get(range_key or DEFAULT_ACTIVITY_RANGE, ACTIVITY_RANGES[DEFAULT_ACTIVITY_RANGE])


def build_activity_series(
    start: date,
    end: date,
    member_dates: Iterable[datetime],
    payments: Iterable[Tuple[datetime, Decimal]],
) -> List[DailyActivity]:
    """
    Dense, zero-filled, day-by-day series from ``start`` to ``end`` inclusive.

    ``member_dates`` are creation timestamps of new members; ``payments`` are
    (timestamp, amount) pairs of completed payments. Rows outside the window
    are ignored.
    """
    buckets: Dict[date, List] = {}
    day = start
    while day <= end:
        buckets[day] = [0, Decimal("0")]
        day += timedelta(days=1)

    for created in member_dates:
        bucket = buckets.get(created.date())
        if bucket is not None:
            bucket[0] += 1

    for created, amount in payments:
        bucket = buckets.get(created.date())
        if bucket is not None:
            bucket[1] += Decimal(amount)

    return [
        DailyActivity(date=day.isoformat(), new_users=count, revenue=float(revenue))
        for day, (count, revenue) in sorted(buckets.items())
    ]


def activity_stats(ctx: OrgContext, range_key: Optional[str], now: Optional[datetime] = None) -> List[DailyActivity]:
    now = now or utcnow()
    days = activity_days(range_key)
    start = now - timedelta(days=days)
    # Whole UTC days on both ends
    window_start = datetime.combine(start.date(), datetime.min.time())
    window_end = datetime.combine(now.date(), datetime.max.time())

    member_dates = ctx.session.exec(
        select(Member.created_at).where(
            Member.organization_id == ctx.organization_id,
            Member.created_at >= window_start,
            Member.created_at <= window_end,
        )
    ).all()
    payments = ctx.session.exec(
        select(Payment.created_at, Payment.amount).where(
            Payment.organization_id == ctx.organization_id,
            Payment.status == PaymentStatus.COMPLETED.value,
            Payment.created_at >= window_start,
            Payment.created_at <= window_end,
        )
    ).all()

    return build_activity_series(start.date(), now.date(), member_dates, payments)


# ========================================
# 📉 Analytics report
# ========================================
def month_starts(start: datetime, end: datetime) -> List[datetime]:
    current = start.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    months = []
    while current <= end:
        months.append(current)
        current = add_months(current, 1)
    return months


def month_label(value: datetime) -> str:
    return f"{value:%b} {value.year}"


def _month_key(value: datetime) -> Tuple[int, int]:
    return value.year, value.month


def membership_growth(ctx: OrgContext, start: datetime, end: datetime) -> List[MonthlyMembers]:
    """Cumulative count of members that joined in the window, per month."""
    join_dates = ctx.session.exec(
        select(Member.join_date).where(
            Member.organization_id == ctx.organization_id,
            Member.join_date >= start,
            Member.join_date <= end,
        )
    ).all()
    per_month: Dict[Tuple[int, int], int] = {}
    for joined in join_dates:
        per_month[_month_key(joined)] = per_month.get(_month_key(joined), 0) + 1

    total = 0
    result = []
    for month in month_starts(start, end):
        total += per_month.get(_month_key(month), 0)
        result.append(MonthlyMembers(name=month_label(month), members=total))
    return result


def monthly_revenue(ctx: OrgContext, start: datetime, end: datetime) -> List[MonthlyRevenue]:
    rows = ctx.session.exec(
        select(Payment.created_at, Payment.amount).where(
            Payment.organization_id == ctx.organization_id,
            Payment.status == PaymentStatus.COMPLETED.value,
            Payment.created_at >= start,
            Payment.created_at <= end,
        )
    ).all()
    per_month: Dict[Tuple[int, int], Decimal] = {}
    for created, amount in rows:
        key = _month_key(created)
        per_month[key] = per_month.get(key, Decimal("0")) + Decimal(amount)

    return [
        MonthlyRevenue(name=month_label(month), amount=float(per_month.get(_month_key(month), 0)))
        for month in month_starts(start, end)
    ]


def status_distribution(ctx: OrgContext) -> List[StatusSlice]:
    counts = dict(
        ctx.session.exec(
            select(Member.status, func.count())
            .where(Member.organization_id == ctx.organization_id)
            .group_by(Member.status)
        ).all()
    )
    return [
        StatusSlice(
            name=member_status.value.capitalize(),
            value=counts.get(member_status.value, 0),
            color=status_color(member_status),
        )
        for member_status in MemberStatus
    ]


def event_attendance(ctx: OrgContext, now: datetime) -> List[EventAttendance]:
    events = ctx.session.exec(
        ctx.scoped(
            Event,
            Event.date <= now,
            Event.status == EventStatus.SCHEDULED.value,
        )
        .order_by(Event.date.desc())
        .limit(ATTENDANCE_EVENT_LIMIT)
    ).all()

    result = []
    for event in events:
        attended = sum(1 for reg in event.registrations if reg.status in SEATED_STATUSES)
        name = event.name
        if len(name) > ATTENDANCE_NAME_LENGTH:
            name = name[:ATTENDANCE_NAME_LENGTH] + "..."
        result.append(EventAttendance(name=name, attended=attended, capacity=event.capacity or attended))
    return result


def analytics_report(ctx: OrgContext, timeframe: Optional[str], now: Optional[datetime] = None) -> AnalyticsReport:
    now = now or utcnow()
    months = ANALYTICS_TIMEFRAMES.get(timeframe or DEFAULT_TIMEFRAME, ANALYTICS_TIMEFRAMES[DEFAULT_TIMEFRAME])
    start = add_months(now, -months)

    return AnalyticsReport(
        membership_data=membership_growth(ctx, start, now),
        revenue_data=monthly_revenue(ctx, start, now),
        membership_status_data=status_distribution(ctx),
        event_attendance_data=event_attendance(ctx, now),
    )
