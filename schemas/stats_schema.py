# stats_schema.py
from typing import List

from schemas.base import APIModel


class DashboardStats(APIModel):
    total_members: int
    active_subscriptions: int
    upcoming_events: int
    total_revenue: float


class DailyActivity(APIModel):
    date: str
    new_users: int = 0
    revenue: float = 0.0


class MonthlyMembers(APIModel):
    name: str
    members: int


class MonthlyRevenue(APIModel):
    name: str
    amount: float


class StatusSlice(APIModel):
    name: str
    value: int
    color: str


class EventAttendance(APIModel):
    name: str
    attended: int
    capacity: int


class AnalyticsReport(APIModel):
    membership_data: List[MonthlyMembers]
    revenue_data: List[MonthlyRevenue]
    membership_status_data: List[StatusSlice]
    event_attendance_data: List[EventAttendance]
