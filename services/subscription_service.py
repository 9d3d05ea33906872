# ================================================================
# services/subscription_service.py — billing period arithmetic
# ================================================================
import calendar
from datetime import datetime

from models.models import BillingInterval


def add_months(start: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def period_end(start: datetime, interval: str) -> datetime:
    if interval == BillingInterval.YEARLY.value:
        return add_months(start, 12)
    return add_months(start, 1)
