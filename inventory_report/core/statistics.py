"""
Usage statistics for inventory reports.

Derives totals and per-period averages shown on the report summary cards.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from .models import DateRange, InputRangeError, ReportPayload

# Months are approximated as 30 days, not calendar months.
DAYS_PER_MONTH = 30
DAYS_PER_WEEK = 7


class RangePolicy(Enum):
    """How an inverted date range (start after end) is handled."""
    SWAP = "swap"
    REJECT = "reject"


@dataclass(frozen=True)
class UsageStatistics:
    """Derived usage statistics for one payload and date range."""
    total_usage: int
    total_quantity: int
    total_cost: Decimal
    average_per_month: float
    average_per_week: float
    average_quantity_per_month: float
    average_cost_per_month: Decimal


def resolve_range(date_range: DateRange, policy: RangePolicy = RangePolicy.SWAP) -> DateRange:
    """Apply the inverted-range policy to a date range.

    Raises:
        InputRangeError: If the range is inverted and policy is REJECT
    """
    if not date_range.is_inverted:
        return date_range
    if policy == RangePolicy.REJECT:
        raise InputRangeError(
            f"Start date {date_range.start_date.isoformat()} is after "
            f"end date {date_range.end_date.isoformat()}"
        )
    return date_range.normalized()


def compute_statistics(
    payload: Optional[ReportPayload],
    date_range: DateRange,
    policy: RangePolicy = RangePolicy.SWAP,
) -> Optional[UsageStatistics]:
    """Compute usage statistics for a report payload.

    The usage history is trusted to be already scoped to the requested range;
    records are not re-filtered by date. A zero-length period uses a divisor
    of 1 so averages fall back to the raw totals.

    Args:
        payload: Report payload, or None when nothing has been loaded
        date_range: Range the payload was requested for
        policy: Handling of an inverted range

    Returns:
        UsageStatistics, or None when there is no usage history at all

    Raises:
        InputRangeError: If the range is inverted and policy is REJECT
    """
    if payload is None or payload.usage_history is None:
        return None

    date_range = resolve_range(date_range, policy)
    history = payload.usage_history

    total_days = math.ceil(date_range.total_days)
    total_months = Decimal(total_days) / DAYS_PER_MONTH
    total_weeks = Decimal(total_days) / DAYS_PER_WEEK
    month_divisor = total_months or Decimal(1)
    week_divisor = total_weeks or Decimal(1)

    total_usage = len(history)
    total_quantity = sum(record.quantity for record in history)
    total_cost = sum((record.cost for record in history), Decimal("0"))

    return UsageStatistics(
        total_usage=total_usage,
        total_quantity=total_quantity,
        total_cost=total_cost,
        average_per_month=total_usage / float(month_divisor),
        average_per_week=total_usage / float(week_divisor),
        average_quantity_per_month=total_quantity / float(month_divisor),
        average_cost_per_month=total_cost / month_divisor,
    )
