# backend/modules/sales_reports/services/growth_service.py

import logging
from datetime import datetime
from typing import List, Tuple

from ..schemas.analytics_schemas import GrowthMetrics
from ..schemas.order_schemas import Order
from .aggregation_service import is_revenue_eligible

logger = logging.getLogger(__name__)


def previous_window(start: datetime, end: datetime) -> Tuple[datetime, datetime]:
    """The immediately preceding window of identical duration"""
    duration = end - start
    return start - duration, start


def relative_change(current: float, previous: float) -> float:
    """Percentage change, 0 when there is no previous baseline"""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def _period_totals(orders: List[Order]) -> Tuple[float, int, int]:
    revenue = sum(order.total for order in orders)
    customers = len({order.customer_id for order in orders if order.customer_id})
    return revenue, len(orders), customers


class GrowthService:
    """Period-over-period comparison against the preceding window"""

    def calculate_growth(
        self,
        current_orders: List[Order],
        previous_orders: List[Order],
        start: datetime,
        end: datetime,
    ) -> GrowthMetrics:
        """
        Compare eligible orders of two windows.

        ``current_orders`` are expected to be filtered already;
        ``previous_orders`` are filtered here with the same eligibility rule.
        """
        previous_start, previous_end = previous_window(start, end)
        previous_eligible = [
            order for order in previous_orders if is_revenue_eligible(order)
        ]

        cur_revenue, cur_orders, cur_customers = _period_totals(current_orders)
        prev_revenue, prev_orders, prev_customers = _period_totals(previous_eligible)

        growth = GrowthMetrics(
            revenue_growth=relative_change(cur_revenue, prev_revenue),
            order_growth=relative_change(cur_orders, prev_orders),
            customer_growth=relative_change(cur_customers, prev_customers),
            previous_period_start=previous_start,
            previous_period_end=previous_end,
            previous_revenue=prev_revenue,
            previous_orders=prev_orders,
            previous_customers=prev_customers,
        )
        logger.debug(
            f"Growth vs {previous_start:%Y-%m-%d}..{previous_end:%Y-%m-%d}: "
            f"revenue {growth.revenue_growth:.1f}%, orders {growth.order_growth:.1f}%"
        )
        return growth
