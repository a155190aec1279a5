# backend/modules/sales_reports/services/insights_service.py

import logging
from typing import List, Optional

from ..constants import (
    COLLECTION_RATE_THRESHOLD,
    PEAK_HOUR_CONCENTRATION_THRESHOLD,
    PROFITABILITY_TREND_THRESHOLD,
    REPEAT_CUSTOMER_THRESHOLD,
    TABLE_UTILIZATION_THRESHOLD,
    TOP_ITEM_DEPENDENCY_THRESHOLD,
)
from ..schemas.analytics_schemas import (
    BusinessInsights,
    CreditAnalytics,
    GrowthMetrics,
    ProfitabilityTrend,
)
from .aggregation_service import AggregatedSales

logger = logging.getLogger(__name__)


def profitability_trend(revenue_growth: float) -> ProfitabilityTrend:
    if revenue_growth > PROFITABILITY_TREND_THRESHOLD:
        return ProfitabilityTrend.IMPROVING
    if revenue_growth < -PROFITABILITY_TREND_THRESHOLD:
        return ProfitabilityTrend.DECLINING
    return ProfitabilityTrend.STABLE


class InsightsService:
    """Rule-based qualitative insights over computed analytics"""

    def generate_insights(
        self,
        sales: AggregatedSales,
        growth: GrowthMetrics,
        credit: Optional[CreditAnalytics] = None,
    ) -> BusinessInsights:
        actions: List[str] = []

        if growth.revenue_growth < 0:
            actions.append(
                "Revenue is down on the previous period; focus on retaining "
                "existing customers with targeted offers"
            )

        if (
            sales.table_utilization_rate is not None
            and sales.table_utilization_rate < TABLE_UTILIZATION_THRESHOLD
        ):
            actions.append(
                f"Only {sales.table_utilization_rate:.0f}% of tables were used; "
                "review the floor layout and promote reservations"
            )

        if (
            sales.repeat_customer_rate is not None
            and sales.repeat_customer_rate < REPEAT_CUSTOMER_THRESHOLD
        ):
            actions.append(
                f"Repeat customers are {sales.repeat_customer_rate:.0f}% of the "
                "customer base; consider a loyalty program"
            )

        if credit is not None and credit.revenue_collection_rate < COLLECTION_RATE_THRESHOLD:
            actions.append(
                f"Collection rate is {credit.revenue_collection_rate:.0f}%; follow up "
                "on pending credit balances"
            )

        if sales.peak_hours and sales.total_orders:
            busiest = sales.peak_hours[0]
            share = busiest.order_count / sales.total_orders * 100
            if share > PEAK_HOUR_CONCENTRATION_THRESHOLD:
                actions.append(
                    f"{share:.0f}% of orders arrive around {busiest.hour:02d}:00; "
                    "schedule extra staff for that hour"
                )

        if (
            sales.menu_item_sales
            and sales.menu_item_sales[0].percentage > TOP_ITEM_DEPENDENCY_THRESHOLD
        ):
            top_item = sales.menu_item_sales[0]
            actions.append(
                f"{top_item.name} brings in {top_item.percentage:.0f}% of revenue; "
                "diversify the menu to reduce dependency"
            )

        if growth.order_growth < 0 <= growth.revenue_growth:
            actions.append(
                "Fewer orders than the previous period despite steady revenue; "
                "run promotions to bring in more visits"
            )

        return BusinessInsights(
            profitability_trend=profitability_trend(growth.revenue_growth),
            recommended_actions=actions,
        )
