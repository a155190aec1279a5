# backend/modules/sales_reports/services/sales_analytics_service.py

import asyncio
import logging
import random
import time
from datetime import datetime
from typing import List, Optional, Sequence

from core.config import settings
from core.response_models import ServiceResult

from ..constants import ERROR_MESSAGES
from ..exceptions import InvalidDateRangeError, OrderRetrievalError
from ..interfaces import CreditSource, OrderSource, ReferenceData
from ..schemas.analytics_schemas import CreditAnalytics, DataSource, SalesAnalytics
from ..schemas.order_schemas import CustomerRef, MenuItemRef, Order, TableRef
from .aggregation_service import AggregationService, is_revenue_eligible
from .credit_reconciliation_service import CreditReconciliationService
from .growth_service import GrowthService, previous_window
from .insights_service import InsightsService
from .order_retrieval_service import DegradingOrderRetriever
from .synthetic_data_service import SyntheticOrderGenerator

logger = logging.getLogger(__name__)


class SalesAnalyticsService:
    """
    Computes ``SalesAnalytics`` for a restaurant and window.

    Current-window orders, previous-window orders and credits are read
    concurrently; aggregation starts once all three reads finished. Only
    a failure to read current-window orders fails the request. The other
    two reads degrade to an empty comparison and a missing credit section.
    """

    def __init__(
        self,
        order_source: OrderSource,
        credit_source: Optional[CreditSource] = None,
        synthetic_generator: Optional[SyntheticOrderGenerator] = None,
    ):
        self.retriever = DegradingOrderRetriever(
            order_source, batch_size=settings.REPORT_ORDER_BATCH_SIZE
        )
        self.credit_source = credit_source
        self.synthetic_generator = synthetic_generator or SyntheticOrderGenerator(
            random.Random(settings.REPORT_SYNTHETIC_SEED)
        )
        self.growth_service = GrowthService()
        self.credit_service = CreditReconciliationService()
        self.insights_service = InsightsService()

    async def generate_sales_analytics(
        self,
        restaurant_id: str,
        start: datetime,
        end: datetime,
        menu_items: Sequence[MenuItemRef] = (),
        tables: Sequence[TableRef] = (),
        customers: Sequence[CustomerRef] = (),
        allow_synthetic_data: Optional[bool] = None,
    ) -> ServiceResult[SalesAnalytics]:
        started = time.perf_counter()

        if start > end:
            error = InvalidDateRangeError(start, end)
            return ServiceResult.fail(
                ERROR_MESSAGES["invalid_date_range"], error.error_code, error.details
            )

        if allow_synthetic_data is None:
            allow_synthetic_data = settings.REPORT_SYNTHETIC_DATA_ENABLED

        previous_start, previous_end = previous_window(start, end)
        current_result, previous_result, credit_result = await asyncio.gather(
            self.retriever.fetch(restaurant_id, start, end),
            self.retriever.fetch(restaurant_id, previous_start, previous_end),
            self._fetch_credits(restaurant_id),
            return_exceptions=True,
        )

        if isinstance(current_result, BaseException):
            return self._retrieval_failure(restaurant_id, current_result)

        if isinstance(previous_result, BaseException):
            logger.warning(
                f"Previous-period orders unavailable for restaurant {restaurant_id}; "
                f"growth compared against an empty period: {previous_result}"
            )
            previous_result = []

        if isinstance(credit_result, BaseException):
            logger.warning(
                f"Credit transactions unavailable for restaurant {restaurant_id}: "
                f"{credit_result}"
            )
            credit_result = None

        try:
            analytics = self._build_analytics(
                restaurant_id,
                start,
                end,
                current_result,
                previous_result,
                credit_result,
                list(menu_items),
                list(tables),
                list(customers),
                allow_synthetic_data,
            )
        except Exception as e:
            logger.error(f"Error generating sales analytics for {restaurant_id}: {e}")
            return ServiceResult.fail(
                ERROR_MESSAGES["analytics_failed"],
                "ANALYTICS_FAILED",
                {"restaurant_id": restaurant_id, "reason": str(e)},
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Generated {analytics.data_source.value} sales analytics for restaurant "
            f"{restaurant_id}: {analytics.total_orders} orders in {elapsed_ms:.0f}ms"
        )
        return ServiceResult.ok(data=analytics, processing_time_ms=elapsed_ms)

    async def _fetch_credits(self, restaurant_id: str) -> Optional[list]:
        if self.credit_source is None:
            return None
        return await self.credit_source.fetch_all(restaurant_id)

    def _retrieval_failure(
        self, restaurant_id: str, error: BaseException
    ) -> ServiceResult[SalesAnalytics]:
        if isinstance(error, OrderRetrievalError):
            return ServiceResult.fail(
                f"{ERROR_MESSAGES['orders_unavailable']}: {error.details['reason']}",
                error.error_code,
                error.details,
            )
        logger.error(f"Unexpected order retrieval error for {restaurant_id}: {error}")
        return ServiceResult.fail(
            f"{ERROR_MESSAGES['orders_unavailable']}: {error}",
            "ORDER_RETRIEVAL_FAILED",
            {"restaurant_id": restaurant_id},
        )

    def _build_analytics(
        self,
        restaurant_id: str,
        start: datetime,
        end: datetime,
        current_orders: List[Order],
        previous_orders: List[Order],
        credit_records: Optional[list],
        menu_items: List[MenuItemRef],
        tables: List[TableRef],
        customers: List[CustomerRef],
        allow_synthetic_data: bool,
    ) -> SalesAnalytics:
        eligible = [order for order in current_orders if is_revenue_eligible(order)]
        data_source = DataSource.REAL

        if not eligible and allow_synthetic_data:
            logger.warning(
                f"No eligible orders for restaurant {restaurant_id} between "
                f"{start:%Y-%m-%d} and {end:%Y-%m-%d}; using demonstration data"
            )
            eligible, menu_items = self.synthetic_generator.generate(
                restaurant_id, start, end, menu_items, tables, customers
            )
            data_source = DataSource.SYNTHESIZED
            # Synthetic periods are not compared against real history
            previous_orders = []
            credit_records = None

        reference = ReferenceData(menu_items=menu_items, tables=tables, customers=customers)
        aggregation = AggregationService(
            reference, detailed_order_limit=settings.REPORT_DETAILED_ORDER_LIMIT
        )
        sales = aggregation.aggregate(eligible, start, end)
        growth = self.growth_service.calculate_growth(eligible, previous_orders, start, end)

        credit: Optional[CreditAnalytics] = None
        if credit_records is not None:
            credit = self.credit_service.reconcile(
                credit_records, start, end, sales.total_revenue
            )

        insights = self.insights_service.generate_insights(sales, growth, credit)

        return SalesAnalytics(
            restaurant_id=restaurant_id,
            period_start=start,
            period_end=end,
            data_source=data_source,
            total_revenue=sales.total_revenue,
            total_orders=sales.total_orders,
            average_order_value=sales.average_order_value,
            total_items=sales.total_items,
            total_customers=sales.total_customers,
            repeat_customer_rate=sales.repeat_customer_rate,
            table_utilization_rate=sales.table_utilization_rate,
            revenue_growth=growth.revenue_growth,
            order_growth=growth.order_growth,
            customer_growth=growth.customer_growth,
            growth=growth,
            menu_item_sales=sales.menu_item_sales,
            category_sales=sales.category_sales,
            table_sales=sales.table_sales,
            hourly_breakdown=sales.hourly_breakdown,
            daily_breakdown=sales.daily_breakdown,
            payment_method_breakdown=sales.payment_method_breakdown,
            order_type_breakdown=sales.order_type_breakdown,
            top_customers=sales.top_customers,
            staff_performance=sales.staff_performance,
            peak_hours=sales.peak_hours,
            item_combinations=sales.item_combinations,
            tax_summary=sales.tax_summary,
            credit_analytics=credit,
            insights=insights,
            detailed_orders=sales.detailed_orders,
        )
