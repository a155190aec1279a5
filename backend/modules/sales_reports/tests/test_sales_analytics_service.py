# backend/modules/sales_reports/tests/test_sales_analytics_service.py

import pytest
import random
from datetime import datetime
from unittest.mock import AsyncMock, patch

from core.config import settings
from modules.sales_reports.interfaces import InMemoryCreditSource, InMemoryOrderSource
from modules.sales_reports.schemas.analytics_schemas import DataSource
from modules.sales_reports.schemas.order_schemas import OrderStatus
from modules.sales_reports.services.sales_analytics_service import SalesAnalyticsService
from modules.sales_reports.services.synthetic_data_service import SyntheticOrderGenerator

from modules.sales_reports.tests.factories import (
    CreditTransactionFactory,
    OrderFactory,
)


def make_service(orders, credit_source=None, **source_options):
    return SalesAnalyticsService(
        InMemoryOrderSource(orders, **source_options),
        credit_source,
        SyntheticOrderGenerator(random.Random(7)),
    )


@pytest.fixture
def two_orders():
    """100 in cash and 200 through UPI, without line items"""
    return [
        OrderFactory(items=[], subtotal=100.0, payment_method="cash"),
        OrderFactory(items=[], subtotal=200.0, payment_method="UPI via GPay"),
    ]


class TestSalesAnalyticsService:
    """Test cases for the analytics pipeline"""

    @pytest.mark.asyncio
    async def test_real_orders(self, two_orders, restaurant_id, day_start, day_end):
        service = make_service(two_orders)

        result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        assert result.success
        analytics = result.data
        assert analytics.data_source == DataSource.REAL
        assert analytics.is_synthetic is False
        assert analytics.total_revenue == pytest.approx(300.0)
        assert analytics.total_orders == 2
        assert analytics.average_order_value == pytest.approx(150.0)
        assert analytics.menu_item_sales == []
        methods = {row.method: row.percentage for row in analytics.payment_method_breakdown}
        assert methods["Cash"] == pytest.approx(33.33, abs=0.01)
        assert methods["UPI"] == pytest.approx(66.67, abs=0.01)
        assert result.meta.processing_time_ms is not None

    @pytest.mark.asyncio
    async def test_ineligible_orders_are_excluded(self, two_orders, restaurant_id, day_start, day_end):
        orders = two_orders + [OrderFactory(status=OrderStatus.CANCELLED, subtotal=500.0)]
        service = make_service(orders)

        result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        assert result.data.total_revenue == pytest.approx(300.0)
        assert result.data.total_orders == 2

    @pytest.mark.asyncio
    async def test_degraded_store_gives_same_totals(self, two_orders, restaurant_id, day_start, day_end):
        """Test a store without range indexes falls back to a full scan"""
        capable = await make_service(two_orders).generate_sales_analytics(
            restaurant_id, day_start, day_end
        )
        degraded = await make_service(
            two_orders, supports_range=False, supports_ordering=False
        ).generate_sales_analytics(restaurant_id, day_start, day_end)

        assert degraded.success
        assert degraded.data.total_revenue == capable.data.total_revenue
        assert degraded.data.total_orders == capable.data.total_orders

    @pytest.mark.asyncio
    async def test_store_unavailable(self, restaurant_id, day_start, day_end):
        service = make_service([], available=False)

        result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        assert not result.success
        assert result.data is None
        assert result.error_code == "ORDER_RETRIEVAL_FAILED"
        assert result.reason.startswith("Failed to fetch orders for analytics")

    @pytest.mark.asyncio
    async def test_invalid_date_range(self, restaurant_id, day_start, day_end):
        service = make_service([])

        result = await service.generate_sales_analytics(restaurant_id, day_end, day_start)

        assert not result.success
        assert result.error_code == "INVALID_DATE_RANGE"

    @pytest.mark.asyncio
    async def test_growth_against_previous_window(self, two_orders, restaurant_id, day_start, day_end):
        previous = OrderFactory(items=[], subtotal=150.0, created_at=datetime(2026, 10, 15, 12, 0))
        service = make_service(two_orders + [previous])

        result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        analytics = result.data
        assert analytics.total_orders == 2
        assert analytics.revenue_growth == pytest.approx(100.0)
        assert analytics.order_growth == pytest.approx(100.0)
        assert analytics.growth.previous_period_end == day_start

    @pytest.mark.asyncio
    async def test_previous_window_failure_degrades_to_zero_growth(
        self, two_orders, restaurant_id, day_start, day_end
    ):
        service = make_service(two_orders)
        real_fetch = service.retriever.fetch

        async def fetch(restaurant, start, end):
            if start < day_start:
                raise ConnectionError("previous window timed out")
            return await real_fetch(restaurant, start, end)

        service.retriever.fetch = fetch

        result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        assert result.success
        assert result.data.revenue_growth == 0
        assert result.data.total_revenue == pytest.approx(300.0)

    @pytest.mark.asyncio
    async def test_credit_analytics(self, two_orders, restaurant_id, day_start, day_end):
        credits = InMemoryCreditSource(
            [CreditTransactionFactory(total_amount=130.0, amount_received=100.0)]
        )
        service = make_service(two_orders, credits)

        result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        credit = result.data.credit_analytics
        assert credit.total_credit_amount == pytest.approx(30.0)
        assert credit.revenue_collection_rate == pytest.approx(90.0)

    @pytest.mark.asyncio
    async def test_credit_failure_omits_credit_section(self, two_orders, restaurant_id, day_start, day_end):
        service = make_service(two_orders, InMemoryCreditSource(available=False))

        result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        assert result.success
        assert result.data.credit_analytics is None
        assert result.data.total_revenue == pytest.approx(300.0)

    @pytest.mark.asyncio
    async def test_every_source_is_read_once(self, two_orders, restaurant_id, day_start, day_end):
        credit_source = AsyncMock()
        credit_source.fetch_all.return_value = []
        service = make_service(two_orders, credit_source)

        await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        credit_source.fetch_all.assert_awaited_once_with(restaurant_id)
        assert len(service.retriever.order_source.calls) == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failure(self, two_orders, restaurant_id, day_start, day_end):
        service = make_service(two_orders)

        with patch.object(
            service.insights_service, "generate_insights", side_effect=RuntimeError("boom")
        ):
            result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        assert not result.success
        assert result.error_code == "ANALYTICS_FAILED"


class TestSyntheticFallback:
    """Test cases for demonstration data"""

    @pytest.mark.asyncio
    async def test_empty_window_is_synthesized(self, restaurant_id, day_start, day_end):
        service = make_service([], InMemoryCreditSource([CreditTransactionFactory()]))

        result = await service.generate_sales_analytics(
            restaurant_id, day_start, day_end, allow_synthetic_data=True
        )

        analytics = result.data
        assert analytics.data_source == DataSource.SYNTHESIZED
        assert analytics.is_synthetic is True
        assert analytics.total_revenue > 0
        assert analytics.credit_analytics is None
        assert sum(row.revenue for row in analytics.menu_item_sales) == pytest.approx(
            analytics.tax_summary.gross_subtotal
        )

    @pytest.mark.asyncio
    async def test_only_cancelled_orders_is_synthesized(self, restaurant_id, day_start, day_end):
        orders = [OrderFactory(status=OrderStatus.CANCELLED)]
        service = make_service(orders)

        result = await service.generate_sales_analytics(
            restaurant_id, day_start, day_end, allow_synthetic_data=True
        )

        assert result.data.data_source == DataSource.SYNTHESIZED

    @pytest.mark.asyncio
    async def test_synthesis_disabled_returns_zeros(self, restaurant_id, day_start, day_end):
        service = make_service([])

        result = await service.generate_sales_analytics(
            restaurant_id, day_start, day_end, allow_synthetic_data=False
        )

        analytics = result.data
        assert analytics.data_source == DataSource.REAL
        assert analytics.total_revenue == 0
        assert analytics.total_orders == 0
        assert analytics.average_order_value == 0
        assert analytics.menu_item_sales == []

    @pytest.mark.asyncio
    async def test_setting_controls_default(self, restaurant_id, day_start, day_end):
        service = make_service([])

        with patch.object(settings, "REPORT_SYNTHETIC_DATA_ENABLED", False):
            result = await service.generate_sales_analytics(restaurant_id, day_start, day_end)

        assert result.data.data_source == DataSource.REAL
