# backend/modules/sales_reports/services/sales_report_service.py

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from core.response_models import ServiceResult

from ..constants import ERROR_MESSAGES
from ..exceptions import SalesReportBaseException
from ..interfaces import CreditSource, OrderSource
from ..schemas.analytics_schemas import (
    DateRange,
    ReportConfiguration,
    SalesAnalytics,
)
from ..schemas.order_schemas import CustomerRef, MenuItemRef, TableRef
from .date_range_service import DateRangeService
from .export_service import ExportService
from .report_renderer import ReportDocument, ReportRenderer
from .sales_analytics_service import SalesAnalyticsService

logger = logging.getLogger(__name__)


class SalesReportService:
    """
    Public surface of the sales reporting engine.

    Every operation returns a ``ServiceResult``; failures carry an error
    code and reason instead of raising.
    """

    def __init__(
        self,
        order_source: OrderSource,
        credit_source: Optional[CreditSource] = None,
        renderer: Optional[ReportRenderer] = None,
    ):
        self.date_range_service = DateRangeService()
        self.analytics_service = SalesAnalyticsService(order_source, credit_source)
        self.renderer = renderer or ReportRenderer()
        self.export_service = ExportService()

    def get_date_ranges(self, now: Optional[datetime] = None) -> List[DateRange]:
        return self.date_range_service.get_date_ranges(now)

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
        return await self.analytics_service.generate_sales_analytics(
            restaurant_id,
            start,
            end,
            menu_items,
            tables,
            customers,
            allow_synthetic_data=allow_synthetic_data,
        )

    def generate_report(
        self,
        analytics: SalesAnalytics,
        date_range: DateRange,
        title: str,
        config: Optional[ReportConfiguration] = None,
    ) -> ServiceResult[ReportDocument]:
        try:
            document = self.renderer.render_report(analytics, date_range, title, config)
        except SalesReportBaseException as e:
            logger.error(f"Error generating sales report: {e.message}")
            return ServiceResult.fail(e.message, e.error_code, e.details)
        except Exception as e:
            logger.error(f"Error generating sales report: {e}")
            return ServiceResult.fail(
                f"{ERROR_MESSAGES['report_failed']}: {e}", "REPORT_FAILED"
            )
        return ServiceResult.ok(data=document)

    def export_flat(
        self, analytics: SalesAnalytics, date_range: DateRange
    ) -> ServiceResult[str]:
        try:
            text = self.export_service.export_csv(analytics, date_range)
        except Exception as e:
            logger.error(f"Error exporting sales analytics: {e}")
            return ServiceResult.fail(
                f"{ERROR_MESSAGES['export_failed']}: {e}", "EXPORT_FAILED"
            )
        return ServiceResult.ok(data=text)

    def export(
        self, analytics: SalesAnalytics, date_range: DateRange, format_type: str
    ) -> ServiceResult[tuple]:
        """Export as ``(content, media_type, filename)`` in csv or xlsx"""
        try:
            exported = self.export_service.export(analytics, date_range, format_type)
        except SalesReportBaseException as e:
            return ServiceResult.fail(e.message, e.error_code, e.details)
        except Exception as e:
            logger.error(f"Error exporting sales analytics as {format_type}: {e}")
            return ServiceResult.fail(
                f"{ERROR_MESSAGES['export_failed']}: {e}", "EXPORT_FAILED"
            )
        return ServiceResult.ok(data=exported)
