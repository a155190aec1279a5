# backend/modules/sales_reports/services/__init__.py

from .date_range_service import DateRangeService
from .export_service import ExportService
from .report_renderer import (
    ManualPositionRenderer,
    PreferredGridRenderer,
    ReportDocument,
    ReportRenderer,
    TableRenderer,
)
from .sales_analytics_service import SalesAnalyticsService
from .sales_report_service import SalesReportService

__all__ = [
    "DateRangeService",
    "ExportService",
    "ManualPositionRenderer",
    "PreferredGridRenderer",
    "ReportDocument",
    "ReportRenderer",
    "TableRenderer",
    "SalesAnalyticsService",
    "SalesReportService",
]
