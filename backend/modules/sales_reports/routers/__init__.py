# backend/modules/sales_reports/routers/__init__.py

from .sales_report_router import router

__all__ = ["router"]
