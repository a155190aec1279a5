# backend/modules/sales_reports/__init__.py

"""
Sales Reports Module - Sales Analytics & Reporting Engine

Turns the historical orders of a restaurant into a multi-dimensional
analytics summary and renders that summary into report artifacts.

Key Features:
- Preset reporting windows (yesterday, this week, last 7/30 days, ...)
- Order retrieval that degrades gracefully when the store lacks indexes
- Item, category, table, hour, day, payment, type, customer and staff breakdowns
- Period-over-period growth and credit reconciliation
- Rule-based business insights
- PDF reports with a manual-layout fallback, CSV and Excel exports

Components:
- Schemas: Pydantic models for orders, credits and the analytics result
- Services: Business logic for retrieval, aggregation and rendering
- Routers: FastAPI endpoints for the reporting APIs
- Tests: pytest coverage of every service
"""

__version__ = "1.0.0"
