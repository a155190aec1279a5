# backend/modules/sales_reports/routers/sales_report_router.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response

from core.exceptions import ServiceUnavailableError, UpstreamError, ValidationError
from core.response_models import ServiceResult

from ..schemas.analytics_schemas import (
    DateRange,
    ReportRequest,
    SalesAnalytics,
    SalesAnalyticsRequest,
)
from ..services.sales_report_service import SalesReportService
from ..utils.formatting import format_date

router = APIRouter(prefix="/api/v1/sales-reports", tags=["Sales Reports"])
logger = logging.getLogger(__name__)

VALIDATION_CODES = {"INVALID_DATE_RANGE", "UNSUPPORTED_EXPORT_FORMAT"}
UPSTREAM_CODES = {"ORDER_RETRIEVAL_FAILED"}


def get_sales_report_service(request: Request) -> SalesReportService:
    """Build the service from the sources attached to the application"""
    order_source = getattr(request.app.state, "order_source", None)
    if order_source is None:
        raise ServiceUnavailableError(
            "Order source is not configured", "ORDER_SOURCE_UNAVAILABLE"
        )
    credit_source = getattr(request.app.state, "credit_source", None)
    return SalesReportService(order_source, credit_source)


def unwrap(result: ServiceResult):
    """Return the payload of a successful result or raise the matching API error"""
    if result.success:
        return result.data

    code = result.error_code or "ERROR"
    if code in VALIDATION_CODES:
        raise ValidationError(result.reason, code)
    if code in UPSTREAM_CODES:
        raise UpstreamError(result.reason, code)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.reason
    )


def _date_range(request: ReportRequest) -> DateRange:
    analytics = request.analytics
    label = request.date_range_label or (
        f"{format_date(analytics.start_date)} - {format_date(analytics.end_date)}"
    )
    return DateRange(
        start_date=analytics.start_date, end_date=analytics.end_date, label=label
    )


async def _analytics(
    service: SalesReportService, request: SalesAnalyticsRequest
) -> SalesAnalytics:
    result = await service.generate_sales_analytics(
        request.restaurant_id,
        request.start_date,
        request.end_date,
        request.menu_items,
        request.tables,
        request.customers,
        allow_synthetic_data=request.allow_synthetic_data,
    )
    return unwrap(result)


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/date-ranges", response_model=List[DateRange])
async def get_date_ranges(
    service: SalesReportService = Depends(get_sales_report_service),
):
    """Preset reporting windows anchored to the current day"""
    return service.get_date_ranges()


@router.post("/analytics", response_model=SalesAnalytics)
async def generate_sales_analytics(
    request: SalesAnalyticsRequest,
    service: SalesReportService = Depends(get_sales_report_service),
):
    """
    Compute sales analytics for a restaurant and window.

    When the window has no eligible orders and demonstration data is
    enabled, the response carries ``data_source = "synthesized"``.
    """
    return await _analytics(service, request)


@router.post("/report")
async def generate_report(
    request: ReportRequest,
    service: SalesReportService = Depends(get_sales_report_service),
):
    """Render the analytics for a window as a PDF attachment"""
    analytics = await _analytics(service, request.analytics)
    document = unwrap(
        service.generate_report(
            analytics, _date_range(request), request.title, request.config
        )
    )
    return _attachment(document.content, document.media_type, document.filename)


@router.post("/export")
async def export_report(
    request: ReportRequest,
    format_type: str = Query("csv", alias="format", description="Export format: csv or xlsx"),
    service: SalesReportService = Depends(get_sales_report_service),
):
    """Export the analytics for a window as a flat file"""
    analytics = await _analytics(service, request.analytics)
    content, media_type, filename = unwrap(
        service.export(analytics, _date_range(request), format_type)
    )
    return _attachment(content, media_type, filename)
