# backend/modules/sales_reports/exceptions.py

"""
Custom exceptions for the sales reports module.

Provides specific exception types for better error handling and debugging.
"""

from datetime import datetime
from typing import Optional, Dict, Any


class SalesReportBaseException(Exception):
    """Base exception for all sales report errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidDateRangeError(SalesReportBaseException):
    """Raised when a window ends before it starts"""

    def __init__(self, start: datetime, end: datetime):
        message = f"Invalid date range: {start.isoformat()} is after {end.isoformat()}"
        details = {"start": start.isoformat(), "end": end.isoformat()}
        super().__init__(message, "INVALID_DATE_RANGE", details)


class QueryCapabilityError(SalesReportBaseException):
    """Raised by an order source that cannot serve a query form"""

    def __init__(self, capability: str, reason: Optional[str] = None):
        message = f"Order source does not support {capability}"
        if reason:
            message = f"{message}: {reason}"
        details = {"capability": capability, "reason": reason}
        super().__init__(message, "QUERY_CAPABILITY_MISSING", details)


class OrderRetrievalError(SalesReportBaseException):
    """Raised when every retrieval tier failed"""

    def __init__(self, restaurant_id: str, tier: str, reason: str):
        message = f"Order retrieval failed at tier '{tier}': {reason}"
        details = {"restaurant_id": restaurant_id, "tier": tier, "reason": reason}
        super().__init__(message, "ORDER_RETRIEVAL_FAILED", details)


class RenderingCapabilityError(SalesReportBaseException):
    """Raised when a table renderer cannot lay out a section"""

    def __init__(self, renderer: str, section: str, reason: str):
        message = f"Renderer '{renderer}' failed on section '{section}': {reason}"
        details = {"renderer": renderer, "section": section, "reason": reason}
        super().__init__(message, "RENDERING_CAPABILITY_ERROR", details)


class ExportFormatError(SalesReportBaseException):
    """Raised when an unsupported export format is requested"""

    def __init__(self, format_type: str):
        message = f"Unsupported export format: {format_type}"
        super().__init__(message, "UNSUPPORTED_EXPORT_FORMAT", {"format": format_type})

