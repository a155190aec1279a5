# backend/modules/sales_reports/utils/__init__.py

from .formatting import format_currency, format_date, format_time, format_percentage
from .payment_methods import normalize_payment_method

__all__ = [
    "format_currency",
    "format_date",
    "format_time",
    "format_percentage",
    "normalize_payment_method",
]
