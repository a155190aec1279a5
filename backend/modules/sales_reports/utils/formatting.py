# backend/modules/sales_reports/utils/formatting.py

"""Display formatting shared by the renderer and the exporters."""

from datetime import datetime
from typing import Optional

from core.config import settings


def format_currency(amount: float, symbol: Optional[str] = None) -> str:
    """Format an amount as ``Rs. 1,234.56``"""
    symbol = settings.REPORT_CURRENCY_SYMBOL if symbol is None else symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {abs(amount):,.2f}"


def format_percentage(value: float, signed: bool = False) -> str:
    if signed:
        return f"{value:+.1f}%"
    return f"{value:.1f}%"


def format_date(value: datetime) -> str:
    """Format as ``17 Oct 2026``"""
    return f"{value.day} {value.strftime('%b %Y')}"


def format_time(value: datetime) -> str:
    """Format as ``07:05 PM``"""
    return value.strftime("%I:%M %p")


def format_hour(hour: int) -> str:
    """Format a 0-23 hour bucket as ``07:00 PM``"""
    return datetime(2000, 1, 1, hour).strftime("%I:00 %p")
