# backend/modules/sales_reports/services/date_range_service.py

import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from ..exceptions import InvalidDateRangeError
from ..schemas.analytics_schemas import DateRange
from ..utils.formatting import format_date

logger = logging.getLogger(__name__)

DAY_START = time(0, 0, 0, 0)
DAY_END = time(23, 59, 59, 999000)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, DAY_START)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, DAY_END)


def months_before(day: date, months: int) -> date:
    """Step back whole calendar months, clamping to the last valid day"""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class DateRangeService:
    """Resolves the named reporting windows offered to users"""

    def get_date_ranges(self, now: Optional[datetime] = None) -> List[DateRange]:
        """
        Preset windows anchored to ``now``, in display order.

        Every window starts at 00:00:00.000 and ends at 23:59:59.999 of its
        boundary days. All presets except Yesterday end today.
        """
        now = now or datetime.now()
        today = now.date()
        yesterday = today - timedelta(days=1)
        start_of_week = today - timedelta(days=today.weekday())

        presets = [
            ("Yesterday", yesterday, yesterday),
            ("This Week", start_of_week, today),
            ("Last 7 Days", today - timedelta(days=7), today),
            ("This Month", today.replace(day=1), today),
            ("Last 30 Days", today - timedelta(days=30), today),
            ("Last 3 Months", months_before(today, 3), today),
        ]

        return [
            DateRange(
                start_date=start_of_day(first),
                end_date=end_of_day(last),
                label=label,
            )
            for label, first, last in presets
        ]

    def custom_range(
        self, start_date: datetime, end_date: datetime, label: Optional[str] = None
    ) -> DateRange:
        """Whole-day window covering both dates"""
        if start_date > end_date:
            raise InvalidDateRangeError(start_date, end_date)

        label = label or f"{format_date(start_date)} - {format_date(end_date)}"
        return DateRange(
            start_date=start_of_day(start_date.date()),
            end_date=end_of_day(end_date.date()),
            label=label,
        )
