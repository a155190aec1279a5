# backend/modules/sales_reports/services/export_service.py

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..constants import EXPORT_FORMATS
from ..exceptions import ExportFormatError
from ..schemas.analytics_schemas import DateRange, SalesAnalytics
from ..utils.formatting import format_date

logger = logging.getLogger(__name__)

# Excel caps sheet titles at 31 characters
SHEET_TITLE_LIMIT = 31

MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass
class FlatSection:
    title: str
    headers: List[str]
    rows: List[List[Any]]


def _round(value: float) -> float:
    return round(value, 2)


def flat_sections(analytics: SalesAnalytics) -> List[FlatSection]:
    """Every breakdown as raw values, one section each"""
    summary_rows = [
        ["Total Revenue", _round(analytics.total_revenue)],
        ["Total Orders", analytics.total_orders],
        ["Average Order Value", _round(analytics.average_order_value)],
        ["Total Items", analytics.total_items],
        ["Total Customers", analytics.total_customers],
        ["Revenue Growth", f"{analytics.revenue_growth:.2f}%"],
        ["Order Growth", f"{analytics.order_growth:.2f}%"],
        ["Customer Growth", f"{analytics.customer_growth:.2f}%"],
        ["Data Source", analytics.data_source.value],
    ]
    tax = analytics.tax_summary
    sections = [
        FlatSection("EXECUTIVE SUMMARY", ["Metric", "Value"], summary_rows),
        FlatSection(
            "TOP SELLING ITEMS",
            ["Item Name", "Category", "Quantity Sold", "Revenue", "Percentage"],
            [
                [row.name, row.category_name, row.quantity_sold, _round(row.revenue), f"{row.percentage:.2f}%"]
                for row in analytics.menu_item_sales
            ],
        ),
        FlatSection(
            "CATEGORY PERFORMANCE",
            ["Category", "Quantity Sold", "Revenue", "Percentage"],
            [
                [row.category_name, row.quantity_sold, _round(row.revenue), f"{row.percentage:.2f}%"]
                for row in analytics.category_sales
            ],
        ),
        FlatSection(
            "TABLE PERFORMANCE",
            ["Table", "Area", "Orders", "Revenue", "Average Order Value", "Utilization"],
            [
                [
                    row.table_number,
                    row.area or "",
                    row.order_count,
                    _round(row.revenue),
                    _round(row.average_order_value),
                    f"{row.utilization_rate:.2f}%",
                ]
                for row in analytics.table_sales
            ],
        ),
        FlatSection(
            "HOURLY SALES",
            ["Hour", "Orders", "Revenue"],
            [[row.hour, row.order_count, _round(row.revenue)] for row in analytics.hourly_breakdown],
        ),
        FlatSection(
            "DAILY SALES",
            ["Date", "Orders", "Revenue", "Customers"],
            [
                [row.date.isoformat(), row.order_count, _round(row.revenue), row.customer_count]
                for row in analytics.daily_breakdown
            ],
        ),
        FlatSection(
            "PAYMENT METHODS",
            ["Method", "Orders", "Amount", "Percentage"],
            [
                [row.method, row.count, _round(row.amount), f"{row.percentage:.2f}%"]
                for row in analytics.payment_method_breakdown
            ],
        ),
        FlatSection(
            "ORDER TYPES",
            ["Type", "Orders", "Revenue", "Percentage"],
            [
                [row.type, row.count, _round(row.revenue), f"{row.percentage:.2f}%"]
                for row in analytics.order_type_breakdown
            ],
        ),
        FlatSection(
            "TOP CUSTOMERS",
            ["Customer", "Orders", "Total Spent", "Average Order Value", "Last Order"],
            [
                [
                    row.customer_name,
                    row.order_count,
                    _round(row.total_spent),
                    _round(row.average_order_value),
                    row.last_order_date.isoformat(),
                ]
                for row in analytics.top_customers
            ],
        ),
        FlatSection(
            "STAFF PERFORMANCE",
            ["Staff", "Orders", "Revenue", "Average Order Value"],
            [
                [row.staff_name or row.staff_id, row.order_count, _round(row.total_revenue), _round(row.average_order_value)]
                for row in analytics.staff_performance
            ],
        ),
        FlatSection(
            "PEAK HOURS",
            ["Hour", "Orders", "Revenue", "Weekend Orders", "Weekday Orders", "Weekend Peak"],
            [
                [
                    row.hour,
                    row.order_count,
                    _round(row.revenue),
                    row.weekend_order_count,
                    row.weekday_order_count,
                    "Yes" if row.is_weekend else "No",
                ]
                for row in analytics.peak_hours
            ],
        ),
        FlatSection(
            "ITEM COMBINATIONS",
            ["Items", "Frequency", "Revenue"],
            [
                [" + ".join(row.items), row.frequency, _round(row.total_revenue)]
                for row in analytics.item_combinations
            ],
        ),
        FlatSection(
            "TAX AND DISCOUNTS",
            ["Metric", "Value"],
            [
                ["Gross Subtotal", _round(tax.gross_subtotal)],
                ["Total Tax", _round(tax.total_tax)],
                ["Total Discount", _round(tax.total_discount)],
                ["Net Revenue", _round(tax.net_revenue)],
                ["Effective Tax Rate", f"{tax.effective_tax_rate:.2f}%"],
                ["Discounted Orders", tax.discounted_orders],
                ["Average Discount", _round(tax.average_discount)],
            ],
        ),
    ]

    credit = analytics.credit_analytics
    if credit is not None:
        sections.append(
            FlatSection(
                "CREDIT ANALYSIS",
                ["Customer", "Order", "Table", "Date", "Total", "Received", "Remaining", "Status"],
                [
                    [
                        row.customer_name,
                        row.order_id,
                        row.table_number,
                        row.created_at.isoformat(),
                        _round(row.total_amount),
                        _round(row.amount_received),
                        _round(row.remaining_amount),
                        row.status.value,
                    ]
                    for row in credit.credit_transactions
                ],
            )
        )
    return sections


class ExportService:
    """Flat exports of sales analytics"""

    def export_csv(self, analytics: SalesAnalytics, date_range: DateRange) -> str:
        """Delimited text with one labeled section per breakdown"""
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")

        writer.writerow([f"Sales Report - {date_range.label}"])
        writer.writerow(
            [f"Period: {format_date(date_range.start_date)} - {format_date(date_range.end_date)}"]
        )
        if analytics.is_synthetic:
            writer.writerow(["Demonstration data"])
        writer.writerow([])

        for section in flat_sections(analytics):
            writer.writerow([section.title])
            writer.writerow(section.headers)
            writer.writerows(section.rows)
            writer.writerow([])

        return output.getvalue()

    def export_xlsx(self, analytics: SalesAnalytics, date_range: DateRange) -> bytes:
        """Workbook with one worksheet per breakdown"""
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        center_alignment = Alignment(horizontal="center", vertical="center")

        for section in flat_sections(analytics):
            ws = wb.create_sheet(title=section.title.title()[:SHEET_TITLE_LIMIT])

            ws["A1"] = f"{section.title.title()} - {date_range.label}"
            ws["A1"].font = Font(bold=True, size=12)

            for col, header in enumerate(section.headers, 1):
                cell = ws.cell(row=3, column=col, value=header)
                cell.font = header_font
                cell.fill = header_fill
                cell.alignment = center_alignment

            for row_idx, row in enumerate(section.rows, 4):
                for col_idx, value in enumerate(row, 1):
                    ws.cell(row=row_idx, column=col_idx, value=value)

            # Auto-adjust column widths
            for col_idx in range(1, len(section.headers) + 1):
                column_letter = get_column_letter(col_idx)
                max_length = max(
                    len(str(cell.value))
                    for cell in ws[column_letter][2:]
                    if cell.value is not None
                )
                ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

        output = io.BytesIO()
        wb.save(output)
        return output.getvalue()

    def export(self, analytics: SalesAnalytics, date_range: DateRange, format_type: str):
        """Returns ``(content, media_type, filename)`` for a supported format"""
        format_type = format_type.lower()
        if format_type not in EXPORT_FORMATS:
            raise ExportFormatError(format_type)

        if format_type == "csv":
            content = self.export_csv(analytics, date_range).encode("utf-8")
        else:
            content = self.export_xlsx(analytics, date_range)

        filename = (
            f"sales-report-{analytics.restaurant_id}-"
            f"{datetime.now().strftime('%Y%m%d_%H%M%S')}.{format_type}"
        )
        logger.info(f"Exported sales analytics as {format_type}: {len(content)} bytes")
        return content, MEDIA_TYPES[format_type], filename
