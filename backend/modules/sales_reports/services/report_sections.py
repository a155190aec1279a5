# backend/modules/sales_reports/services/report_sections.py

"""Turns analytics into the titled tables a report is made of."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..constants import CREDIT_TRANSACTION_DISPLAY_LIMIT, TABLE_DISPLAY_LIMIT
from ..schemas.analytics_schemas import ReportConfiguration, SalesAnalytics
from ..utils.formatting import (
    format_currency,
    format_date,
    format_hour,
    format_percentage,
    format_time,
)


@dataclass
class TableSection:
    """One titled table; ``weights`` are relative column widths"""

    title: str
    headers: List[str]
    rows: List[List[str]]
    weights: Optional[Sequence[float]] = None
    note: Optional[str] = None
    key: str = ""

    def column_widths(self, content_width: float) -> List[float]:
        weights = list(self.weights or [1] * len(self.headers))
        total = sum(weights)
        return [content_width * weight / total for weight in weights]


@dataclass
class SectionPlan:
    sections: List[TableSection] = field(default_factory=list)

    def add(self, section: TableSection):
        self.sections.append(section)

    @property
    def titles(self) -> List[str]:
        return [section.title for section in self.sections]


def _executive_summary(analytics: SalesAnalytics) -> TableSection:
    rows = [
        ["Total Revenue", format_currency(analytics.total_revenue)],
        ["Total Orders", str(analytics.total_orders)],
        ["Average Order Value", format_currency(analytics.average_order_value)],
        ["Total Items Sold", str(analytics.total_items)],
        ["Total Customers", str(analytics.total_customers)],
        ["Revenue Growth", format_percentage(analytics.revenue_growth, signed=True)],
        ["Order Growth", format_percentage(analytics.order_growth, signed=True)],
        ["Customer Growth", format_percentage(analytics.customer_growth, signed=True)],
    ]
    if analytics.repeat_customer_rate is not None:
        rows.append(["Repeat Customer Rate", format_percentage(analytics.repeat_customer_rate)])
    if analytics.table_utilization_rate is not None:
        rows.append(["Table Utilization", format_percentage(analytics.table_utilization_rate)])
    return TableSection("Executive Summary", ["Metric", "Value"], rows, key="summary")


def _insights(analytics: SalesAnalytics) -> Optional[TableSection]:
    if analytics.insights is None:
        return None
    rows = [["Profitability Trend", analytics.insights.profitability_trend.value.title()]]
    rows.extend(
        [f"Action {index}", action]
        for index, action in enumerate(analytics.insights.recommended_actions, start=1)
    )
    return TableSection("Business Insights", ["Insight", "Detail"], rows, [1, 3], key="insights")


def _menu_sections(analytics: SalesAnalytics) -> List[TableSection]:
    sections = [
        TableSection(
            "Top Selling Items",
            ["Item", "Category", "Qty Sold", "Revenue", "Share"],
            [
                [
                    row.name,
                    row.category_name,
                    str(row.quantity_sold),
                    format_currency(row.revenue),
                    format_percentage(row.percentage),
                ]
                for row in analytics.menu_item_sales[:TABLE_DISPLAY_LIMIT]
            ],
            [3, 2, 1, 1.5, 1],
            key="menu_items",
        ),
        TableSection(
            "Category Performance",
            ["Category", "Qty Sold", "Revenue", "Share"],
            [
                [
                    row.category_name,
                    str(row.quantity_sold),
                    format_currency(row.revenue),
                    format_percentage(row.percentage),
                ]
                for row in analytics.category_sales
            ],
            [3, 1, 1.5, 1],
            key="categories",
        ),
    ]
    if analytics.item_combinations:
        sections.append(
            TableSection(
                "Popular Item Combinations",
                ["Items", "Orders", "Revenue"],
                [
                    [" + ".join(row.items), str(row.frequency), format_currency(row.total_revenue)]
                    for row in analytics.item_combinations
                ],
                [4, 1, 1.5],
                key="item_combinations",
            )
        )
    return sections


def _table_section(analytics: SalesAnalytics) -> TableSection:
    return TableSection(
        "Table Performance",
        ["Table", "Area", "Orders", "Revenue", "Avg Order", "Utilization"],
        [
            [
                row.table_number,
                row.area or "-",
                str(row.order_count),
                format_currency(row.revenue),
                format_currency(row.average_order_value),
                format_percentage(row.utilization_rate),
            ]
            for row in analytics.table_sales[:TABLE_DISPLAY_LIMIT]
        ],
        [1, 1.5, 1, 1.5, 1.5, 1.2],
        key="tables",
    )


def _tax_section(analytics: SalesAnalytics, config: ReportConfiguration) -> TableSection:
    summary = analytics.tax_summary
    rows = []
    if config.include_tax_breakdown:
        rows.extend(
            [
                ["Gross Subtotal", format_currency(summary.gross_subtotal)],
                ["Total Tax", format_currency(summary.total_tax)],
                ["Effective Tax Rate", format_percentage(summary.effective_tax_rate)],
                ["Net Revenue (excl. tax)", format_currency(summary.net_revenue)],
            ]
        )
    if config.include_discount_analysis:
        rows.extend(
            [
                ["Total Discounts", format_currency(summary.total_discount)],
                ["Discounted Orders", str(summary.discounted_orders)],
                ["Average Discount", format_currency(summary.average_discount)],
            ]
        )
    return TableSection("Tax & Discount Summary", ["Metric", "Value"], rows, key="tax")


def _order_details(analytics: SalesAnalytics) -> TableSection:
    return TableSection(
        "Detailed Order List",
        ["Order", "Table", "Date", "Time", "Status", "Payment", "Items", "Total"],
        [
            [
                row.order_number,
                row.table_number,
                format_date(row.created_at),
                format_time(row.created_at),
                row.status.upper(),
                row.payment_info,
                row.items_summary or "-",
                format_currency(row.total),
            ]
            for row in analytics.detailed_orders or []
        ],
        [1.2, 0.8, 1.3, 1, 1.1, 1.4, 3, 1.3],
        key="order_details",
    )


def _customer_section(analytics: SalesAnalytics) -> TableSection:
    return TableSection(
        "Top Customers",
        ["Customer", "Orders", "Total Spent", "Avg Order", "Last Order"],
        [
            [
                row.customer_name,
                str(row.order_count),
                format_currency(row.total_spent),
                format_currency(row.average_order_value),
                format_date(row.last_order_date),
            ]
            for row in analytics.top_customers
        ],
        [2.5, 1, 1.5, 1.5, 1.5],
        key="customers",
    )


def _payment_section(analytics: SalesAnalytics) -> TableSection:
    return TableSection(
        "Payment Methods",
        ["Method", "Orders", "Amount", "Share"],
        [
            [row.method, str(row.count), format_currency(row.amount), format_percentage(row.percentage)]
            for row in analytics.payment_method_breakdown
        ],
        [2, 1, 1.5, 1],
        key="payment_methods",
    )


def _credit_sections(analytics: SalesAnalytics) -> List[TableSection]:
    credit = analytics.credit_analytics
    if credit is None:
        return []

    sections = [
        TableSection(
            "Credit Analysis",
            ["Metric", "Value"],
            [
                ["Total Credit Issued", format_currency(credit.total_credit_amount)],
                ["Pending Credit", format_currency(credit.pending_credit_amount)],
                ["Credit Collected", format_currency(credit.paid_credit_amount)],
                ["Orders With Credit", str(credit.orders_with_credits)],
                ["Revenue Collection Rate", format_percentage(credit.revenue_collection_rate)],
            ],
            key="credit",
        )
    ]

    transactions = credit.credit_transactions
    if transactions:
        shown = transactions[:CREDIT_TRANSACTION_DISPLAY_LIMIT]
        note = None
        if len(transactions) > len(shown):
            note = f"Showing first {len(shown)} of {len(transactions)} credit transactions"
        sections.append(
            TableSection(
                "Credit Transaction Details",
                ["Customer", "Table", "Date", "Total", "Received", "Remaining", "Status"],
                [
                    [
                        row.customer_name or "-",
                        row.table_number or "-",
                        format_date(row.created_at),
                        format_currency(row.total_amount),
                        format_currency(row.amount_received),
                        format_currency(row.remaining_amount),
                        row.status.value.replace("_", " ").title(),
                    ]
                    for row in shown
                ],
                [2, 0.8, 1.3, 1.3, 1.3, 1.3, 1.4],
                note=note,
                key="credit_transactions",
            )
        )
    return sections


def _order_type_section(analytics: SalesAnalytics) -> TableSection:
    return TableSection(
        "Order Types",
        ["Type", "Orders", "Revenue", "Share"],
        [
            [
                row.type.replace("_", " ").title(),
                str(row.count),
                format_currency(row.revenue),
                format_percentage(row.percentage),
            ]
            for row in analytics.order_type_breakdown
        ],
        [2, 1, 1.5, 1],
        key="order_types",
    )


def _staff_section(analytics: SalesAnalytics) -> TableSection:
    return TableSection(
        "Staff Performance",
        ["Staff", "Orders", "Revenue", "Avg Order"],
        [
            [
                row.staff_name or row.staff_id,
                str(row.order_count),
                format_currency(row.total_revenue),
                format_currency(row.average_order_value),
            ]
            for row in analytics.staff_performance
        ],
        [2, 1, 1.5, 1.5],
        key="staff",
    )


def _time_sections(analytics: SalesAnalytics) -> List[TableSection]:
    return [
        TableSection(
            "Daily Sales",
            ["Date", "Orders", "Revenue", "Customers"],
            [
                [format_date(row.date), str(row.order_count), format_currency(row.revenue), str(row.customer_count)]
                for row in analytics.daily_breakdown[-TABLE_DISPLAY_LIMIT:]
            ],
            [1.5, 1, 1.5, 1],
            key="daily",
        ),
        TableSection(
            "Peak Hours",
            ["Hour", "Orders", "Revenue", "Busiest On"],
            [
                [
                    format_hour(row.hour),
                    str(row.order_count),
                    format_currency(row.revenue),
                    "Weekends" if row.is_weekend else "Weekdays",
                ]
                for row in analytics.peak_hours
            ],
            [1.5, 1, 1.5, 1.2],
            key="peak_hours",
        ),
    ]


def build_sections(analytics: SalesAnalytics, config: ReportConfiguration) -> SectionPlan:
    """Sections in report order, honouring the configuration toggles"""
    plan = SectionPlan()
    plan.add(_executive_summary(analytics))

    insights = _insights(analytics)
    if insights is not None:
        plan.add(insights)

    if config.include_menu_analysis:
        for section in _menu_sections(analytics):
            plan.add(section)

    if config.include_table_analysis and analytics.table_sales:
        plan.add(_table_section(analytics))

    if config.include_tax_breakdown or config.include_discount_analysis:
        plan.add(_tax_section(analytics, config))

    if config.include_order_details and analytics.detailed_orders:
        plan.add(_order_details(analytics))

    if config.include_customer_analysis:
        plan.add(_customer_section(analytics))

    plan.add(_payment_section(analytics))

    if config.include_credit_analysis:
        for section in _credit_sections(analytics):
            plan.add(section)

    plan.add(_order_type_section(analytics))

    if config.include_staff_analysis:
        plan.add(_staff_section(analytics))

    if config.include_time_analysis:
        for section in _time_sections(analytics):
            plan.add(section)

    return plan
