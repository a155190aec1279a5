# backend/modules/sales_reports/services/aggregation_service.py

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Set

from ..constants import (
    ANONYMOUS_CUSTOMER_KEY,
    ANONYMOUS_LABEL,
    DEFAULT_DETAILED_ORDER_LIMIT,
    ITEM_COMBINATION_LIMIT,
    ITEM_COMBINATION_MAX_ITEMS,
    ITEM_COMBINATION_MIN_FREQUENCY,
    ITEM_COMBINATION_SEPARATOR,
    PEAK_HOURS_LIMIT,
    TOP_CUSTOMERS_LIMIT,
    UNCATEGORIZED_LABEL,
    UNKNOWN_LABEL,
    UNKNOWN_STAFF_ID,
)
from ..interfaces import ReferenceData
from ..schemas.analytics_schemas import (
    CategorySalesRow,
    CustomerSalesRow,
    DailySalesRow,
    DetailedOrderRow,
    HourlySalesRow,
    ItemCombinationRow,
    MenuItemSalesRow,
    OrderTypeRow,
    PaymentMethodRow,
    PeakHourRow,
    StaffPerformanceRow,
    TableSalesRow,
    TaxDiscountSummary,
)
from ..schemas.order_schemas import Order, OrderStatus, PaymentStatus
from ..utils.payment_methods import SPLIT_PAYMENT, normalize_payment_method

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6


def is_revenue_eligible(order: Order) -> bool:
    """Completed orders with a recorded payment count towards revenue"""
    if order.status != OrderStatus.COMPLETED:
        return False
    if order.payment_status in (PaymentStatus.PAID, PaymentStatus.PARTIAL):
        return True
    return bool(order.payment_method and order.payment_method.strip())


def percentage(amount: float, base: float) -> float:
    if base == 0:
        return 0.0
    return amount / base * 100


def safe_average(total: float, count: int) -> float:
    if count == 0:
        return 0.0
    return total / count


def window_days(start: datetime, end: datetime) -> int:
    return max((end.date() - start.date()).days + 1, 1)


@dataclass
class AggregatedSales:
    """Scalars and breakdowns computed from one order list"""

    total_revenue: float
    total_orders: int
    average_order_value: float
    total_items: int
    total_customers: int
    repeat_customer_rate: Optional[float]
    table_utilization_rate: Optional[float]
    menu_item_sales: List[MenuItemSalesRow]
    category_sales: List[CategorySalesRow]
    table_sales: List[TableSalesRow]
    hourly_breakdown: List[HourlySalesRow]
    daily_breakdown: List[DailySalesRow]
    payment_method_breakdown: List[PaymentMethodRow]
    order_type_breakdown: List[OrderTypeRow]
    top_customers: List[CustomerSalesRow]
    staff_performance: List[StaffPerformanceRow]
    peak_hours: List[PeakHourRow]
    item_combinations: List[ItemCombinationRow]
    tax_summary: TaxDiscountSummary
    detailed_orders: List[DetailedOrderRow] = field(default_factory=list)


class AggregationService:
    """
    Folds eligible orders into independent breakdowns.

    Every percentage is taken against total revenue (the sum of order
    totals) and is zero when that is zero. Order-keyed breakdowns (payment
    method, order type) therefore sum to 100; item-keyed breakdowns sum to
    the share of revenue carried by line totals.
    """

    def __init__(
        self,
        reference: Optional[ReferenceData] = None,
        detailed_order_limit: int = DEFAULT_DETAILED_ORDER_LIMIT,
    ):
        self.reference = reference or ReferenceData()
        self.detailed_order_limit = detailed_order_limit
        self._unresolved: Dict[str, Set[str]] = defaultdict(set)

    def aggregate(
        self, orders: List[Order], period_start: datetime, period_end: datetime
    ) -> AggregatedSales:
        self._unresolved = defaultdict(set)

        total_revenue = sum(order.total for order in orders)
        total_orders = len(orders)
        customer_ids = {order.customer_id for order in orders if order.customer_id}

        result = AggregatedSales(
            total_revenue=total_revenue,
            total_orders=total_orders,
            average_order_value=safe_average(total_revenue, total_orders),
            total_items=sum(order.item_quantity for order in orders),
            total_customers=len(customer_ids),
            repeat_customer_rate=self.repeat_customer_rate(orders),
            table_utilization_rate=self.table_utilization_rate(orders),
            menu_item_sales=self.menu_item_sales(orders, total_revenue),
            category_sales=self.category_sales(orders, total_revenue),
            table_sales=self.table_sales(orders, period_start, period_end),
            hourly_breakdown=self.hourly_breakdown(orders),
            daily_breakdown=self.daily_breakdown(orders),
            payment_method_breakdown=self.payment_method_breakdown(orders),
            order_type_breakdown=self.order_type_breakdown(orders),
            top_customers=self.top_customers(orders),
            staff_performance=self.staff_performance(orders),
            peak_hours=self.peak_hours(orders),
            item_combinations=self.item_combinations(orders),
            tax_summary=self.tax_summary(orders),
            detailed_orders=self.detailed_orders(orders),
        )

        self._log_unresolved()
        return result

    def _note_unresolved(self, kind: str, ref_id: str):
        if ref_id not in self._unresolved[kind]:
            logger.debug(f"Unresolved {kind} id {ref_id}; using placeholder label")
        self._unresolved[kind].add(ref_id)

    def _log_unresolved(self):
        counts = {kind: len(ids) for kind, ids in self._unresolved.items() if ids}
        if counts:
            summary = ", ".join(f"{count} {kind}" for kind, count in counts.items())
            logger.info(f"Placeholder labels used for unresolved references: {summary}")

    def _table_label(self, table_id: str) -> str:
        table = self.reference.table(table_id)
        if table is None:
            self._note_unresolved("table", table_id)
            return UNKNOWN_LABEL
        return table.number

    def _customer_name(self, order: Order) -> str:
        customer = self.reference.customer(order.customer_id)
        if customer is not None and customer.name:
            return customer.name
        if order.customer_id and customer is None:
            self._note_unresolved("customer", order.customer_id)
        return order.customer_name or ANONYMOUS_LABEL

    def menu_item_sales(
        self, orders: List[Order], total_revenue: float
    ) -> List[MenuItemSalesRow]:
        stats: Dict[str, Dict] = {}
        for order in orders:
            for item in order.items:
                entry = stats.get(item.menu_item_id)
                if entry is None:
                    menu_item = self.reference.menu_item(item.menu_item_id)
                    if menu_item is None:
                        self._note_unresolved("menu item", item.menu_item_id)
                    entry = stats[item.menu_item_id] = {
                        "name": menu_item.name if menu_item else item.name,
                        "category_name": (
                            menu_item.category_name
                            if menu_item and menu_item.category_name
                            else UNCATEGORIZED_LABEL
                        ),
                        "quantity_sold": 0,
                        "revenue": 0.0,
                    }
                entry["quantity_sold"] += item.quantity
                entry["revenue"] += item.total
        rows = [
            MenuItemSalesRow(
                menu_item_id=menu_item_id,
                percentage=percentage(entry["revenue"], total_revenue),
                **entry,
            )
            for menu_item_id, entry in stats.items()
        ]
        return sorted(rows, key=lambda row: row.revenue, reverse=True)

    def category_sales(
        self, orders: List[Order], total_revenue: float
    ) -> List[CategorySalesRow]:
        stats: Dict[str, Dict] = defaultdict(
            lambda: {"quantity_sold": 0, "revenue": 0.0, "item_count": 0}
        )
        for order in orders:
            for item in order.items:
                menu_item = self.reference.menu_item(item.menu_item_id)
                category = (
                    menu_item.category_name
                    if menu_item and menu_item.category_name
                    else UNCATEGORIZED_LABEL
                )
                stats[category]["quantity_sold"] += item.quantity
                stats[category]["revenue"] += item.total
                stats[category]["item_count"] += 1
        rows = [
            CategorySalesRow(
                category_name=category,
                percentage=percentage(entry["revenue"], total_revenue),
                **entry,
            )
            for category, entry in stats.items()
        ]
        return sorted(rows, key=lambda row: row.revenue, reverse=True)

    def table_sales(
        self, orders: List[Order], period_start: datetime, period_end: datetime
    ) -> List[TableSalesRow]:
        stats: Dict[str, Dict] = {}
        for order in orders:
            if not order.table_id:
                continue
            entry = stats.setdefault(
                order.table_id, {"order_count": 0, "revenue": 0.0, "days": set()}
            )
            entry["order_count"] += 1
            entry["revenue"] += order.total
            entry["days"].add(order.created_at.date())

        days = window_days(period_start, period_end)
        rows = []
        for table_id, entry in stats.items():
            table = self.reference.table(table_id)
            rows.append(
                TableSalesRow(
                    table_id=table_id,
                    table_number=self._table_label(table_id),
                    area=table.area if table else None,
                    order_count=entry["order_count"],
                    revenue=entry["revenue"],
                    average_order_value=safe_average(
                        entry["revenue"], entry["order_count"]
                    ),
                    utilization_rate=min(len(entry["days"]) / days * 100, 100.0),
                )
            )
        return sorted(rows, key=lambda row: row.revenue, reverse=True)

    def table_utilization_rate(self, orders: List[Order]) -> Optional[float]:
        """Share of known tables that served at least one order"""
        if not self.reference.tables:
            return None
        known = {table.id for table in self.reference.tables}
        used = {order.table_id for order in orders if order.table_id in known}
        return len(used) / len(known) * 100

    def repeat_customer_rate(self, orders: List[Order]) -> Optional[float]:
        counts: Dict[str, int] = defaultdict(int)
        for order in orders:
            if order.customer_id:
                counts[order.customer_id] += 1
        if not counts:
            return None
        repeat = sum(1 for count in counts.values() if count > 1)
        return repeat / len(counts) * 100

    def hourly_breakdown(self, orders: List[Order]) -> List[HourlySalesRow]:
        counts = [0] * 24
        revenue = [0.0] * 24
        for order in orders:
            hour = order.created_at.hour
            counts[hour] += 1
            revenue[hour] += order.total
        return [
            HourlySalesRow(hour=hour, order_count=counts[hour], revenue=revenue[hour])
            for hour in range(24)
        ]

    def daily_breakdown(self, orders: List[Order]) -> List[DailySalesRow]:
        stats: Dict[date, Dict] = {}
        for order in orders:
            entry = stats.setdefault(
                order.created_at.date(),
                {"order_count": 0, "revenue": 0.0, "customers": set()},
            )
            entry["order_count"] += 1
            entry["revenue"] += order.total
            entry["customers"].add(order.customer_id or ANONYMOUS_CUSTOMER_KEY)

        return [
            DailySalesRow(
                date=day,
                order_count=entry["order_count"],
                revenue=entry["revenue"],
                customer_count=len(entry["customers"]),
            )
            for day, entry in sorted(stats.items())
        ]

    def payment_method_breakdown(self, orders: List[Order]) -> List[PaymentMethodRow]:
        stats: Dict[str, Dict] = defaultdict(lambda: {"count": 0, "amount": 0.0})
        for order in orders:
            method = normalize_payment_method(order.payment_method)
            stats[method]["count"] += 1
            stats[method]["amount"] += order.total

        total_revenue = sum(order.total for order in orders)
        rows = [
            PaymentMethodRow(
                method=method,
                percentage=percentage(entry["amount"], total_revenue),
                **entry,
            )
            for method, entry in stats.items()
        ]
        return sorted(rows, key=lambda row: row.amount, reverse=True)

    def order_type_breakdown(self, orders: List[Order]) -> List[OrderTypeRow]:
        stats: Dict[str, Dict] = defaultdict(lambda: {"count": 0, "revenue": 0.0})
        for order in orders:
            stats[order.type.value]["count"] += 1
            stats[order.type.value]["revenue"] += order.total

        total_revenue = sum(order.total for order in orders)
        rows = [
            OrderTypeRow(
                type=order_type,
                percentage=percentage(entry["revenue"], total_revenue),
                **entry,
            )
            for order_type, entry in stats.items()
        ]
        return sorted(rows, key=lambda row: row.revenue, reverse=True)

    def top_customers(self, orders: List[Order]) -> List[CustomerSalesRow]:
        stats: Dict[str, Dict] = {}
        for order in orders:
            if not order.customer_id:
                continue
            entry = stats.get(order.customer_id)
            if entry is None:
                entry = stats[order.customer_id] = {
                    "customer_name": self._customer_name(order),
                    "order_count": 0,
                    "total_spent": 0.0,
                    "last_order_date": order.created_at,
                }
            entry["order_count"] += 1
            entry["total_spent"] += order.total
            entry["last_order_date"] = max(entry["last_order_date"], order.created_at)

        rows = [
            CustomerSalesRow(
                customer_id=customer_id,
                average_order_value=safe_average(
                    entry["total_spent"], entry["order_count"]
                ),
                **entry,
            )
            for customer_id, entry in stats.items()
        ]
        rows.sort(key=lambda row: row.total_spent, reverse=True)
        return rows[:TOP_CUSTOMERS_LIMIT]

    def staff_performance(self, orders: List[Order]) -> List[StaffPerformanceRow]:
        stats: Dict[str, Dict] = defaultdict(lambda: {"order_count": 0, "total_revenue": 0.0})
        for order in orders:
            staff_id = order.staff_id or UNKNOWN_STAFF_ID
            stats[staff_id]["order_count"] += 1
            stats[staff_id]["total_revenue"] += order.total

        rows = [
            StaffPerformanceRow(
                staff_id=staff_id,
                average_order_value=safe_average(
                    entry["total_revenue"], entry["order_count"]
                ),
                **entry,
            )
            for staff_id, entry in stats.items()
        ]
        return sorted(rows, key=lambda row: row.total_revenue, reverse=True)

    def peak_hours(self, orders: List[Order]) -> List[PeakHourRow]:
        stats: Dict[int, Dict] = defaultdict(
            lambda: {"order_count": 0, "revenue": 0.0, "weekend": 0, "weekday": 0}
        )
        for order in orders:
            entry = stats[order.created_at.hour]
            entry["order_count"] += 1
            entry["revenue"] += order.total
            if order.created_at.weekday() in (SATURDAY, SUNDAY):
                entry["weekend"] += 1
            else:
                entry["weekday"] += 1

        # Ties keep ascending hour order
        ranked = sorted(
            sorted(stats.items()), key=lambda pair: pair[1]["order_count"], reverse=True
        )
        return [
            PeakHourRow(
                hour=hour,
                order_count=entry["order_count"],
                revenue=entry["revenue"],
                weekend_order_count=entry["weekend"],
                weekday_order_count=entry["weekday"],
                is_weekend=entry["weekend"] > entry["weekday"],
            )
            for hour, entry in ranked[:PEAK_HOURS_LIMIT]
        ]

    def item_combinations(self, orders: List[Order]) -> List[ItemCombinationRow]:
        stats: Dict[str, Dict] = {}
        for order in orders:
            names = list(dict.fromkeys(item.name for item in order.items))
            if len(names) < 2:
                continue
            combination = sorted(names[:ITEM_COMBINATION_MAX_ITEMS])
            key = ITEM_COMBINATION_SEPARATOR.join(combination)
            entry = stats.setdefault(
                key, {"items": combination, "frequency": 0, "total_revenue": 0.0}
            )
            entry["frequency"] += 1
            entry["total_revenue"] += order.total

        rows = [
            ItemCombinationRow(**entry)
            for entry in stats.values()
            if entry["frequency"] >= ITEM_COMBINATION_MIN_FREQUENCY
        ]
        rows.sort(key=lambda row: row.frequency, reverse=True)
        return rows[:ITEM_COMBINATION_LIMIT]

    def tax_summary(self, orders: List[Order]) -> TaxDiscountSummary:
        gross_subtotal = sum(order.subtotal for order in orders)
        total_tax = sum(order.tax for order in orders)
        total_discount = sum(order.discount for order in orders)
        discounted = [order for order in orders if order.discount > 0]

        return TaxDiscountSummary(
            gross_subtotal=gross_subtotal,
            total_tax=total_tax,
            total_discount=total_discount,
            net_revenue=sum(order.total for order in orders) - total_tax,
            effective_tax_rate=percentage(total_tax, gross_subtotal),
            discounted_orders=len(discounted),
            average_discount=safe_average(total_discount, len(discounted)),
        )

    def detailed_orders(self, orders: List[Order]) -> List[DetailedOrderRow]:
        recent = sorted(orders, key=lambda order: order.created_at, reverse=True)
        rows = []
        for order in recent[: self.detailed_order_limit]:
            rows.append(
                DetailedOrderRow(
                    order_id=order.id,
                    order_number=order.order_number or order.id,
                    table_number=(
                        self._table_label(order.table_id) if order.table_id else "-"
                    ),
                    created_at=order.created_at,
                    status=order.status.value,
                    type=order.type.value,
                    payment_info=payment_info(order.payment_method),
                    item_count=len(order.items),
                    total_items=order.item_quantity,
                    subtotal=order.subtotal,
                    tax=order.tax,
                    total=order.total,
                    items_summary=", ".join(
                        f"{item.quantity}x {item.name}" for item in order.items
                    ),
                )
            )
        return rows


def payment_info(raw: Optional[str]) -> str:
    """Display text for an order's payment, keeping split details"""
    if raw and "split" in raw.lower():
        first_line = raw.strip().splitlines()[0].strip()
        return first_line or SPLIT_PAYMENT
    return normalize_payment_method(raw)
