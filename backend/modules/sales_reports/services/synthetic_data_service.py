# backend/modules/sales_reports/services/synthetic_data_service.py

"""
Demonstration data for windows without any orders.

New restaurants open the reports screen before taking their first order;
instead of an empty report they get a realistic-looking dataset. Results
built from it are always tagged ``DataSource.SYNTHESIZED``.
"""

import logging
import random
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence, Tuple

from ..constants import (
    SYNTHETIC_ITEMS_PER_ORDER,
    SYNTHETIC_MAX_DAYS,
    SYNTHETIC_ORDER_NOTE,
    SYNTHETIC_ORDERS_PER_DAY,
    SYNTHETIC_TAX_RATE,
)
from ..schemas.order_schemas import (
    CustomerRef,
    MenuItemRef,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    PaymentStatus,
    TableRef,
)

logger = logging.getLogger(__name__)

DEMO_MENU = [
    MenuItemRef(id="demo-paneer-tikka", name="Paneer Tikka", category_name="Starters", price=220.0),
    MenuItemRef(id="demo-veg-spring-roll", name="Veg Spring Roll", category_name="Starters", price=160.0),
    MenuItemRef(id="demo-butter-chicken", name="Butter Chicken", category_name="Main Course", price=340.0),
    MenuItemRef(id="demo-dal-makhani", name="Dal Makhani", category_name="Main Course", price=240.0),
    MenuItemRef(id="demo-veg-biryani", name="Veg Biryani", category_name="Rice", price=260.0),
    MenuItemRef(id="demo-butter-naan", name="Butter Naan", category_name="Breads", price=60.0),
    MenuItemRef(id="demo-masala-chai", name="Masala Chai", category_name="Beverages", price=40.0),
    MenuItemRef(id="demo-gulab-jamun", name="Gulab Jamun", category_name="Desserts", price=90.0),
]

DEMO_PAYMENT_METHODS = ["cash", "UPI", "card"]
DEMO_ORDER_TYPES = [OrderType.DINE_IN, OrderType.DINE_IN, OrderType.TAKEAWAY, OrderType.DELIVERY]
SERVICE_HOURS = (11, 22)


class SyntheticOrderGenerator:
    """Generates completed, paid orders spread over a window"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(
        self,
        restaurant_id: str,
        start: datetime,
        end: datetime,
        menu_items: Sequence[MenuItemRef] = (),
        tables: Sequence[TableRef] = (),
        customers: Sequence[CustomerRef] = (),
    ) -> Tuple[List[Order], List[MenuItemRef]]:
        """
        Build orders for every day of the window, newest first.

        Only the most recent days are filled for very long windows. Returns
        the orders and the menu they were drawn from so category lookups
        resolve for the generated items.
        """
        menu = [item for item in menu_items if item.price] or list(DEMO_MENU)

        first_day = max(start.date(), end.date() - timedelta(days=SYNTHETIC_MAX_DAYS - 1))
        day_count = (end.date() - first_day).days + 1

        orders: List[Order] = []
        for offset in range(day_count):
            opening, closing = self._trading_span(first_day + timedelta(days=offset), start, end)
            seconds = int((closing - opening).total_seconds())
            for _ in range(self.rng.randint(*SYNTHETIC_ORDERS_PER_DAY)):
                created_at = opening + timedelta(seconds=self.rng.randint(0, seconds))
                orders.append(
                    self._order(restaurant_id, len(orders) + 1, created_at, menu, tables, customers)
                )

        orders.sort(key=lambda order: order.created_at, reverse=True)
        logger.debug(f"Generated {len(orders)} demonstration orders over {day_count} days")
        return orders, menu

    @staticmethod
    def _trading_span(day: date, start: datetime, end: datetime) -> Tuple[datetime, datetime]:
        """
        Part of ``day`` that orders may be stamped with.

        The day is first cut down to the window, then to service hours when
        the two overlap. A window lying wholly outside service hours keeps
        its own bounds so the day still gets orders.
        """
        midnight = datetime.combine(day, time.min)
        day_start = max(start, midnight)
        day_end = min(end, midnight + timedelta(days=1, microseconds=-1))

        opening = max(day_start, midnight + timedelta(hours=SERVICE_HOURS[0]))
        closing = min(day_end, midnight + timedelta(hours=SERVICE_HOURS[1], minutes=59))
        if opening <= closing:
            return opening, closing
        return day_start, day_end

    def _order(
        self,
        restaurant_id: str,
        sequence: int,
        created_at: datetime,
        menu: List[MenuItemRef],
        tables: Sequence[TableRef],
        customers: Sequence[CustomerRef],
    ) -> Order:
        picks = self.rng.sample(menu, min(self.rng.randint(*SYNTHETIC_ITEMS_PER_ORDER), len(menu)))
        items = []
        for line, menu_item in enumerate(picks, start=1):
            quantity = self.rng.randint(1, 3)
            items.append(
                OrderItem(
                    id=f"demo-{sequence}-{line}",
                    menu_item_id=menu_item.id,
                    name=menu_item.name,
                    price=menu_item.price,
                    quantity=quantity,
                    total=round(menu_item.price * quantity, 2),
                )
            )

        subtotal = sum(item.total for item in items)
        tax = round(subtotal * SYNTHETIC_TAX_RATE, 2)
        order_type = self.rng.choice(DEMO_ORDER_TYPES)
        table = (
            self.rng.choice(tables) if tables and order_type == OrderType.DINE_IN else None
        )
        customer = self.rng.choice(customers) if customers and self.rng.random() < 0.6 else None

        return Order(
            id=f"demo-{created_at:%Y%m%d}-{sequence}",
            restaurant_id=restaurant_id,
            order_number=f"DEMO-{sequence:04d}",
            table_id=table.id if table else None,
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else None,
            type=order_type,
            status=OrderStatus.COMPLETED,
            items=items,
            subtotal=subtotal,
            tax=tax,
            total=round(subtotal + tax, 2),
            payment_status=PaymentStatus.PAID,
            payment_method=self.rng.choice(DEMO_PAYMENT_METHODS),
            notes=SYNTHETIC_ORDER_NOTE,
            created_at=created_at,
        )
