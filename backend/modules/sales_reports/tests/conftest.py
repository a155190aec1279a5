# backend/modules/sales_reports/tests/conftest.py

import pytest
from datetime import datetime

from modules.sales_reports.interfaces import ReferenceData
from modules.sales_reports.schemas.analytics_schemas import DateRange
from modules.sales_reports.schemas.order_schemas import (
    CustomerRef,
    MenuItemRef,
    OrderType,
    TableRef,
)
from modules.sales_reports.tests.factories import (
    RESTAURANT_ID,
    OrderFactory,
    build_analytics,
    line,
)


@pytest.fixture
def restaurant_id():
    return RESTAURANT_ID


@pytest.fixture
def day_start():
    return datetime(2026, 10, 16, 0, 0)


@pytest.fixture
def day_end():
    return datetime(2026, 10, 16, 23, 59, 59, 999000)


@pytest.fixture
def day_range(day_start, day_end):
    return DateRange(start_date=day_start, end_date=day_end, label="Yesterday")


@pytest.fixture
def menu_items():
    return [
        MenuItemRef(id="menu-paneer", name="Paneer Tikka", category_name="Starters", price=100.0),
        MenuItemRef(id="menu-naan", name="Butter Naan", category_name="Breads", price=50.0),
        MenuItemRef(id="menu-dal", name="Dal Makhani", category_name="Main Course", price=200.0),
    ]


@pytest.fixture
def tables():
    return [
        TableRef(id="table-1", number="1", area="Main Hall"),
        TableRef(id="table-2", number="2", area="Patio"),
        TableRef(id="table-3", number="3"),
    ]


@pytest.fixture
def customers():
    return [
        CustomerRef(id="cust-asha", name="Asha", phone="9000000001"),
        CustomerRef(id="cust-ravi", name="Ravi", phone="9000000002"),
    ]


@pytest.fixture
def reference(menu_items, tables, customers):
    return ReferenceData(menu_items=menu_items, tables=tables, customers=customers)


@pytest.fixture
def sample_orders():
    """
    Four orders on one Friday.

    Revenue 805 over line totals of 800 (one order taxed 15, one discounted
    10). Asha orders twice, Ravi once, and the takeaway is anonymous.
    """
    return [
        OrderFactory(
            id="order-lunch",
            table_id="table-1",
            customer_id="cust-asha",
            staff_id="staff-1",
            items=[
                line("menu-paneer", "Paneer Tikka", 100.0, 2),
                line("menu-naan", "Butter Naan", 50.0, 2),
            ],
            tax=15.0,
            payment_method="cash",
            created_at=datetime(2026, 10, 16, 13, 0),
        ),
        OrderFactory(
            id="order-dinner-ravi",
            table_id="table-1",
            customer_id="cust-ravi",
            staff_id="staff-2",
            items=[line("menu-dal", "Dal Makhani", 200.0)],
            payment_method="Credit Card",
            created_at=datetime(2026, 10, 16, 19, 0),
        ),
        OrderFactory(
            id="order-dinner-asha",
            table_id="table-2",
            customer_id="cust-asha",
            staff_id="staff-1",
            items=[
                line("menu-paneer", "Paneer Tikka", 100.0),
                line("menu-naan", "Butter Naan", 50.0),
            ],
            discount=10.0,
            payment_method="UPI via GPay",
            created_at=datetime(2026, 10, 16, 19, 30),
        ),
        OrderFactory(
            id="order-takeaway",
            type=OrderType.TAKEAWAY,
            items=[line("menu-unknown", "Chef Special", 150.0)],
            payment_method="Split: CASH Rs.100 + UPI Rs.50\nCASH: 100\nUPI: 50",
            created_at=datetime(2026, 10, 16, 20, 0),
        ),
    ]


@pytest.fixture
def sample_analytics(sample_orders, day_start, day_end, menu_items, tables, customers):
    return build_analytics(
        sample_orders,
        day_start,
        day_end,
        menu_items=menu_items,
        tables=tables,
        customers=customers,
        allow_synthetic_data=False,
    )
