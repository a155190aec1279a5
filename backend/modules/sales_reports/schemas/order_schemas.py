# backend/modules/sales_reports/schemas/order_schemas.py

"""
Read-only input records owned by the persistence layer.

Orders and credit transactions arrive from the document store as loose
documents; these models give them a typed shape and tolerate the missing
optional fields older documents carry.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    PLACED = "placed"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    DINE_IN = "dine_in"
    TAKEAWAY = "takeaway"
    DELIVERY = "delivery"
    PORTAL = "portal"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"


class CreditStatus(str, Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


class OrderItem(BaseModel):
    """A single line on an order"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    menu_item_id: str
    name: str
    price: float = Field(0.0, description="Unit price")
    quantity: int = Field(1, ge=0)
    total: float = Field(0.0, description="Line total")
    notes: Optional[str] = None


class Order(BaseModel):
    """Historical order as stored by the ordering screens"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    restaurant_id: str
    order_number: Optional[str] = None
    table_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    type: OrderType = OrderType.DINE_IN
    status: OrderStatus = OrderStatus.PLACED
    items: List[OrderItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    payment_status: Optional[PaymentStatus] = None
    payment_method: Optional[str] = Field(
        None, description="Free text, normalized by the payment-method classifier"
    )
    notes: Optional[str] = Field(
        None, description="May carry provenance such as 'Customer Portal'"
    )
    staff_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def item_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def items_total(self) -> float:
        return sum(item.total for item in self.items)


class CreditPayment(BaseModel):
    """A payment made against an outstanding credit"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    amount: float = 0.0
    payment_method: str = ""
    paid_at: datetime
    notes: Optional[str] = None


class CreditTransaction(BaseModel):
    """Part of an order bill left on credit"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    restaurant_id: str
    customer_id: Optional[str] = None
    customer_name: str = ""
    customer_phone: Optional[str] = None
    order_id: str
    table_number: str = ""
    total_amount: float = 0.0
    amount_received: float = 0.0
    payment_method: Optional[str] = None
    status: CreditStatus = CreditStatus.PENDING
    created_at: datetime
    notes: Optional[str] = None
    payment_history: List[CreditPayment] = Field(default_factory=list)


class MenuItemRef(BaseModel):
    """Display data for a menu item"""

    id: str
    name: str
    category_name: Optional[str] = None
    price: Optional[float] = None


class TableRef(BaseModel):
    """Display data for a dining table"""

    id: str
    number: str
    area: Optional[str] = None


class CustomerRef(BaseModel):
    """Display data for a customer"""

    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
