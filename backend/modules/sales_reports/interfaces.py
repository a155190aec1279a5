# backend/modules/sales_reports/interfaces.py

"""
Collaborator contracts for the sales reports module.

Order and credit persistence live outside this module. Services depend on
the abstract sources below; the in-memory implementations back tests and
local development.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import QueryCapabilityError
from .schemas.order_schemas import (
    CreditTransaction,
    CustomerRef,
    MenuItemRef,
    Order,
    TableRef,
)

OrderRecord = Union[Order, Dict[str, Any]]
CreditRecord = Union[CreditTransaction, Dict[str, Any]]


@dataclass(frozen=True)
class OrderQuery:
    """
    One query form against the order store.

    ``start``/``end`` request an indexed range filter on ``created_at`` and
    ``descending`` requests server-side ordering. Leaving them unset asks
    for the plain restaurant-only scan.
    """

    restaurant_id: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    descending: bool = False
    limit: Optional[int] = None

    @property
    def has_range(self) -> bool:
        return self.start is not None or self.end is not None


class OrderSource(ABC):
    """Read access to historical orders."""

    @abstractmethod
    async def query_orders(self, query: OrderQuery) -> List[OrderRecord]:
        """
        Run one query form.

        Raises:
            QueryCapabilityError: the store cannot serve this form, for
                example because a composite index is missing
        """
        pass


class CreditSource(ABC):
    """Read access to credit transactions."""

    @abstractmethod
    async def fetch_all(self, restaurant_id: str) -> List[CreditRecord]:
        """Return every credit transaction for a restaurant"""
        pass


def _record_value(record: OrderRecord, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _record_created_at(record: OrderRecord) -> Optional[datetime]:
    value = _record_value(record, "created_at")
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


class InMemoryOrderSource(OrderSource):
    """
    Order source over a list of records.

    The capability flags simulate stores that reject range filters or
    server-side ordering, and ``available=False`` simulates an outage.
    Every attempted query is appended to ``calls``.
    """

    def __init__(
        self,
        orders: Optional[Iterable[OrderRecord]] = None,
        supports_range: bool = True,
        supports_ordering: bool = True,
        available: bool = True,
    ):
        self.orders: List[OrderRecord] = list(orders or [])
        self.supports_range = supports_range
        self.supports_ordering = supports_ordering
        self.available = available
        self.calls: List[OrderQuery] = []

    async def query_orders(self, query: OrderQuery) -> List[OrderRecord]:
        self.calls.append(query)

        if not self.available:
            raise ConnectionError("order store unavailable")
        if query.has_range and not self.supports_range:
            raise QueryCapabilityError("range_filter", "index not built")
        if query.descending and not self.supports_ordering:
            raise QueryCapabilityError("ordering", "index not built")

        records = [
            record
            for record in self.orders
            if _record_value(record, "restaurant_id") == query.restaurant_id
        ]

        if query.has_range:
            in_range = []
            for record in records:
                created_at = _record_created_at(record)
                if created_at is None:
                    continue
                if query.start is not None and created_at < query.start:
                    continue
                if query.end is not None and created_at > query.end:
                    continue
                in_range.append(record)
            records = in_range

        if query.descending:
            records.sort(
                key=lambda record: _record_created_at(record) or datetime.min,
                reverse=True,
            )

        if query.limit is not None:
            records = records[: query.limit]

        return records


class InMemoryCreditSource(CreditSource):
    """Credit source over a list of records."""

    def __init__(
        self,
        transactions: Optional[Iterable[CreditRecord]] = None,
        available: bool = True,
    ):
        self.transactions: List[CreditRecord] = list(transactions or [])
        self.available = available

    async def fetch_all(self, restaurant_id: str) -> List[CreditRecord]:
        if not self.available:
            raise ConnectionError("credit store unavailable")
        return [
            record
            for record in self.transactions
            if _record_value(record, "restaurant_id") == restaurant_id
        ]


@dataclass
class ReferenceData:
    """Lookup tables the caller supplies for display names"""

    menu_items: List[MenuItemRef] = field(default_factory=list)
    tables: List[TableRef] = field(default_factory=list)
    customers: List[CustomerRef] = field(default_factory=list)

    def __post_init__(self):
        self._menu_by_id = {item.id: item for item in self.menu_items}
        self._table_by_id = {table.id: table for table in self.tables}
        self._customer_by_id = {customer.id: customer for customer in self.customers}

    def menu_item(self, menu_item_id: Optional[str]) -> Optional[MenuItemRef]:
        if menu_item_id is None:
            return None
        return self._menu_by_id.get(menu_item_id)

    def table(self, table_id: Optional[str]) -> Optional[TableRef]:
        if table_id is None:
            return None
        return self._table_by_id.get(table_id)

    def customer(self, customer_id: Optional[str]) -> Optional[CustomerRef]:
        if customer_id is None:
            return None
        return self._customer_by_id.get(customer_id)
