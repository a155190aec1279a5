# backend/modules/sales_reports/services/order_retrieval_service.py

"""
Degrading order retrieval.

Tries progressively less server-optimized query forms until one succeeds.
Every tier yields the same records for the same window, differing only in
which side performs the filtering and sorting.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..constants import DEFAULT_ORDER_BATCH_SIZE
from ..exceptions import OrderRetrievalError
from ..interfaces import OrderQuery, OrderRecord, OrderSource
from ..schemas.order_schemas import Order

logger = logging.getLogger(__name__)

TIER_INDEXED = "indexed"
TIER_UNORDERED = "unordered"
TIER_RESTAURANT_SCAN = "restaurant_scan"


def coerce_orders(records: Iterable[OrderRecord]) -> List[Order]:
    """Validate raw documents into orders, skipping malformed ones"""
    orders = []
    for record in records:
        if isinstance(record, Order):
            orders.append(record)
            continue
        try:
            orders.append(Order.model_validate(record))
        except PydanticValidationError as e:
            record_id = record.get("id") if isinstance(record, dict) else None
            logger.warning(f"Skipping malformed order record {record_id}: {e}")
    return orders


def newest_first(orders: List[Order]) -> List[Order]:
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


def in_window(orders: Iterable[Order], start: datetime, end: datetime) -> List[Order]:
    return [order for order in orders if start <= order.created_at <= end]


class DegradingOrderRetriever:
    """Fetches a restaurant's orders for a window, newest first"""

    def __init__(
        self, order_source: OrderSource, batch_size: int = DEFAULT_ORDER_BATCH_SIZE
    ):
        self.order_source = order_source
        self.batch_size = batch_size

    def _tiers(
        self, restaurant_id: str, start: datetime, end: datetime
    ) -> List[Tuple[str, OrderQuery, Callable[[List[Order]], List[Order]]]]:
        return [
            (
                TIER_INDEXED,
                OrderQuery(
                    restaurant_id=restaurant_id,
                    start=start,
                    end=end,
                    descending=True,
                    limit=self.batch_size,
                ),
                lambda orders: orders,
            ),
            (
                TIER_UNORDERED,
                OrderQuery(restaurant_id=restaurant_id, start=start, end=end),
                newest_first,
            ),
            (
                TIER_RESTAURANT_SCAN,
                OrderQuery(restaurant_id=restaurant_id),
                lambda orders: newest_first(in_window(orders, start, end)),
            ),
        ]

    async def fetch(
        self, restaurant_id: str, start: datetime, end: datetime
    ) -> List[Order]:
        """
        Return orders created within [start, end], newest first.

        Tiers run sequentially; each is attempted only after the previous
        one raised.

        Raises:
            OrderRetrievalError: every tier failed
        """
        last_error: Optional[Exception] = None
        last_tier = TIER_INDEXED

        for tier, query, finish in self._tiers(restaurant_id, start, end):
            last_tier = tier
            try:
                records = await self.order_source.query_orders(query)
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Order query tier '{tier}' failed for restaurant "
                    f"{restaurant_id}: {e}"
                )
                continue

            orders = finish(coerce_orders(records))
            if tier != TIER_INDEXED:
                logger.info(
                    f"Fetched {len(orders)} orders for restaurant {restaurant_id} "
                    f"using fallback tier '{tier}'"
                )
            return orders

        logger.error(
            f"All order query tiers failed for restaurant {restaurant_id}: {last_error}"
        )
        raise OrderRetrievalError(restaurant_id, last_tier, str(last_error))
