# backend/modules/sales_reports/services/credit_reconciliation_service.py

import logging
from datetime import datetime
from typing import Iterable, List

from pydantic import ValidationError as PydanticValidationError

from ..interfaces import CreditRecord
from ..schemas.analytics_schemas import (
    CreditAnalytics,
    CreditPaymentDetail,
    CreditTransactionDetail,
)
from ..schemas.order_schemas import CreditStatus, CreditTransaction
from ..utils.payment_methods import normalize_payment_method

logger = logging.getLogger(__name__)


def coerce_credit_transactions(records: Iterable[CreditRecord]) -> List[CreditTransaction]:
    transactions = []
    for record in records:
        if isinstance(record, CreditTransaction):
            transactions.append(record)
            continue
        try:
            transactions.append(CreditTransaction.model_validate(record))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed credit transaction: {e}")
    return transactions


def derive_status(remaining: float, paid: float) -> CreditStatus:
    if remaining <= 0:
        return CreditStatus.PAID
    if paid > 0:
        return CreditStatus.PARTIALLY_PAID
    return CreditStatus.PENDING


def reconcile_transaction(transaction: CreditTransaction) -> CreditTransactionDetail:
    """
    Annotate a credit with its remaining balance and derived status.

    Stored amounts are clamped so that received plus later payments never
    exceed the bill total.
    """
    total = max(transaction.total_amount, 0.0)
    received = min(max(transaction.amount_received, 0.0), total)
    credit_amount = total - received

    paid = sum(max(payment.amount, 0.0) for payment in transaction.payment_history)
    paid = min(paid, credit_amount)
    remaining = max(credit_amount - paid, 0.0)

    return CreditTransactionDetail(
        customer_name=transaction.customer_name,
        customer_phone=transaction.customer_phone,
        order_id=transaction.order_id,
        table_number=transaction.table_number,
        total_amount=total,
        amount_received=received,
        credit_amount=credit_amount,
        remaining_amount=remaining,
        status=derive_status(remaining, paid),
        created_at=transaction.created_at,
        payment_history=[
            CreditPaymentDetail(
                amount=payment.amount,
                payment_method=normalize_payment_method(payment.payment_method),
                paid_at=payment.paid_at,
            )
            for payment in transaction.payment_history
        ],
    )


class CreditReconciliationService:
    """Summarizes credits raised within a reporting window"""

    def reconcile(
        self,
        records: Iterable[CreditRecord],
        start: datetime,
        end: datetime,
        total_revenue: float,
    ) -> CreditAnalytics:
        transactions = [
            transaction
            for transaction in coerce_credit_transactions(records)
            if start <= transaction.created_at <= end
        ]
        details = [reconcile_transaction(transaction) for transaction in transactions]
        details.sort(key=lambda detail: detail.created_at, reverse=True)

        total_credit = sum(detail.credit_amount for detail in details)
        pending = sum(detail.remaining_amount for detail in details)
        paid = total_credit - pending

        if total_revenue > 0:
            collection_rate = (total_revenue - pending) / total_revenue * 100
            collection_rate = min(max(collection_rate, 0.0), 100.0)
        else:
            collection_rate = 100.0

        return CreditAnalytics(
            total_credit_amount=total_credit,
            pending_credit_amount=pending,
            paid_credit_amount=paid,
            orders_with_credits=len({detail.order_id for detail in details}),
            revenue_collection_rate=collection_rate,
            credit_transactions=details,
        )
