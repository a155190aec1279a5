# backend/modules/sales_reports/utils/payment_methods.py

"""
Payment-method classification.

Orders carry payment methods as free text typed by staff or composed by the
split-payment screen ("Split: CASH Rs.120 + UPI Rs.80"). Reports group them
into a fixed set of canonical labels.
"""

from typing import Optional

CASH = "Cash"
UPI = "UPI"
CARD = "Card"
BANK_TRANSFER = "Bank Transfer"
SPLIT_PAYMENT = "Split Payment"
NOT_SPECIFIED = "Not Specified"

CANONICAL_METHODS = (CASH, UPI, CARD, BANK_TRANSFER, SPLIT_PAYMENT, NOT_SPECIFIED)

_UPI_MARKERS = ("upi", "gpay", "google pay", "paytm", "phonepe")
_CARD_MARKERS = ("card", "credit", "debit")
_BANK_MARKERS = ("bank", "transfer", "neft", "imps", "rtgs")


def normalize_payment_method(raw: Optional[str]) -> str:
    """
    Map free-text payment method to a canonical label.

    Rules apply in order on the lower-cased first line, so "cash" wins over
    every other marker. Unrecognized text is title-cased. Applying the
    function to its own output returns the same label.
    """
    if raw is None:
        return NOT_SPECIFIED

    first_line = raw.strip().splitlines()[0].strip() if raw.strip() else ""
    text = first_line.lower()

    if "cash" in text:
        return CASH
    if not text or text == "not specified":
        return NOT_SPECIFIED
    if any(marker in text for marker in _UPI_MARKERS):
        return UPI
    if any(marker in text for marker in _CARD_MARKERS):
        return CARD
    if any(marker in text for marker in _BANK_MARKERS):
        return BANK_TRANSFER
    if "split" in text:
        return SPLIT_PAYMENT

    return first_line.title()
