"""Payment Summary — pure aggregation of a ledger listing.

Invariants:
    - Counts cover every PaymentStatus (zero when absent)
    - confirmed_amount sums CONFIRMED claims only
    - Never raises on an empty ledger
"""

from tontinepro.core.domain_types import PaymentStatus
from tontinepro.core.records import PaymentRecord


def summarize_payments(payments: list[PaymentRecord]) -> dict:
    counts = {status.value: 0 for status in PaymentStatus}
    confirmed_amount = 0
    for payment in payments:
        counts[payment.status.value] += 1
        if payment.status == PaymentStatus.CONFIRMED:
            confirmed_amount += payment.amount
    return {
        "total": len(payments),
        "counts": counts,
        "confirmed_amount": confirmed_amount,
    }
