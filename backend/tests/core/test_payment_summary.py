"""Payment Summary — aggregation of a ledger listing."""

from tontinepro.core.domain_types import PaymentStatus
from tontinepro.core.payment_summary import summarize_payments

from tests.builders import make_payment, make_tontine


def test_empty_ledger():
    assert summarize_payments([]) == {
        "total": 0,
        "counts": {"pending": 0, "confirmed": 0, "rejected": 0},
        "confirmed_amount": 0,
    }


def test_counts_and_confirmed_amount():
    tontine = make_tontine()
    payments = [
        make_payment(tontine, "a", amount=5_000, status=PaymentStatus.CONFIRMED),
        make_payment(tontine, "b", amount=7_000, status=PaymentStatus.CONFIRMED),
        make_payment(tontine, "c", amount=9_000, status=PaymentStatus.REJECTED),
        make_payment(tontine, "d", amount=1_000),
    ]
    summary = summarize_payments(payments)
    assert summary["total"] == 4
    assert summary["counts"] == {"pending": 1, "confirmed": 2, "rejected": 1}
    assert summary["confirmed_amount"] == 12_000
