"""Request schemas — field bounds, stripping and cross-field rules.

Invariants:
    - Names and display names are stripped and never empty
    - Amounts are strictly positive
    - end_date never precedes start_date
    - A collection window is savings-only, complete and ordered
"""

from datetime import date

import pytest
from pydantic import ValidationError

from tontinepro.core.domain_types import (
    Cadence,
    ContributionKind,
    ValidationDecision,
    Weekday,
)
from tontinepro.core.records import TontineDraft
from tontinepro.schemas.participant import JoinRequest, ReorderRequest
from tontinepro.schemas.payment import PaymentSubmit, PaymentValidate
from tontinepro.schemas.tontine import TontineCreate, TontineUpdate


def _create(**overrides) -> TontineCreate:
    body = {
        "name": "Tontine du quartier",
        "contribution_amount": 10000,
        "cadence": "monthly",
        "collection_day": "friday",
        "start_date": "2025-05-01",
    }
    body.update(overrides)
    return TontineCreate(**body)


# --- TontineCreate ------------------------------------------------------------

def test_create_defaults_and_draft():
    draft = _create(name="  Quartier  ").to_draft()
    assert isinstance(draft, TontineDraft)
    assert draft.name == "Quartier"
    assert draft.contribution_kind == ContributionKind.MONEY
    assert draft.cadence == Cadence.MONTHLY
    assert draft.collection_day == Weekday.FRIDAY
    assert draft.start_date == date(2025, 5, 1)
    assert draft.capacity is None


@pytest.mark.parametrize("overrides", [
    {"name": ""},
    {"name": "   "},
    {"name": "x" * 121},
    {"contribution_amount": 0},
    {"capacity": 0},
    {"cadence": "daily"},
    {"collection_day": "someday"},
    {"end_date": "2025-04-30"},
])
def test_create_rejects_invalid_fields(overrides):
    with pytest.raises(ValidationError):
        _create(**overrides)


def test_end_date_may_equal_start_date():
    assert _create(end_date="2025-05-01").end_date == date(2025, 5, 1)


def test_collection_window_for_savings():
    created = _create(
        contribution_kind="savings",
        collection_window_start="2025-05-01",
        collection_window_end="2025-05-31",
    )
    assert created.to_draft().collection_window_end == date(2025, 5, 31)


@pytest.mark.parametrize("overrides", [
    {"collection_window_start": "2025-05-01", "collection_window_end": "2025-05-31"},
    {"contribution_kind": "savings", "collection_window_start": "2025-05-01"},
    {
        "contribution_kind": "savings",
        "collection_window_start": "2025-05-31",
        "collection_window_end": "2025-05-01",
    },
])
def test_collection_window_rules(overrides):
    with pytest.raises(ValidationError):
        _create(**overrides)


def test_update_allows_partial_edits():
    update = TontineUpdate(contribution_amount=500)
    assert update.model_dump(exclude_unset=True) == {"contribution_amount": 500}
    with pytest.raises(ValidationError):
        TontineUpdate(name="  ")


# --- Participants -------------------------------------------------------------

def test_join_request_strips_display_name():
    profile = JoinRequest(display_name="  Awa ", email="awa@example.com").to_profile()
    assert profile.display_name == "Awa"
    assert profile.email == "awa@example.com"
    assert profile.phone is None


def test_join_request_rejects_blank_display_name():
    with pytest.raises(ValidationError):
        JoinRequest(display_name="   ")


def test_reorder_request_leaves_emptiness_to_order_rules():
    assert ReorderRequest(order=[]).order == []
    with pytest.raises(ValidationError):
        ReorderRequest(order="a,b")


# --- Payments -----------------------------------------------------------------

def test_payment_submit_blank_period_becomes_none():
    assert PaymentSubmit(amount=100, period="   ").period is None
    assert PaymentSubmit(amount=100, period=" May 2025 ").period == "May 2025"


def test_payment_submit_requires_positive_amount():
    with pytest.raises(ValidationError):
        PaymentSubmit(amount=0)


def test_payment_validate_decisions():
    assert PaymentValidate(decision="confirm").decision == ValidationDecision.CONFIRM
    with pytest.raises(ValidationError):
        PaymentValidate(decision="maybe")
